"""Хост в памяти: для CLI и тестов."""
from __future__ import annotations

from pathlib import PurePath
from typing import Any, Dict, List, Mapping, Optional, Sequence

from compress_image.errors import ConfigurationError, MissingInputError
from compress_image.host.base import MISSING
from compress_image.models.item_model import BinaryData, Item


class MemoryHost:
    """Реализация `Host` поверх списков и словарей.

    Args:
        items: Входные записи.
        parameters: Общие параметры для всех записей.
        item_parameters: Переопределения параметров по индексу записи.
        continue_on_fail: Режим устойчивости к ошибкам записи.
    """

    def __init__(
        self,
        items: Sequence[Item],
        parameters: Optional[Mapping[str, Any]] = None,
        *,
        item_parameters: Optional[Mapping[int, Mapping[str, Any]]] = None,
        continue_on_fail: bool = False,
    ) -> None:
        self._items: List[Item] = list(items)
        self._parameters: Dict[str, Any] = dict(parameters or {})
        self._item_parameters = {int(k): dict(v) for k, v in (item_parameters or {}).items()}
        self._continue_on_fail = continue_on_fail
        self.stored: List[BinaryData] = []

    def get_input_records(self) -> Sequence[Item]:
        return self._items

    def get_parameter(self, name: str, index: int, default: Any = MISSING) -> Any:
        overrides = self._item_parameters.get(index, {})
        if name in overrides:
            return overrides[name]
        if name in self._parameters:
            return self._parameters[name]
        if default is MISSING:
            raise ConfigurationError(f'Parameter "{name}" is not set')
        return default

    def get_binary_payload(self, index: int, slot: str) -> bytes:
        binary = self._items[index].binary.get(slot)
        if binary is None:
            raise MissingInputError(f'No binary data found under property "{slot}"', source=slot)
        return binary.data

    def store_binary_payload(self, data: bytes, file_name: str, mime_type: str) -> BinaryData:
        suffix = PurePath(file_name).suffix
        stored = BinaryData(
            data=bytes(data),
            mime_type=mime_type,
            file_name=file_name,
            file_extension=suffix[1:] if suffix else None,
        )
        self.stored.append(stored)
        return stored

    def continue_on_failure_enabled(self) -> bool:
        return self._continue_on_fail
