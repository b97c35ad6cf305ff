"""Контракт хоста, в который встроен шаг сжатия.

Хост отдаёт записи и параметры, хранит бинарные данные. Ядро зависит только
от этого протокола (DIP), конкретная реализация: `MemoryHost` или адаптер
к движку автоматизации.
"""
from __future__ import annotations

from typing import Any, Protocol, Sequence

from compress_image.models.item_model import BinaryData, Item

MISSING: Any = object()


class Host(Protocol):
    def get_input_records(self) -> Sequence[Item]:
        ...

    def get_parameter(self, name: str, index: int, default: Any = MISSING) -> Any:
        ...

    def get_binary_payload(self, index: int, slot: str) -> bytes:
        ...

    def store_binary_payload(self, data: bytes, file_name: str, mime_type: str) -> BinaryData:
        ...

    def continue_on_failure_enabled(self) -> bool:
        ...
