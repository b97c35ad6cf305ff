"""Записи хоста: бинарные слоты, структурированные данные и итог обработки записи."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from compress_image.errors import CompressImageError


@dataclass(frozen=True)
class BinaryData:
    """Именованный бинарный слот записи."""
    data: bytes
    mime_type: Optional[str] = None
    file_name: Optional[str] = None
    file_extension: Optional[str] = None

    @property
    def file_size(self) -> int:
        return len(self.data)


@dataclass
class Item:
    """Запись конвейера: JSON-данные плюс карта бинарных слотов."""
    json: Dict[str, Any] = field(default_factory=dict)
    binary: Dict[str, BinaryData] = field(default_factory=dict)


@dataclass(frozen=True)
class ItemSuccess:
    index: int
    item: Item

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ItemFailure:
    """Ошибка записи; `item` содержит запись с полем `error` и нетронутыми исходными слотами."""
    index: int
    error: CompressImageError
    item: Item

    @property
    def ok(self) -> bool:
        return False


ItemResult = Union[ItemSuccess, ItemFailure]
