"""Модели данных для изображений и параметров преобразования.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutputFormat(str, Enum):
    """Целевой формат кодирования."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """Разбирает имя формата; `jpg` считается синонимом `jpeg`.

        Raises:
            ValueError: если формат неизвестен.
        """
        key = str(value).strip().lower()
        if key == "jpg":
            key = "jpeg"
        return cls(key)

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pil_format(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class ImageInput:
    """Входное изображение одной записи.

    Fields:
        data: Исходные байты.
        source_name: Имя файла источника, если известно.
        source_mime: MIME-тип источника, если известен.
    """
    data: bytes
    source_name: Optional[str] = None
    source_mime: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ResizeSpec:
    """Параметры изменения размера.

    Fields:
        width: Целевая ширина, px (None: не ограничена).
        height: Целевая высота, px (None: не ограничена).
        maintain_aspect_ratio: Вписать в рамку с сохранением пропорций.
        allow_enlargement: Разрешить увеличение сверх исходного размера.
    """
    width: Optional[int] = None
    height: Optional[int] = None
    maintain_aspect_ratio: bool = True
    allow_enlargement: bool = False

    @property
    def is_noop(self) -> bool:
        return not (self.width and self.width > 0) and not (self.height and self.height > 0)


@dataclass(frozen=True)
class EncodeOptions:
    format: OutputFormat
    quality: int
    strip_metadata: bool = True
    png_palette: bool = True


@dataclass(frozen=True)
class CompressionResult:
    """Результат сжатия и производные метаданные выхода."""
    data: bytes
    original_size: int
    new_size: int
    percent_reduction: float
    format: OutputFormat
    file_name: str
    mime_type: str

    def summary(self) -> dict:
        """Сводка для поля `compression` выходной записи."""
        return {
            "originalSize": self.original_size,
            "newSize": self.new_size,
            "percentReduction": self.percent_reduction,
            "format": self.format.value,
        }
