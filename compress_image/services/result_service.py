"""Сборка результата: статистика сжатия, имя файла и MIME-тип выхода."""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional, Tuple, Union

from compress_image.models.image_model import CompressionResult, ImageInput, OutputFormat

DEFAULT_BASE_NAME = "image"
FALLBACK_MIME = "application/octet-stream"
FALLBACK_EXTENSION = "bin"

_FORMAT_TABLE = {
    "jpg": ("image/jpeg", "jpg"),
    "jpeg": ("image/jpeg", "jpg"),
    "png": ("image/png", "png"),
    "webp": ("image/webp", "webp"),
    "avif": ("image/avif", "avif"),
}


def mime_and_extension(fmt: Union[OutputFormat, str]) -> Tuple[str, str]:
    key = fmt.value if isinstance(fmt, OutputFormat) else str(fmt).lower()
    return _FORMAT_TABLE.get(key, (FALLBACK_MIME, FALLBACK_EXTENSION))


def percent_reduction(original_size: int, new_size: int) -> float:
    if original_size == 0:
        return 0.0
    return (original_size - new_size) / original_size * 100


def output_file_name(source_name: Optional[str], extension: str) -> str:
    """`photo.tiff` + `png` → `photo.png`; без имени источника — `image.<ext>`."""
    base = PurePosixPath(source_name.replace("\\", "/")).stem if source_name else ""
    return f"{base or DEFAULT_BASE_NAME}.{extension}"


class ResultService:
    def assemble(self, original: ImageInput, encoded: bytes, fmt: OutputFormat) -> CompressionResult:
        mime, extension = mime_and_extension(fmt)
        original_size = original.size_bytes
        new_size = len(encoded)
        return CompressionResult(
            data=encoded,
            original_size=original_size,
            new_size=new_size,
            percent_reduction=percent_reduction(original_size, new_size),
            format=fmt,
            file_name=output_file_name(original.source_name, extension),
            mime_type=mime,
        )
