"""Иерархия ошибок шага сжатия.

Принципы:
- Все ошибки относятся к одной записи; `item_index` заполняет контроллер.
- Сообщения описывают условие (поле, лимит), но никогда не содержат сами данные.
"""
from __future__ import annotations

from typing import Optional


class CompressImageError(Exception):
    """Базовая ошибка обработки одной записи."""

    def __init__(self, message: str, *, item_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.item_index = item_index

    def __str__(self) -> str:
        return self.message


class ConfigurationError(CompressImageError):
    """Параметр узла не прошёл проверку."""


class UnsupportedFormatError(ConfigurationError):
    def __init__(self, fmt: str) -> None:
        super().__init__(f'Output format "{fmt}" is not supported by the installed image codec')
        self.format = fmt


class MissingInputError(CompressImageError):
    """Нет бинарного слота или текстового поля с изображением."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class SizeExceededError(CompressImageError):
    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        super().__init__(
            f"Input image is too large ({size_bytes} bytes). Max allowed is {max_bytes} bytes."
        )
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class DecodeError(CompressImageError):
    """Кодек не смог разобрать вход как изображение."""


class TransformError(CompressImageError):
    """Сбой на шагах resize/encode."""
