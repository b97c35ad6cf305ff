"""Проверка размера входа до декодирования: ограничивает пиковую память на запись."""
from __future__ import annotations

import math

from compress_image.errors import SizeExceededError

MEBIBYTE = 1024 * 1024


def max_bytes_for(max_megabytes: float) -> int:
    return max(1, int(math.floor(max_megabytes))) * MEBIBYTE


def guard_size(byte_length: int, max_megabytes: float) -> None:
    """Бросает `SizeExceededError`, если вход больше лимита.

    Args:
        byte_length: Размер входа в байтах.
        max_megabytes: Лимит в МБ; дробная часть отбрасывается, минимум 1.
    """
    max_bytes = max_bytes_for(max_megabytes)
    if byte_length > max_bytes:
        raise SizeExceededError(byte_length, max_bytes)
