"""Единая шкала качества 0..100 и её отображение в параметры кодеров.

PNG не имеет «качества»: шкала переводится в уровень сжатия zlib 0..9,
обратно пропорционально (выше качество, ниже уровень). Округление: половина
вверх, считается в целых числах, поэтому таблица воспроизводима точно:
100→0, 80→2, 50→5, 0→9.
"""
from __future__ import annotations

import math

from compress_image.models.image_model import OutputFormat

MIN_QUALITY = 0
MAX_QUALITY = 100
MIN_PNG_LEVEL = 0
MAX_PNG_LEVEL = 9


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def clamp_quality(quality: float) -> int:
    """Ограничивает качество диапазоном [0, 100] и округляет половину вверх."""
    bounded = clamp(quality, MIN_QUALITY, MAX_QUALITY)
    return int(math.floor(bounded + 0.5))


def png_compression_level(quality: float) -> int:
    q = clamp_quality(quality)
    # round((100 - q) * 9 / 100) с округлением половины вверх, без float
    level = ((MAX_QUALITY - q) * MAX_PNG_LEVEL * 2 + MAX_QUALITY) // (MAX_QUALITY * 2)
    return int(clamp(level, MIN_PNG_LEVEL, MAX_PNG_LEVEL))


def encoder_quality(quality: float, fmt: OutputFormat) -> int:
    """Параметр кодера для формата: уровень сжатия для PNG, само качество для остальных."""
    if fmt is OutputFormat.PNG:
        return png_compression_level(quality)
    return clamp_quality(quality)
