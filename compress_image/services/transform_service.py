"""Конвейер преобразования одного изображения.

Шаги строго по порядку: decode + ориентация по EXIF → resize → политика
метаданных → encode. Каждый шаг является предусловием следующего.
"""
from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass, field
from typing import Optional, Tuple

from compress_image.errors import CompressImageError, TransformError
from compress_image.models.image_model import EncodeOptions, ImageInput, ResizeSpec
from compress_image.services.image_service import ImageCodec, ImageService

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def plan_resize(size: Tuple[int, int], spec: ResizeSpec) -> Optional[Tuple[int, int]]:
    """Вычисляет целевой размер или None, если resize не нужен.

    - С сохранением пропорций: вписать в рамку из заданных сторон.
    - Без сохранения и с обеими сторонами: точный размер, каждая ось отдельно.
    - Без сохранения и с одной стороной: недостающая ось не ограничена,
      т.е. поведение как у рамки.
    Без `allow_enlargement` ни одна сторона не превышает исходную.
    """
    if spec.is_noop:
        return None
    src_w, src_h = size
    width = spec.width if spec.width and spec.width > 0 else None
    height = spec.height if spec.height and spec.height > 0 else None

    if not spec.maintain_aspect_ratio and width and height:
        if spec.allow_enlargement:
            target = (width, height)
        else:
            target = (min(width, src_w), min(height, src_h))
    else:
        ratios = []
        if width:
            ratios.append(width / src_w)
        if height:
            ratios.append(height / src_h)
        ratio = min(ratios)
        if not spec.allow_enlargement:
            ratio = min(ratio, 1.0)
        target = (
            width if width and ratio == width / src_w else max(1, _round_half_up(src_w * ratio)),
            height if height and ratio == height / src_h else max(1, _round_half_up(src_h * ratio)),
        )

    if target == (src_w, src_h):
        return None
    return target


@dataclass
class TransformPipeline:
    """Связывает кодек и правила resize/качества в один вызов `transform`."""
    codec: ImageCodec = field(default_factory=ImageService)

    def transform(self, image_input: ImageInput, resize: ResizeSpec, encode: EncodeOptions) -> bytes:
        """Преобразует вход и возвращает закодированные байты.

        Raises:
            DecodeError: если вход не является поддерживаемым изображением.
            TransformError: при любом другом сбое шагов конвейера.
        """
        image = self.codec.decode(image_input.data)
        try:
            image = self.codec.auto_orient(image)

            target = plan_resize(image.size, resize)
            if target is not None:
                logger.debug("resizing %sx%s -> %sx%s", image.width, image.height, *target)
                image = self.codec.resize(image, target)

            metadata = self.codec.apply_metadata_policy(image, encode.strip_metadata)
            return self.codec.encode(image, encode, metadata)
        except CompressImageError:
            raise
        except (OSError, ValueError, KeyError, SyntaxError, struct.error) as exc:
            raise TransformError(f"Image transform failed: {exc.__class__.__name__}") from exc
