from __future__ import annotations

import io
from typing import Optional

import numpy as np
from PIL import Image, ImageCms

ORIENTATION_TAG = 0x0112


def noise_image(width: int, height: int, mode: str = "RGB", seed: int = 0) -> Image.Image:
    channels = len(mode)
    rng = np.random.default_rng(seed)
    # гладкий градиент плюс шум: сжимается, но не тривиально
    gradient = np.linspace(0, 200, width, dtype=np.float32)[None, :, None]
    arr = gradient + rng.integers(0, 55, size=(height, width, channels)).astype(np.float32)
    return Image.fromarray(np.clip(arr, 0, 255).astype(np.uint8))


def encode_image(
    image: Image.Image,
    fmt: str = "PNG",
    *,
    orientation: Optional[int] = None,
    icc: bool = False,
) -> bytes:
    kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[ORIENTATION_TAG] = orientation
        kwargs["exif"] = exif.tobytes()
    if icc:
        kwargs["icc_profile"] = ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB")).tobytes()
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()
