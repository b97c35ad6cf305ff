from __future__ import annotations

from typing import Callable

import pytest
from PIL import Image

from compress_image.models.item_model import BinaryData, Item
from tests.imaging import encode_image, noise_image


@pytest.fixture
def make_image() -> Callable[..., Image.Image]:
    return noise_image


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image(noise_image(64, 48))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image(noise_image(64, 48), "JPEG")


@pytest.fixture
def make_item() -> Callable[..., Item]:
    def factory(data: bytes, file_name: str = "photo.png", slot: str = "data", **json) -> Item:
        return Item(
            json=dict(json),
            binary={slot: BinaryData(data=data, mime_type="image/png", file_name=file_name, file_extension="png")},
        )

    return factory
