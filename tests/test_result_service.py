from __future__ import annotations

import pytest

from compress_image.models.image_model import ImageInput, OutputFormat
from compress_image.services.result_service import (
    ResultService,
    mime_and_extension,
    output_file_name,
    percent_reduction,
)


def test_percent_reduction_zero_original() -> None:
    assert percent_reduction(0, 0) == 0
    assert percent_reduction(0, 500) == 0


@pytest.mark.parametrize(("original", "new"), [(1000, 250), (3, 1), (100, 100), (10, 35)])
def test_percent_reduction_formula(original: int, new: int) -> None:
    assert percent_reduction(original, new) == pytest.approx((original - new) / original * 100)


def test_percent_reduction_negative_when_output_grows() -> None:
    assert percent_reduction(100, 150) == pytest.approx(-50.0)


@pytest.mark.parametrize(
    ("source", "extension", "expected"),
    [
        ("photo.tiff", "png", "photo.png"),
        ("archive.tar.gz", "webp", "archive.tar.webp"),
        ("dir/sub/pic.jpeg", "jpg", "pic.jpg"),
        ("C:\\images\\scan.bmp", "avif", "scan.avif"),
        ("noext", "png", "noext.png"),
        (None, "png", "image.png"),
        ("", "jpg", "image.jpg"),
    ],
)
def test_output_file_name(source, extension: str, expected: str) -> None:
    assert output_file_name(source, extension) == expected


@pytest.mark.parametrize(
    ("fmt", "expected"),
    [
        ("jpg", ("image/jpeg", "jpg")),
        ("jpeg", ("image/jpeg", "jpg")),
        (OutputFormat.JPEG, ("image/jpeg", "jpg")),
        (OutputFormat.PNG, ("image/png", "png")),
        ("webp", ("image/webp", "webp")),
        (OutputFormat.AVIF, ("image/avif", "avif")),
        ("gif", ("application/octet-stream", "bin")),
    ],
)
def test_mime_table(fmt, expected) -> None:
    assert mime_and_extension(fmt) == expected


def test_assemble_combines_sizes_and_names() -> None:
    original = ImageInput(data=b"x" * 200, source_name="holiday.png")
    result = ResultService().assemble(original, b"y" * 50, OutputFormat.WEBP)
    assert result.original_size == 200
    assert result.new_size == 50
    assert result.percent_reduction == pytest.approx(75.0)
    assert result.file_name == "holiday.webp"
    assert result.mime_type == "image/webp"
    assert result.summary() == {
        "originalSize": 200,
        "newSize": 50,
        "percentReduction": pytest.approx(75.0),
        "format": "webp",
    }
