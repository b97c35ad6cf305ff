from __future__ import annotations

import pytest

from compress_image.errors import ConfigurationError
from compress_image.host.memory_host import MemoryHost
from compress_image.models.image_model import OutputFormat, ResizeSpec
from compress_image.models.item_model import Item
from compress_image.models.options_model import CompressOptions, parse_resize


def test_defaults() -> None:
    options = CompressOptions.from_mapping({})
    assert options.input_source == "binary"
    assert options.binary_property_name == "data"
    assert options.base64_field_name == "imageBase64"
    assert options.output_binary_property_name == "data"
    assert options.format is OutputFormat.JPEG
    assert options.strip_metadata is True
    assert options.quality == 80
    assert options.resize == ResizeSpec()
    assert options.max_input_size_mb == 25


def test_quality_is_clamped_not_rejected() -> None:
    assert CompressOptions.from_mapping({"quality": 140}).quality == 100
    assert CompressOptions.from_mapping({"quality": -3}).quality == 0
    assert CompressOptions.from_mapping({"quality": 72.6}).quality == 73


@pytest.mark.parametrize("value", ["jpg", "JPEG", "png", "webp", "avif"])
def test_known_formats(value: str) -> None:
    assert CompressOptions.from_mapping({"format": value}).format.value == value.lower().replace("jpg", "jpeg")


@pytest.mark.parametrize(
    "values",
    [
        {"format": "gif"},
        {"input_source": "url"},
        {"max_input_size_mb": 0},
        {"max_input_size_mb": 513},
        {"quality": "high"},
        {"quality": float("nan")},
        {"strip_metadata": "yes"},
        {"output_binary_property_name": ""},
        {"resize": [100, 100]},
        {"resize": {"width": "wide"}},
    ],
)
def test_invalid_values_are_rejected(values) -> None:
    with pytest.raises(ConfigurationError):
        CompressOptions.from_mapping(values)


def test_parse_resize_floors_and_ignores_non_positive() -> None:
    spec = parse_resize({"width": 120.9, "height": 0, "maintain_aspect_ratio": False})
    assert spec == ResizeSpec(width=120, height=None, maintain_aspect_ratio=False)
    assert parse_resize({}).maintain_aspect_ratio is True
    assert parse_resize(None) == ResizeSpec()


def test_encode_options_follow_configuration() -> None:
    options = CompressOptions.from_mapping({"format": "png", "quality": 50, "strip_metadata": False})
    encode = options.encode
    assert encode.format is OutputFormat.PNG
    assert encode.quality == 50
    assert encode.strip_metadata is False


def test_from_host_reads_per_item_overrides() -> None:
    host = MemoryHost(
        [Item(), Item()],
        {"format": "webp", "quality": 60},
        item_parameters={1: {"quality": 20}},
    )
    assert CompressOptions.from_host(host, 0).quality == 60
    assert CompressOptions.from_host(host, 1).quality == 20
    assert CompressOptions.from_host(host, 1).format is OutputFormat.WEBP


@pytest.mark.parametrize("key", ["maintain_aspect_ratio", "allow_enlargement"])
@pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
def test_resize_flags_must_be_booleans(key: str, value) -> None:
    with pytest.raises(ConfigurationError):
        parse_resize({"width": 10, key: value})


def test_resize_flag_defaults() -> None:
    spec = parse_resize({"width": 10})
    assert spec.maintain_aspect_ratio is True
    assert spec.allow_enlargement is False
