from __future__ import annotations

import base64

import pytest

from compress_image.errors import MissingInputError
from compress_image.host.memory_host import MemoryHost
from compress_image.models.item_model import Item
from compress_image.models.options_model import CompressOptions
from compress_image.services.input_service import InputService, decode_base64, strip_data_uri

BASE64_OPTIONS = CompressOptions(input_source="base64", base64_field_name="img")


def _resolve(item: Item, options: CompressOptions):
    host = MemoryHost([item])
    return InputService().resolve(host, 0, item, options)


def test_binary_mode_reads_slot_and_file_name(make_item, png_bytes) -> None:
    image_input = _resolve(make_item(png_bytes, file_name="photo.tiff"), CompressOptions())
    assert image_input.data == png_bytes
    assert image_input.source_name == "photo.tiff"
    assert image_input.source_mime == "image/png"


def test_binary_mode_missing_slot_names_the_slot(make_item, png_bytes) -> None:
    options = CompressOptions(binary_property_name="picture")
    with pytest.raises(MissingInputError) as info:
        _resolve(make_item(png_bytes), options)
    assert info.value.source == "picture"
    assert '"picture"' in str(info.value)


def test_base64_mode_decodes_field(png_bytes) -> None:
    item = Item(json={"img": base64.b64encode(png_bytes).decode()})
    image_input = _resolve(item, BASE64_OPTIONS)
    assert image_input.data == png_bytes
    assert image_input.source_name == "input"
    assert image_input.source_mime is None


def test_data_uri_prefix_is_stripped() -> None:
    with_prefix = _resolve(Item(json={"img": "data:image/png;base64,AAAA"}), BASE64_OPTIONS)
    raw = _resolve(Item(json={"img": "AAAA"}), BASE64_OPTIONS)
    assert with_prefix.data == raw.data == b"\x00\x00\x00"
    assert with_prefix.source_mime == "image/png"


@pytest.mark.parametrize("value", [None, "", 42, ["AAAA"]])
def test_base64_field_must_be_non_empty_text(value) -> None:
    json = {} if value is None else {"img": value}
    with pytest.raises(MissingInputError) as info:
        _resolve(Item(json=json), BASE64_OPTIONS)
    assert info.value.source == "img"


def test_strip_data_uri_leaves_plain_payload_alone() -> None:
    assert strip_data_uri("AAAA") == ("AAAA", None)
    assert strip_data_uri("data:image/webp;base64,QUJD") == ("QUJD", "image/webp")


def test_decode_base64_tolerates_whitespace_padding_and_urlsafe() -> None:
    payload = bytes(range(250, 256)) + b"hello?>"
    standard = base64.b64encode(payload).decode()
    urlsafe = base64.urlsafe_b64encode(payload).decode().rstrip("=")
    wrapped = "\n".join(standard[i:i + 4] for i in range(0, len(standard), 4))
    assert decode_base64(urlsafe) == payload
    assert decode_base64(wrapped) == payload
    assert decode_base64(standard + "*") == payload
