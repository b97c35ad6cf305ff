"""Получение исходных байтов изображения из записи.

Принципы:
- SRP: класс только находит и декодирует вход, не проверяет размер и не открывает изображение.
- OCP: новые источники (URL, файл) добавляются отдельными методами `_from_*`.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional, Tuple

from compress_image.errors import DecodeError, MissingInputError
from compress_image.host.base import Host
from compress_image.models.image_model import ImageInput
from compress_image.models.item_model import Item
from compress_image.models.options_model import CompressOptions

logger = logging.getLogger(__name__)

BASE64_SOURCE_NAME = "input"

_DATA_URI_PREFIX = re.compile(r"^data:([^;]+);base64,")
_NON_ALPHABET = re.compile(r"[^A-Za-z0-9+/]")
_URLSAFE = str.maketrans("-_", "+/")


def strip_data_uri(text: str) -> Tuple[str, Optional[str]]:
    """Отрезает префикс `data:<mime>;base64,`; возвращает (payload, mime или None)."""
    match = _DATA_URI_PREFIX.match(text)
    if match is None:
        return text, None
    return text[match.end():], match.group(1)


def decode_base64(text: str) -> bytes:
    """Терпимое декодирование Base64.

    Пробелы и символы вне алфавита отбрасываются, URL-safe алфавит
    принимается, выравнивание `=` восстанавливается.

    Raises:
        DecodeError: если строку всё равно не удалось декодировать.
    """
    cleaned = _NON_ALPHABET.sub("", text.translate(_URLSAFE))
    remainder = len(cleaned) % 4
    if remainder == 1:
        # один лишний символ не несёт целого байта
        cleaned = cleaned[:-1]
    elif remainder:
        cleaned += "=" * (4 - remainder)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("Input is not valid Base64 data") from exc


class InputService:
    def resolve(self, host: Host, index: int, item: Item, options: CompressOptions) -> ImageInput:
        """Возвращает `ImageInput` для записи согласно режиму `options.input_source`.

        Raises:
            MissingInputError: если слот или поле отсутствует или пусто.
            DecodeError: если строку Base64 не удалось декодировать.
        """
        if options.input_source == "binary":
            return self._from_binary(host, index, item, options.binary_property_name)
        return self._from_base64(item, options.base64_field_name)

    def _from_binary(self, host: Host, index: int, item: Item, slot: str) -> ImageInput:
        binary = item.binary.get(slot)
        if binary is None:
            raise MissingInputError(f'No binary data found under property "{slot}"', source=slot)
        data = host.get_binary_payload(index, slot)
        logger.debug("item %d: read %d bytes from binary property %r", index, len(data), slot)
        return ImageInput(data=bytes(data), source_name=binary.file_name, source_mime=binary.mime_type)

    def _from_base64(self, item: Item, field_name: str) -> ImageInput:
        raw = item.json.get(field_name)
        if not isinstance(raw, str) or not raw:
            raise MissingInputError(f'Field "{field_name}" must contain a Base64 string', source=field_name)
        payload, mime = strip_data_uri(raw)
        return ImageInput(data=decode_base64(payload), source_name=BASE64_SOURCE_NAME, source_mime=mime)
