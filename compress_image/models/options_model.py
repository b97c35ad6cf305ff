"""Плоская конфигурация шага сжатия.

Принципы:
- Проверка выполняется один раз на границе (при чтении параметров записи);
  дальше по конвейеру значения считаются валидными.
- Видимость полей в редакторе относится к UI, здесь её нет.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from compress_image.errors import ConfigurationError
from compress_image.host.base import Host
from compress_image.models.image_model import EncodeOptions, OutputFormat, ResizeSpec
from compress_image.services.quality_service import clamp_quality

INPUT_SOURCES = ("binary", "base64")
MIN_INPUT_SIZE_MB = 1
MAX_INPUT_SIZE_MB = 512


def _as_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f'Parameter "{name}" must be a number')
    if math.isnan(value):
        raise ConfigurationError(f'Parameter "{name}" must be a number')
    return float(value)


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f'Parameter "{name}" must be a boolean')
    return value


def _as_name(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f'Parameter "{name}" must be a non-empty string')
    return value


def _dimension(name: str, value: Any) -> Optional[int]:
    # 0 или отрицательное значение: ось не ограничена
    if value is None:
        return None
    number = _as_number(name, value)
    if math.isinf(number):
        raise ConfigurationError(f'Parameter "{name}" must be finite')
    return int(math.floor(number)) if number > 0 else None


def parse_resize(value: Any) -> ResizeSpec:
    """Строит `ResizeSpec` из коллекции `{width, height, maintain_aspect_ratio, allow_enlargement}`."""
    if value is None:
        return ResizeSpec()
    if not isinstance(value, Mapping):
        raise ConfigurationError('Parameter "resize" must be a mapping')
    defaults = ResizeSpec()
    return ResizeSpec(
        width=_dimension("resize.width", value.get("width")),
        height=_dimension("resize.height", value.get("height")),
        maintain_aspect_ratio=_as_bool(
            "resize.maintain_aspect_ratio", value.get("maintain_aspect_ratio", defaults.maintain_aspect_ratio)
        ),
        allow_enlargement=_as_bool(
            "resize.allow_enlargement", value.get("allow_enlargement", defaults.allow_enlargement)
        ),
    )


@dataclass(frozen=True)
class CompressOptions:
    """Параметры одной записи.

    Fields:
        input_source: "binary" | "base64".
        binary_property_name: Слот с исходным изображением.
        base64_field_name: JSON-поле со строкой Base64.
        output_binary_property_name: Слот для результата.
        format: Целевой формат.
        strip_metadata: Удалять EXIF/ICC/XMP.
        quality: Качество 0..100 (уже ограничено).
        resize: Параметры изменения размера.
        png_palette: Квантовать PNG в палитру.
        max_input_size_mb: Лимит входа, МБ (1..512).
    """
    input_source: str = "binary"
    binary_property_name: str = "data"
    base64_field_name: str = "imageBase64"
    output_binary_property_name: str = "data"
    format: OutputFormat = OutputFormat.JPEG
    strip_metadata: bool = True
    quality: int = 80
    resize: ResizeSpec = field(default_factory=ResizeSpec)
    png_palette: bool = True
    max_input_size_mb: float = 25

    @property
    def encode(self) -> EncodeOptions:
        return EncodeOptions(
            format=self.format,
            quality=self.quality,
            strip_metadata=self.strip_metadata,
            png_palette=self.png_palette,
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "CompressOptions":
        """Проверяет и нормализует сырые значения параметров.

        Отсутствующие ключи получают значения по умолчанию. Качество
        не отвергается, а ограничивается диапазоном [0, 100].

        Raises:
            ConfigurationError: если значение имеет неверный тип или вне диапазона.
        """
        defaults = cls()

        input_source = values.get("input_source", defaults.input_source)
        if input_source not in INPUT_SOURCES:
            raise ConfigurationError(
                f'Parameter "input_source" must be one of {", ".join(INPUT_SOURCES)}'
            )

        raw_format = values.get("format", defaults.format.value)
        try:
            fmt = OutputFormat.parse(raw_format)
        except ValueError:
            raise ConfigurationError(f'Unsupported output format "{raw_format}"') from None

        max_mb = _as_number("max_input_size_mb", values.get("max_input_size_mb", defaults.max_input_size_mb))
        if not MIN_INPUT_SIZE_MB <= max_mb <= MAX_INPUT_SIZE_MB:
            raise ConfigurationError(
                f'Parameter "max_input_size_mb" must be between {MIN_INPUT_SIZE_MB} and {MAX_INPUT_SIZE_MB}'
            )

        return cls(
            input_source=input_source,
            binary_property_name=_as_name(
                "binary_property_name", values.get("binary_property_name", defaults.binary_property_name)
            ),
            base64_field_name=_as_name(
                "base64_field_name", values.get("base64_field_name", defaults.base64_field_name)
            ),
            output_binary_property_name=_as_name(
                "output_binary_property_name",
                values.get("output_binary_property_name", defaults.output_binary_property_name),
            ),
            format=fmt,
            strip_metadata=_as_bool("strip_metadata", values.get("strip_metadata", defaults.strip_metadata)),
            quality=clamp_quality(_as_number("quality", values.get("quality", defaults.quality))),
            resize=parse_resize(values.get("resize", {})),
            png_palette=_as_bool("png_palette", values.get("png_palette", defaults.png_palette)),
            max_input_size_mb=max_mb,
        )

    @classmethod
    def from_host(cls, host: Host, index: int) -> "CompressOptions":
        names = (
            "input_source",
            "binary_property_name",
            "base64_field_name",
            "output_binary_property_name",
            "format",
            "strip_metadata",
            "quality",
            "resize",
            "png_palette",
            "max_input_size_mb",
        )
        sentinel = object()
        values = {}
        for name in names:
            value = host.get_parameter(name, index, sentinel)
            if value is not sentinel:
                values[name] = value
        return cls.from_mapping(values)
