"""Кодек изображений поверх Pillow.

Принципы:
- SRP: класс отвечает только за операции кодека (decode, ориентация, resize,
  метаданные, encode); порядок шагов задаёт `TransformPipeline`.
- DIP: конвейер зависит от протокола `ImageCodec`, а не от Pillow напрямую.
- Ошибки Pillow не выходят наружу: они заворачиваются в `DecodeError` / `TransformError`.
"""
from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError, features
from PIL.PngImagePlugin import PngInfo

from compress_image.errors import DecodeError, TransformError
from compress_image.models.image_model import EncodeOptions, OutputFormat
from compress_image.services.quality_service import encoder_quality

# ключи `Image.info`, которые Pillow может записать в выход сам
METADATA_INFO_KEYS = ("exif", "icc_profile", "xmp", "XML:com.adobe.xmp", "comment")
XMP_PNG_KEY = "XML:com.adobe.xmp"

JPEG_MODES = ("1", "L", "RGB", "CMYK")
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


@dataclass(frozen=True)
class ImageMetadata:
    """Метаданные, которые нужно перенести в выход (пустые поля означают удаление)."""
    exif: Optional[bytes] = None
    icc_profile: Optional[bytes] = None
    xmp: Optional[bytes] = None

    @property
    def is_empty(self) -> bool:
        return not (self.exif or self.icc_profile or self.xmp)


class ImageCodec(Protocol):
    def decode(self, data: bytes) -> Image.Image:
        ...

    def auto_orient(self, image: Image.Image) -> Image.Image:
        ...

    def resize(self, image: Image.Image, size: Tuple[int, int]) -> Image.Image:
        ...

    def apply_metadata_policy(self, image: Image.Image, strip: bool) -> ImageMetadata:
        ...

    def encode(self, image: Image.Image, options: EncodeOptions, metadata: ImageMetadata) -> bytes:
        ...

    def can_encode(self, fmt: OutputFormat) -> bool:
        ...


def _to_bytes(value: object) -> Optional[bytes]:
    if not value:
        return None
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


class ImageService:
    def decode(self, data: bytes) -> Image.Image:
        """Открывает байты как изображение и полностью загружает пиксели.

        Raises:
            DecodeError: если байты не распознаны, повреждены или похожи на decompression bomb.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise DecodeError("Input is not a supported image") from exc
        except (OSError, ValueError, SyntaxError) as exc:
            raise DecodeError("Input image is corrupt or truncated") from exc
        return image

    def auto_orient(self, image: Image.Image) -> Image.Image:
        """Поворачивает по тегу EXIF Orientation; тег в результате удалён.

        Raises:
            DecodeError: если блок EXIF повреждён.
        """
        try:
            return ImageOps.exif_transpose(image)
        except (SyntaxError, struct.error, ValueError) as exc:
            raise DecodeError("Input image has a corrupt EXIF block") from exc

    def resize(self, image: Image.Image, size: Tuple[int, int]) -> Image.Image:
        return image.resize(size, Image.Resampling.LANCZOS)

    def apply_metadata_policy(self, image: Image.Image, strip: bool) -> ImageMetadata:
        """Собирает EXIF/ICC/XMP для переноса или убирает их из `image.info`.

        Pillow для части форматов берёт ICC/EXIF из `info` без явного запроса,
        поэтому при удалении ключи стираются с самого изображения.
        """
        if strip:
            for key in METADATA_INFO_KEYS:
                image.info.pop(key, None)
            return ImageMetadata()

        try:
            exif = image.getexif()
            exif_bytes = exif.tobytes() if len(exif) else None
        except (SyntaxError, struct.error, ValueError) as exc:
            raise DecodeError("Input image has a corrupt EXIF block") from exc
        return ImageMetadata(
            exif=exif_bytes,
            icc_profile=_to_bytes(image.info.get("icc_profile")),
            xmp=_to_bytes(image.info.get("xmp") or image.info.get(XMP_PNG_KEY)),
        )

    def encode(self, image: Image.Image, options: EncodeOptions, metadata: ImageMetadata) -> bytes:
        """Кодирует изображение в целевой формат.

        Raises:
            TransformError: если кодер отверг изображение или параметры.
        """
        fmt = options.format
        param = encoder_quality(options.quality, fmt)
        save_kwargs: Dict[str, object] = {}

        try:
            if fmt is OutputFormat.JPEG:
                if image.mode not in JPEG_MODES:
                    image = image.convert("RGB")
                save_kwargs.update(quality=param, optimize=True, progressive=True)
            elif fmt is OutputFormat.PNG:
                image = self._prepare_png(image, options.png_palette)
                # optimize=True заставил бы Pillow игнорировать compress_level
                save_kwargs.update(compress_level=param, optimize=False)
            else:
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA" if image.has_transparency_data else "RGB")
                save_kwargs["quality"] = param

            save_kwargs.update(self._metadata_kwargs(fmt, metadata))

            buffer = io.BytesIO()
            image.save(buffer, format=fmt.pil_format, **save_kwargs)
        except (OSError, ValueError, KeyError) as exc:
            raise TransformError(f"Failed to encode image as {fmt.value}") from exc
        return buffer.getvalue()

    def can_encode(self, fmt: OutputFormat) -> bool:
        if fmt is OutputFormat.AVIF:
            return bool(features.check("avif"))
        Image.init()
        return fmt.pil_format in Image.SAVE

    # ---- Helpers ----
    def _prepare_png(self, image: Image.Image, palette: bool) -> Image.Image:
        if palette and image.mode in ("RGB", "RGBA"):
            # медианное сечение не поддерживает альфу
            method = Image.Quantize.FASTOCTREE if image.mode == "RGBA" else Image.Quantize.MEDIANCUT
            return image.quantize(colors=256, method=method)
        if image.mode not in PNG_MODES:
            return image.convert("RGBA" if image.has_transparency_data else "RGB")
        return image

    def _metadata_kwargs(self, fmt: OutputFormat, metadata: ImageMetadata) -> Dict[str, object]:
        kwargs: Dict[str, object] = {}
        if metadata.exif:
            kwargs["exif"] = metadata.exif
        if metadata.icc_profile:
            kwargs["icc_profile"] = metadata.icc_profile
        if metadata.xmp:
            if fmt is OutputFormat.PNG:
                info = PngInfo()
                info.add_itxt(XMP_PNG_KEY, metadata.xmp.decode("utf-8", errors="replace"))
                kwargs["pnginfo"] = info
            else:
                kwargs["xmp"] = metadata.xmp
        return kwargs
