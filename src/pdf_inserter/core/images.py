# SPDX-License-Identifier: Apache-2.0
"""Image XObject construction using Pillow."""

from __future__ import annotations

import io
import zlib
from dataclasses import dataclass

import pikepdf  # type: ignore[import-untyped]
from pikepdf import Name
from PIL import Image

from .models import Rect

# Pillow modes passed through unchanged for JPEG data
_JPEG_COLORSPACES: dict[str, str] = {
    "L": "/DeviceGray",
    "RGB": "/DeviceRGB",
}


@dataclass
class ImageInfo:
    """Decoded image summary."""

    width: int
    height: int
    format: str | None
    mode: str


def read_image(data: bytes) -> tuple[Image.Image, ImageInfo]:
    """Open image bytes with Pillow.

    Raises:
        PIL.UnidentifiedImageError: If the data is not a supported image.
    """
    image = Image.open(io.BytesIO(data))
    image.load()
    return image, ImageInfo(image.width, image.height, image.format, image.mode)


def fit_rect(rect: Rect, width: float, height: float, keep_proportion: bool) -> Rect:
    """Compute the placement rectangle for an image of ``width`` x ``height``.

    With ``keep_proportion`` the image is scaled to the largest size that
    fits ``rect`` without distortion and centred inside it.
    """
    if not keep_proportion or width <= 0 or height <= 0:
        return rect
    scale = min(rect.width / width, rect.height / height)
    new_w = width * scale
    new_h = height * scale
    x0 = rect.x0 + (rect.width - new_w) / 2
    y0 = rect.y0 + (rect.height - new_h) / 2
    return Rect(x0, y0, x0 + new_w, y0 + new_h)


def _flate_image(
    pdf: pikepdf.Pdf, image: Image.Image, colorspace: str, bits: int = 8
) -> pikepdf.Stream:
    stream = pdf.make_stream(zlib.compress(image.tobytes()))
    stream.Type = Name.XObject
    stream.Subtype = Name.Image
    stream.Width = image.width
    stream.Height = image.height
    stream.ColorSpace = Name(colorspace)
    stream.BitsPerComponent = bits
    stream.Filter = Name.FlateDecode
    return stream


def build_image_xobject(
    pdf: pikepdf.Pdf, data: bytes, image: Image.Image, info: ImageInfo
) -> pikepdf.Stream:
    """Create an image XObject stream for decoded image bytes.

    Grey and RGB JPEG data is embedded as-is with DCTDecode. Everything
    else is converted to DeviceGray or DeviceRGB and Flate-compressed; an
    alpha channel becomes a soft mask.
    """
    if info.format == "JPEG" and info.mode in _JPEG_COLORSPACES:
        stream = pdf.make_stream(data)
        stream.Type = Name.XObject
        stream.Subtype = Name.Image
        stream.Width = info.width
        stream.Height = info.height
        stream.ColorSpace = Name(_JPEG_COLORSPACES[info.mode])
        stream.BitsPerComponent = 8
        stream.Filter = Name.DCTDecode
        return stream

    has_alpha = info.mode in ("RGBA", "LA", "PA") or (
        info.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("LA" if info.mode == "LA" else "RGBA")
        alpha = rgba.getchannel("A")
        base = rgba.convert("L" if info.mode == "LA" else "RGB")
    else:
        alpha = None
        base = image.convert("L" if info.mode in ("1", "L", "I", "I;16", "F") else "RGB")

    colorspace = "/DeviceGray" if base.mode == "L" else "/DeviceRGB"
    stream = _flate_image(pdf, base, colorspace)
    if alpha is not None:
        stream.SMask = _flate_image(pdf, alpha, "/DeviceGray")
    return stream
