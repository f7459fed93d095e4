# SPDX-License-Identifier: Apache-2.0
"""Tests for image XObject construction."""

import pikepdf
import pytest
from pikepdf import Name
from PIL import UnidentifiedImageError

from pdf_inserter.core.images import build_image_xobject, fit_rect, read_image
from pdf_inserter.core.models import Rect

from conftest import make_image_bytes


class TestFitRect:
    """Tests for fit_rect()."""

    def test_wide_image_in_square(self) -> None:
        """A 2:1 image is centred vertically at full width."""
        assert fit_rect(Rect(0, 0, 50, 50), 200, 100, True) == Rect(0, 12.5, 50, 37.5)

    def test_tall_image_in_square(self) -> None:
        assert fit_rect(Rect(0, 0, 50, 50), 100, 200, True) == Rect(12.5, 0, 37.5, 50)

    def test_stretch(self) -> None:
        rect = Rect(10, 10, 60, 60)
        assert fit_rect(rect, 200, 100, False) is rect

    def test_same_aspect(self) -> None:
        assert fit_rect(Rect(0, 0, 100, 50), 200, 100, True) == Rect(0, 0, 100, 50)


class TestReadImage:
    """Tests for read_image()."""

    def test_png(self) -> None:
        _, info = read_image(make_image_bytes(30, 20))
        assert (info.width, info.height, info.format, info.mode) == (30, 20, "PNG", "RGB")

    def test_garbage(self) -> None:
        with pytest.raises(UnidentifiedImageError):
            read_image(b"not an image")


class TestImageXObject:
    """Tests for build_image_xobject()."""

    def test_jpeg_passthrough(self) -> None:
        """RGB JPEG data is embedded unchanged with DCTDecode."""
        data = make_image_bytes(40, 30, fmt="JPEG")
        pdf = pikepdf.new()
        image, info = read_image(data)
        stream = build_image_xobject(pdf, data, image, info)
        assert stream.Filter == Name.DCTDecode
        assert stream.ColorSpace == Name.DeviceRGB
        assert stream.read_raw_bytes() == data
        assert (int(stream.Width), int(stream.Height)) == (40, 30)

    def test_png_is_flate(self) -> None:
        data = make_image_bytes(40, 30)
        pdf = pikepdf.new()
        image, info = read_image(data)
        stream = build_image_xobject(pdf, data, image, info)
        assert stream.Filter == Name.FlateDecode
        assert stream.Subtype == Name.Image
        assert int(stream.BitsPerComponent) == 8
        assert len(stream.read_bytes()) == 40 * 30 * 3
        assert "/SMask" not in stream

    def test_alpha_becomes_soft_mask(self) -> None:
        data = make_image_bytes(10, 10, mode="RGBA")
        pdf = pikepdf.new()
        image, info = read_image(data)
        stream = build_image_xobject(pdf, data, image, info)
        assert stream.ColorSpace == Name.DeviceRGB
        mask = stream.SMask
        assert mask.ColorSpace == Name.DeviceGray
        assert len(mask.read_bytes()) == 10 * 10

    def test_grayscale(self) -> None:
        data = make_image_bytes(8, 4, mode="L")
        pdf = pikepdf.new()
        image, info = read_image(data)
        stream = build_image_xobject(pdf, data, image, info)
        assert stream.ColorSpace == Name.DeviceGray
        assert len(stream.read_bytes()) == 8 * 4
