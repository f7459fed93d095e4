# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for insertion tests."""

from __future__ import annotations

import io

import pikepdf
import pytest
from pikepdf import Name
from PIL import Image

from pdf_inserter.core.flow import FlowMeasure, RenderedFlow


def make_image_bytes(
    width: int, height: int, fmt: str = "PNG", mode: str = "RGB"
) -> bytes:
    """Encode a solid-colour image with Pillow."""
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    if mode == "L":
        color = 128
    image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def last_stream(page: pikepdf.Page) -> bytes:
    """Bytes of the last content stream of a page."""
    contents = page.obj.Contents
    if isinstance(contents, pikepdf.Array):
        return contents[len(contents) - 1].read_bytes()
    return contents.read_bytes()


def instructions(data: bytes) -> list[tuple[list, str]]:
    """Parse content bytes into (operands, operator) pairs."""
    scratch = pikepdf.new()
    stream = scratch.make_stream(data)
    return [
        (list(operands), str(operator))
        for operands, operator in pikepdf.parse_content_stream(stream)
    ]


class FakeFlowRenderer:
    """Flow renderer whose content needs a fixed height at any width.

    Rendering produces a scratch document with a font and a graphics state
    resource, like a real story would.
    """

    def __init__(self, needed_height: float, font_name: str = "/F0") -> None:
        self.needed_height = needed_height
        self.font_name = font_name
        self.measured: list[tuple[float, float]] = []
        self.rendered: list[tuple[float, float]] = []

    def measure(self, html: str, css: str, width: float, height: float) -> FlowMeasure:
        self.measured.append((width, height))
        return FlowMeasure(
            fits=height >= self.needed_height,
            used_height=min(height, self.needed_height),
        )

    def render(self, html: str, css: str, width: float, height: float) -> RenderedFlow:
        self.rendered.append((width, height))
        scratch = pikepdf.new()
        font = scratch.make_indirect(
            pikepdf.Dictionary(Type=Name.Font, Subtype=Name.Type1, BaseFont=Name.Helvetica)
        )
        resources = pikepdf.Dictionary(
            Font=pikepdf.Dictionary({self.font_name: font}),
            ExtGState=pikepdf.Dictionary(
                GS0=pikepdf.Dictionary(Type=Name.ExtGState, CA=0.5)
            ),
        )
        content = f"/GS0 gs BT {self.font_name} 12 Tf 0 0 Td (x) Tj ET".encode()
        fits = height >= self.needed_height
        return RenderedFlow(
            pdf=scratch,
            content=content,
            resources=resources,
            fits=fits,
            used_height=min(height, self.needed_height),
        )


@pytest.fixture
def blank_pdf():
    """A one-page 612x792 document."""
    pdf = pikepdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    yield pdf
    pdf.close()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes(200, 100)
