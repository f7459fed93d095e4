# SPDX-License-Identifier: Apache-2.0
"""Tests for the document-level PDFInserter wrapper."""

from __future__ import annotations

import io
from pathlib import Path

import pikepdf
import pytest

from pdf_inserter.core.models import Point, Rect
from pdf_inserter.core.pdf_inserter import PDFInserter

from conftest import FakeFlowRenderer, make_image_bytes


def _two_page_pdf() -> bytes:
    buffer = io.BytesIO()
    with pikepdf.new() as pdf:
        pdf.add_blank_page(page_size=(612, 792))
        pdf.add_blank_page(page_size=(300, 400))
        pdf.save(buffer)
    return buffer.getvalue()


class TestPDFInserter:
    """Tests for PDFInserter."""

    def test_open_bytes(self) -> None:
        with PDFInserter(_two_page_pdf()) as inserter:
            assert inserter.page_count == 2

    def test_open_path(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.pdf"
        path.write_bytes(_two_page_pdf())
        with PDFInserter(str(path)) as inserter:
            assert inserter.page_count == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PDFInserter(tmp_path / "missing.pdf")

    def test_invalid_source_type(self) -> None:
        with pytest.raises(TypeError):
            PDFInserter(42)  # type: ignore[arg-type]

    @pytest.mark.parametrize("page_num", [-1, 2, 10])
    def test_page_out_of_range(self, page_num: int) -> None:
        with PDFInserter(_two_page_pdf()) as inserter:
            with pytest.raises(IndexError):
                inserter.insert_text(page_num, Point(0, 0), "x")

    def test_closed(self) -> None:
        inserter = PDFInserter(_two_page_pdf())
        inserter.close()
        with pytest.raises(RuntimeError):
            inserter.page(0)

    def test_uses_page_height(self) -> None:
        """Coordinates flip against the target page's own MediaBox."""
        with PDFInserter(_two_page_pdf()) as inserter:
            inserter.insert_text(1, Point(10, 10), "x")
            data = inserter.to_bytes()

        with pikepdf.open(io.BytesIO(data)) as pdf:
            contents = pdf.pages[1].obj.Contents
            last = contents[len(contents) - 1].read_bytes()
            assert b"10 390 Td" in last

    def test_save_round_trip(self, tmp_path: Path) -> None:
        output = tmp_path / "out.pdf"
        renderer = FakeFlowRenderer(20)
        with PDFInserter(_two_page_pdf(), flow_renderer=renderer) as inserter:
            inserter.insert_text(0, Point(72, 72), "Hello")
            inserter.insert_image(0, Rect(72, 100, 172, 150), make_image_bytes(20, 10))
            result = inserter.insert_htmlbox(0, Rect(72, 200, 272, 300), "<p>x</p>")
            inserter.save(output)

        assert result.fitted
        with pikepdf.open(output) as pdf:
            resources = pdf.pages[0].obj.Resources
            assert "/Font" in resources
            assert "/XObject" in resources
            assert "/ExtGState" in resources
