# SPDX-License-Identifier: Apache-2.0
"""Document-level wrapper around :class:`PageInserter` using pikepdf."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union

import pikepdf  # type: ignore[import-untyped]

from .flow import FlowRenderer
from .fonts import FontResolver
from .inserter import InsertConfig, PageInserter
from .models import BLACK, Color, FitResult, Origin, Point, Rect


class PDFInserter:
    """Open a PDF, insert content into its pages and write it back.

    Example:
        >>> with PDFInserter("input.pdf") as inserter:
        ...     inserter.insert_text(0, Point(72, 72), "Hello")
        ...     inserter.insert_image(0, Rect(72, 100, 272, 300), png_bytes)
        ...     inserter.insert_htmlbox(0, Rect(72, 320, 540, 500), "<p>Hi</p>")
        ...     inserter.save("output.pdf")
    """

    def __init__(
        self,
        pdf_source: Union[Path, str, bytes],
        config: Optional[InsertConfig] = None,
        font_resolver: Optional[FontResolver] = None,
        flow_renderer: Optional[FlowRenderer] = None,
    ) -> None:
        """Initialize the inserter.

        Args:
            pdf_source: Path to PDF file or PDF bytes
            config: Insertion configuration
            font_resolver: Font-substitution strategy
            flow_renderer: Renderer used for HTML boxes

        Raises:
            TypeError: If pdf_source is not Path, str, or bytes
            FileNotFoundError: If the file path doesn't exist
        """
        self._pdf: Optional[pikepdf.Pdf] = None
        self._config = config or InsertConfig()
        self._font_resolver = font_resolver
        self._flow_renderer = flow_renderer

        if isinstance(pdf_source, bytes):
            self._pdf = pikepdf.open(BytesIO(pdf_source))
        elif isinstance(pdf_source, (str, Path)):
            path = Path(pdf_source)
            if not path.exists():
                raise FileNotFoundError(f"PDF file not found: {path}")
            self._pdf = pikepdf.open(BytesIO(path.read_bytes()))
        else:
            raise TypeError(
                f"pdf_source must be Path, str, or bytes, got {type(pdf_source).__name__}"
            )

    def __enter__(self) -> PDFInserter:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the PDF document and release resources."""
        if self._pdf is not None:
            self._pdf.close()
            self._pdf = None

    @property
    def pdf(self) -> pikepdf.Pdf:
        return self._ensure_open()

    @property
    def page_count(self) -> int:
        """Get the number of pages in the document."""
        return len(self._ensure_open().pages)

    def _ensure_open(self) -> pikepdf.Pdf:
        if self._pdf is None:
            raise RuntimeError("PDF document is not open")
        return self._pdf

    def page(self, page_num: int) -> PageInserter:
        """Return an inserter bound to one page.

        Raises:
            IndexError: If page_num is out of range
        """
        pdf = self._ensure_open()
        if page_num < 0 or page_num >= len(pdf.pages):
            raise IndexError(f"Page number {page_num} out of range")
        return PageInserter(
            pdf,
            pdf.pages[page_num],
            config=self._config,
            font_resolver=self._font_resolver,
            flow_renderer=self._flow_renderer,
        )

    def insert_text(
        self,
        page_num: int,
        point: Point,
        text: Union[str, bytes],
        fontname: Optional[str] = None,
        fontsize: Optional[float] = None,
        color: Color = BLACK,
        rotate: int = 0,
        origin: Origin = Origin.TOP_LEFT,
    ) -> None:
        """Insert a text run into a page. See :meth:`PageInserter.insert_text`."""
        self.page(page_num).insert_text(
            point, text, fontname, fontsize, color, rotate=rotate, origin=origin
        )

    def insert_image(
        self,
        page_num: int,
        rect: Rect,
        image: bytes,
        keep_proportion: bool = True,
        overlay: bool = True,
        origin: Origin = Origin.TOP_LEFT,
    ) -> None:
        """Insert an image into a page. See :meth:`PageInserter.insert_image`."""
        self.page(page_num).insert_image(
            rect, image, keep_proportion=keep_proportion, overlay=overlay, origin=origin
        )

    def insert_htmlbox(
        self,
        page_num: int,
        rect: Rect,
        html: str,
        css: str = "",
        min_scale: float = 0.0,
        overlay: bool = True,
        origin: Origin = Origin.TOP_LEFT,
    ) -> FitResult:
        """Insert flowed HTML into a page. See :meth:`PageInserter.insert_htmlbox`."""
        return self.page(page_num).insert_htmlbox(
            rect, html, css=css, min_scale=min_scale, overlay=overlay, origin=origin
        )

    def save(self, output_path: Union[Path, str]) -> None:
        """Save the PDF to a file."""
        Path(output_path).write_bytes(self.to_bytes())

    def to_bytes(self) -> bytes:
        """Serialize the PDF to bytes."""
        output = BytesIO()
        self._ensure_open().save(output)
        return output.getvalue()
