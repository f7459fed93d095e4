# SPDX-License-Identifier: Apache-2.0
"""Insert text, images and flowed HTML into existing PDF pages."""

from pdf_inserter.core import (
    Color,
    FitResult,
    InsertConfig,
    PageInserter,
    PDFInserter,
    Point,
    Rect,
)

__version__ = "0.1.0"

__all__ = [
    "Color",
    "FitResult",
    "InsertConfig",
    "PDFInserter",
    "PageInserter",
    "Point",
    "Rect",
    "__version__",
]
