# SPDX-License-Identifier: Apache-2.0
"""Core content insertion modules."""

from .errors import ArgumentError, EncodingError, FatalError, InsertError
from .flow import BoxFitSolver, FitConfig, FlowRenderer, StoryFlowRenderer
from .fonts import FontResolver, StandardFontResolver
from .inserter import InsertConfig, PageInserter
from .models import (
    BLACK,
    Color,
    FitResult,
    InsertStatus,
    Matrix,
    Ordering,
    Origin,
    Point,
    Rect,
)
from .pdf_inserter import PDFInserter

__all__ = [
    "ArgumentError",
    "BLACK",
    "BoxFitSolver",
    "Color",
    "EncodingError",
    "FatalError",
    "FitConfig",
    "FitResult",
    "FlowRenderer",
    "FontResolver",
    "InsertConfig",
    "InsertError",
    "InsertStatus",
    "Matrix",
    "Ordering",
    "Origin",
    "PDFInserter",
    "PageInserter",
    "Point",
    "Rect",
    "StandardFontResolver",
    "StoryFlowRenderer",
]
