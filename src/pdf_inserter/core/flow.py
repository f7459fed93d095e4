# SPDX-License-Identifier: Apache-2.0
"""Flowed HTML layout and the box-fit scale search.

The flow renderer lays marked-up text into a rectangle and reports whether
everything fit. :class:`StoryFlowRenderer` does this with PyMuPDF's Story
API, drawing into a scratch single-page PDF whose content and resources
are read back with pikepdf.

:class:`BoxFitSolver` finds the largest uniform scale, not below a given
minimum, at which the content fits a target rectangle. Shrinking content
by ``s`` is done by laying it out in a rectangle enlarged by ``1/s``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Optional, Protocol, runtime_checkable

import fitz  # type: ignore[import-untyped]
import pikepdf  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


@dataclass
class FitConfig:
    """Scale search configuration."""

    max_iterations: int = 20
    tolerance: float = 0.005


@dataclass
class FlowMeasure:
    """Outcome of laying out a flow without drawing it."""

    fits: bool
    used_height: float


@dataclass
class RenderedFlow:
    """A flow drawn into a scratch page.

    The scratch document owns ``resources``; close it (or use the object as
    a context manager) once its resources have been imported.

    Attributes:
        pdf: Scratch document holding the drawn page
        content: Content stream bytes of the scratch page
        resources: Resource dictionary of the scratch page
        fits: Whether all content fit
        used_height: Height taken by the content, in scratch units
    """

    pdf: pikepdf.Pdf
    content: bytes
    resources: pikepdf.Dictionary
    fits: bool
    used_height: float

    def close(self) -> None:
        self.pdf.close()

    def __enter__(self) -> RenderedFlow:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


@runtime_checkable
class FlowRenderer(Protocol):
    """Lays out HTML+CSS into a rectangle of a given size."""

    def measure(self, html: str, css: str, width: float, height: float) -> FlowMeasure:
        """Lay out the flow and report whether it fit."""
        ...

    def render(self, html: str, css: str, width: float, height: float) -> RenderedFlow:
        """Lay out and draw the flow into a scratch page of the given size."""
        ...


class StoryFlowRenderer:
    """Flow renderer backed by ``fitz.Story``.

    Args:
        archive: Optional ``fitz.Archive`` (or path) used to resolve images
            and fonts referenced by the HTML
        em: Default font size in points
    """

    def __init__(self, archive: Any = None, em: float = 12) -> None:
        self._archive = archive
        self._em = em

    def _story(self, html: str, css: str) -> fitz.Story:
        return fitz.Story(html=html, user_css=css or None, em=self._em, archive=self._archive)

    @staticmethod
    def _used_height(filled: Any, height: float) -> float:
        # place() returns the filled area as a plain tuple
        filled = fitz.Rect(filled)
        if filled.is_empty:
            return 0.0
        return max(0.0, min(height, filled.y1))

    def measure(self, html: str, css: str, width: float, height: float) -> FlowMeasure:
        story = self._story(html, css)
        more, filled = story.place(fitz.Rect(0, 0, width, height))
        return FlowMeasure(fits=not more, used_height=self._used_height(filled, height))

    def render(self, html: str, css: str, width: float, height: float) -> RenderedFlow:
        mediabox = fitz.Rect(0, 0, width, height)
        buffer = io.BytesIO()
        writer = fitz.DocumentWriter(buffer)
        try:
            story = self._story(html, css)
            device = writer.begin_page(mediabox)
            more, filled = story.place(mediabox)
            story.draw(device)
            writer.end_page()
        finally:
            writer.close()

        scratch = pikepdf.open(io.BytesIO(buffer.getvalue()))
        try:
            page = scratch.pages[0]
            page.contents_coalesce()
            contents = page.obj.get("/Contents")
            content = contents.read_bytes() if contents is not None else b""
            resources = page.obj.get("/Resources")
            if resources is None:
                resources = pikepdf.Dictionary()
        except Exception:
            scratch.close()
            raise
        return RenderedFlow(
            pdf=scratch,
            content=content,
            resources=resources,
            fits=not more,
            used_height=self._used_height(filled, height),
        )


@dataclass
class FitPlan:
    """Scale chosen by the solver.

    Attributes:
        scale: Scale to draw at
        fitted: Whether content fits at that scale
        trials: (scale, fits) pairs evaluated, in order
    """

    scale: float
    fitted: bool
    trials: list[tuple[float, bool]] = field(default_factory=list)


class BoxFitSolver:
    """Binary search for the largest scale at which a flow fits.

    Example:
        >>> solver = BoxFitSolver(StoryFlowRenderer())
        >>> plan = solver.solve("<p>Hello</p>", "", 200, 40, min_scale=0.5)
        >>> plan.scale <= 1.0
        True
    """

    def __init__(self, renderer: FlowRenderer, config: Optional[FitConfig] = None) -> None:
        self._renderer = renderer
        self._config = config or FitConfig()

    def _fits(
        self, html: str, css: str, width: float, height: float, scale: float, plan: FitPlan
    ) -> bool:
        fits = self._renderer.measure(html, css, width / scale, height / scale).fits
        plan.trials.append((scale, fits))
        logger.debug("Fit trial scale=%.4f fits=%s", scale, fits)
        return fits

    def solve(
        self,
        html: str,
        css: str,
        width: float,
        height: float,
        min_scale: float = 0.0,
    ) -> FitPlan:
        """Choose the scale for drawing a flow into ``width`` x ``height``.

        Args:
            html: Markup to lay out
            css: Extra user CSS
            width: Target width
            height: Target height
            min_scale: Smallest scale allowed; 1.0 disables shrinking and
                0.0 allows any positive scale

        Returns:
            The scale to draw at and whether the content fits there
        """
        plan = FitPlan(scale=1.0, fitted=False)
        if self._fits(html, css, width, height, 1.0, plan):
            plan.fitted = True
            return plan
        if min_scale >= 1.0:
            return plan

        lo, hi = min_scale, 1.0
        best: Optional[float] = None
        if lo > 0:
            if not self._fits(html, css, width, height, lo, plan):
                plan.scale = lo
                return plan
            best = lo

        for _ in range(self._config.max_iterations):
            if hi - lo <= self._config.tolerance:
                break
            mid = (lo + hi) / 2
            if self._fits(html, css, width, height, mid, plan):
                lo = best = mid
            else:
                hi = mid

        if best is None:
            plan.scale = hi
            return plan
        plan.scale = best
        plan.fitted = True
        return plan
