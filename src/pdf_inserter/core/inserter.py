# SPDX-License-Identifier: Apache-2.0
"""Content insertion into a single page.

:class:`PageInserter` implements the three entry operations (text, image,
HTML box). Each call validates its arguments, builds every object and
content stream it needs, and only then writes them to the page through a
:class:`ResourceBinder` commit. Collaborator failures are reported as
:class:`FatalError` with the page left untouched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar, Union

import pikepdf  # type: ignore[import-untyped]
from PIL import UnidentifiedImageError

from .content import image_stream, text_stream, wrap_stream
from .coordinates import PageSpace, is_right_angle, rotation_matrix
from .encoding import encode_run
from .errors import ArgumentError, FatalError, InsertError
from .flow import BoxFitSolver, FitConfig, FlowRenderer, StoryFlowRenderer
from .fonts import (
    FontResolver,
    StandardFontResolver,
    build_composite_font,
    build_simple_font,
)
from .images import build_image_xobject, fit_rect, read_image
from .models import BLACK, Color, FitResult, Matrix, Origin, Point, Rect
from .resources import FONT, XOBJECT, ResourceBinder, rewrite_names
from .script import classify, decode_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class InsertConfig:
    """Insertion configuration."""

    default_fontname: str = "Helvetica"
    default_fontsize: float = 11.0

    # Raise EncodingError instead of substituting U+FFFD
    strict_decoding: bool = False

    # Wrap existing contents with unbalanced q/Q before overlaying
    isolate_existing_contents: bool = True

    # Register flow resources under fresh page names; when off, scratch
    # names are kept and overwrite existing entries
    namespace_flow_resources: bool = True

    fit: FitConfig = field(default_factory=FitConfig)


def _check_rect(rect: Rect, operation: str) -> None:
    values = (rect.x0, rect.y0, rect.x1, rect.y1)
    if not all(math.isfinite(v) for v in values):
        raise ArgumentError(f"Rectangle has non-finite coordinates: {rect}", operation)
    if rect.is_empty:
        raise ArgumentError(
            f"Degenerate rectangle (width={rect.width}, height={rect.height})", operation
        )


class PageInserter:
    """Insert text, images and flowed HTML into one page.

    Example:
        >>> pdf = pikepdf.new()
        >>> pdf.add_blank_page(page_size=(612, 792))
        >>> inserter = PageInserter(pdf, pdf.pages[0])
        >>> inserter.insert_text(Point(72, 72), "Hello World")
        >>> result = inserter.insert_htmlbox(Rect(50, 100, 300, 200), "<p>Hi</p>")
    """

    def __init__(
        self,
        pdf: pikepdf.Pdf,
        page: pikepdf.Page,
        config: Optional[InsertConfig] = None,
        font_resolver: Optional[FontResolver] = None,
        flow_renderer: Optional[FlowRenderer] = None,
    ) -> None:
        self._pdf = pdf
        self._page = page
        self._config = config or InsertConfig()
        self._fonts = font_resolver or StandardFontResolver()
        self._flow_renderer = flow_renderer

    @property
    def space(self) -> PageSpace:
        return PageSpace.from_page(self._page)

    def _binder(self) -> ResourceBinder:
        return ResourceBinder(
            self._pdf, self._page, isolate_existing=self._config.isolate_existing_contents
        )

    def _renderer(self) -> FlowRenderer:
        if self._flow_renderer is None:
            self._flow_renderer = StoryFlowRenderer()
        return self._flow_renderer

    @staticmethod
    def _guard(operation: str, action: Callable[[], T]) -> T:
        """Run ``action``, turning collaborator failures into FatalError."""
        try:
            return action()
        except InsertError:
            raise
        except Exception as exc:
            raise FatalError(f"{operation} failed: {exc}", operation, exc) from exc

    def insert_text(
        self,
        point: Point,
        text: Union[str, bytes],
        fontname: Optional[str] = None,
        fontsize: Optional[float] = None,
        color: Color = BLACK,
        rotate: int = 0,
        origin: Origin = Origin.TOP_LEFT,
    ) -> None:
        """Show a single run of text with its baseline starting at ``point``.

        ASCII runs use a standard simple font; any other run uses a
        non-embedded composite font for the detected CJK ordering.

        Args:
            point: Baseline start in caller coordinates
            text: UTF-8 bytes or a string
            fontname: Standard font name or alias (Latin runs only)
            fontsize: Font size in points
            color: Fill color, components in [0, 1]
            rotate: Text rotation in degrees, a multiple of 90
            origin: Coordinate convention of ``point``

        Raises:
            ArgumentError: Invalid size, color, font name or rotation
            EncodingError: Malformed text under strict decoding
            FatalError: The page object graph could not be updated
        """
        operation = "insert_text"
        size = self._config.default_fontsize if fontsize is None else fontsize
        if not (math.isfinite(size) and size > 0):
            raise ArgumentError(f"Font size must be positive, got {size}", operation)
        if not color.is_valid():
            raise ArgumentError(f"Color components must be in [0, 1]: {color}", operation)
        if not is_right_angle(rotate):
            raise ArgumentError(f"Rotation must be a multiple of 90, got {rotate}", operation)

        run = decode_text(text, strict=self._config.strict_decoding)
        ordering = classify(run)
        base_font = None
        if not ordering.is_composite:
            base_font = self._fonts.resolve_simple(fontname or self._config.default_fontname)
        logger.debug("Text run of %d chars classified as %s", len(run), ordering.value)

        def apply() -> None:
            binder = self._binder()
            if base_font is not None:
                font = build_simple_font(base_font)
            else:
                font = build_composite_font(self._pdf, ordering, run, self._fonts)
            name = binder.register(FONT, "F", font)

            native = self.space.to_native_point(point, origin)
            matrix: Optional[Matrix] = None
            if rotate % 360:
                matrix = rotation_matrix(rotate, native.x, native.y)
            data = text_stream(
                name, size, native.x, native.y, encode_run(run, ordering), color, matrix
            )
            binder.add_contents(data, overlay=True)
            binder.commit()

        self._guard(operation, apply)

    def insert_image(
        self,
        rect: Rect,
        image: bytes,
        keep_proportion: bool = True,
        overlay: bool = True,
        origin: Origin = Origin.TOP_LEFT,
    ) -> None:
        """Paint raster image bytes into ``rect``.

        Args:
            rect: Target rectangle in caller coordinates
            image: Encoded image (PNG, JPEG, or any format Pillow reads)
            keep_proportion: Centre the image at the largest undistorted size
            overlay: Draw above (True) or below (False) existing content
            origin: Coordinate convention of ``rect``

        Raises:
            ArgumentError: Degenerate rectangle or empty image data
            FatalError: The image could not be decoded or the page updated
        """
        operation = "insert_image"
        _check_rect(rect, operation)
        if not image:
            raise ArgumentError("Image data is empty", operation)

        try:
            decoded, info = read_image(image)
        except (UnidentifiedImageError, OSError) as exc:
            raise FatalError(f"Cannot decode image: {exc}", operation, exc) from exc

        target = fit_rect(rect, info.width, info.height, keep_proportion)
        logger.debug(
            "Image %dx%d (%s) placed at %s", info.width, info.height, info.format, target
        )

        def apply() -> None:
            binder = self._binder()
            xobject = build_image_xobject(self._pdf, image, decoded, info)
            name = binder.register(XOBJECT, "Img", xobject)
            matrix = self.space.image_matrix(target, origin)
            binder.add_contents(image_stream(name, matrix), overlay=overlay)
            binder.commit()

        self._guard(operation, apply)

    def insert_htmlbox(
        self,
        rect: Rect,
        html: str,
        css: str = "",
        min_scale: float = 0.0,
        overlay: bool = True,
        origin: Origin = Origin.TOP_LEFT,
    ) -> FitResult:
        """Lay out HTML+CSS inside ``rect``, shrinking it if allowed.

        Content that does not fit is still drawn (as far as it lays out) and
        reported through ``FitResult.fitted``; overflow is not an error.

        Args:
            rect: Target rectangle in caller coordinates
            html: Markup to lay out
            css: Extra user CSS
            min_scale: Smallest allowed scale; 1.0 disables shrinking
            overlay: Draw above (True) or below (False) existing content
            origin: Coordinate convention of ``rect``

        Returns:
            Fit flag, scale used and spare height below the content

        Raises:
            ArgumentError: Degenerate rectangle or min_scale outside [0, 1]
            FatalError: Layout, rendering or the page update failed
        """
        operation = "insert_htmlbox"
        _check_rect(rect, operation)
        if not (0.0 <= min_scale <= 1.0):
            raise ArgumentError(f"min_scale must be in [0, 1], got {min_scale}", operation)
        if not html:
            return FitResult(fitted=True, scale=1.0, spare_height=rect.height)

        renderer = self._renderer()
        solver = BoxFitSolver(renderer, self._config.fit)
        plan = self._guard(
            operation, lambda: solver.solve(html, css, rect.width, rect.height, min_scale)
        )
        if not plan.fitted:
            logger.warning(
                "HTML content overflows %.1fx%.1f box at scale %.3f",
                rect.width,
                rect.height,
                plan.scale,
            )
        else:
            logger.debug("HTML content fits at scale %.3f", plan.scale)

        scale = plan.scale
        native = self.space.to_native_rect(rect, origin)

        def apply() -> float:
            with renderer.render(
                html, css, rect.width / scale, rect.height / scale
            ) as rendered:
                binder = self._binder()
                renames = binder.merge(
                    rendered.pdf,
                    rendered.resources,
                    namespace=self._config.namespace_flow_resources,
                )
                content = rewrite_names(rendered.pdf, rendered.content, renames)
                placement = Matrix(scale, 0, 0, scale, native.x0, native.y0)
                binder.add_contents(wrap_stream(content, placement), overlay=overlay)
                binder.commit()
                return rendered.used_height

        used_height = self._guard(operation, apply)
        spare = max(0.0, rect.height - used_height * scale) if plan.fitted else 0.0
        return FitResult(fitted=plan.fitted, scale=scale, spare_height=spare)
