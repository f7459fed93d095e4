# SPDX-License-Identifier: Apache-2.0
"""Conversion between caller and document coordinate systems.

Callers place content with a top-left origin and Y growing downward. The
document's native space has a bottom-left origin with Y growing upward.
Both are measured against the page's MediaBox.
"""

from __future__ import annotations

from dataclasses import dataclass

import pikepdf  # type: ignore[import-untyped]

from .models import Matrix, Origin, Point, Rect

DEFAULT_PAGE_SIZE = (612.0, 792.0)

# Rotation matrices (cos, sin) for the supported text angles
_ROTATIONS: dict[int, tuple[int, int]] = {
    0: (1, 0),
    90: (0, 1),
    180: (-1, 0),
    270: (0, -1),
}


@dataclass(frozen=True)
class PageSpace:
    """Native coordinate frame of a page.

    Attributes:
        x0: MediaBox left edge
        y0: MediaBox bottom edge
        width: MediaBox width
        height: MediaBox height
    """

    x0: float = 0.0
    y0: float = 0.0
    width: float = DEFAULT_PAGE_SIZE[0]
    height: float = DEFAULT_PAGE_SIZE[1]

    @property
    def top(self) -> float:
        return self.y0 + self.height

    @classmethod
    def from_page(cls, page: pikepdf.Page) -> PageSpace:
        """Read the MediaBox, falling back to US Letter when it is absent."""
        box = page.obj.get("/MediaBox")
        if box is None or len(box) != 4:
            return cls()
        x0, y0, x1, y1 = (float(v) for v in box)
        return cls(
            x0=min(x0, x1),
            y0=min(y0, y1),
            width=abs(x1 - x0),
            height=abs(y1 - y0),
        )

    def flip_y(self, y: float) -> float:
        """Map a Y coordinate between conventions; its own inverse."""
        return self.top - y

    def to_native_point(self, point: Point, origin: Origin = Origin.TOP_LEFT) -> Point:
        if origin is Origin.BOTTOM_LEFT:
            return point
        return Point(self.x0 + point.x, self.flip_y(point.y))

    def to_native_rect(self, rect: Rect, origin: Origin = Origin.TOP_LEFT) -> Rect:
        """Convert to a native rect with ``y0`` the bottom edge."""
        if origin is Origin.BOTTOM_LEFT:
            return rect
        return Rect(
            x0=self.x0 + rect.x0,
            y0=self.flip_y(rect.y1),
            x1=self.x0 + rect.x1,
            y1=self.flip_y(rect.y0),
        )

    def flip_matrix(self) -> Matrix:
        """Matrix taking caller coordinates to native coordinates."""
        return Matrix(1, 0, 0, -1, self.x0, self.top)

    def image_matrix(self, rect: Rect, origin: Origin = Origin.TOP_LEFT) -> Matrix:
        """Placement matrix for painting an image into ``rect``.

        In caller space the unit square is scaled by the rect width and the
        negated rect height and translated to the rect's lower edge, so the
        image's first row lands on the top edge. Concatenating the page flip
        yields an upright image in native space.
        """
        if origin is Origin.BOTTOM_LEFT:
            return Matrix(rect.width, 0, 0, rect.height, rect.x0, rect.y0)
        local = Matrix(rect.width, 0, 0, -rect.height, rect.x0, rect.y1)
        return local.concat(self.flip_matrix())


def rotation_matrix(angle: int, x: float, y: float) -> Matrix:
    """Rotate by a multiple of 90 degrees about native point (x, y)."""
    cos, sin = _ROTATIONS[angle % 360]
    return Matrix(cos, sin, -sin, cos, x, y)


def is_right_angle(angle: int) -> bool:
    return angle % 90 == 0
