# SPDX-License-Identifier: Apache-2.0
"""Data models shared by the insertion components.

Rectangles and points handed in by callers use a top-left origin with Y
growing downward. Conversion to the document's bottom-left space happens
in :mod:`pdf_inserter.core.coordinates`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Origin(str, Enum):
    """Coordinate convention of a placement request."""

    TOP_LEFT = "top-left"
    BOTTOM_LEFT = "bottom-left"


class Ordering(str, Enum):
    """Script ordering picked for a text run."""

    LATIN = "Latin"
    SIMPLIFIED_CHINESE = "SimplifiedChinese"
    TRADITIONAL_CHINESE = "TraditionalChinese"
    JAPANESE = "Japanese"
    KOREAN = "Korean"

    @property
    def is_composite(self) -> bool:
        """Whether this ordering needs a composite (CID-keyed) font."""
        return self is not Ordering.LATIN


class InsertStatus(str, Enum):
    """Non-exceptional outcome of an insertion."""

    OK = "ok"
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class Point:
    """A point in caller coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Rectangle given by two corners.

    Attributes:
        x0: Left X coordinate
        y0: Top Y coordinate (caller convention)
        x1: Right X coordinate
        y1: Bottom Y coordinate (caller convention)
    """

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        """Width of the rectangle."""
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        """Height of the rectangle."""
        return self.y1 - self.y0

    @property
    def is_empty(self) -> bool:
        """True for degenerate or inverted rectangles."""
        return self.width <= 0 or self.height <= 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rect:
        """Create from dictionary."""
        return cls(
            x0=float(data["x0"]),
            y0=float(data["y0"]),
            x1=float(data["x1"]),
            y1=float(data["y1"]),
        )


@dataclass(frozen=True)
class Color:
    """RGB fill color with components in [0, 1]."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def components(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def is_valid(self) -> bool:
        """Check that every component lies in [0, 1]."""
        return all(0.0 <= c <= 1.0 for c in self.components())

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``#rrggbb`` (leading ``#`` optional)."""
        value = value.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        r, g, b = (int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))
        return cls(r, g, b)


BLACK = Color(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Matrix:
    """Affine transformation matrix [a, b, c, d, e, f].

    The matrix transforms coordinates as:
        x' = a*x + c*y + e
        y' = b*x + d*y + f
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def concat(self, other: Matrix) -> Matrix:
        """Return ``self`` followed by ``other`` (PDF ``cm`` order)."""
        return Matrix(
            a=self.a * other.a + self.b * other.c,
            b=self.a * other.b + self.b * other.d,
            c=self.c * other.a + self.d * other.c,
            d=self.c * other.b + self.d * other.d,
            e=self.e * other.a + self.f * other.c + other.e,
            f=self.e * other.b + self.f * other.d + other.f,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def values(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def is_identity(self) -> bool:
        """Check if this is an identity transformation."""
        return all(
            abs(v - w) < 1e-6 for v, w in zip(self.values(), (1, 0, 0, 1, 0, 0))
        )


@dataclass
class FitResult:
    """Layout metrics returned by an HTML box insertion.

    Attributes:
        fitted: Whether all content fit the target rectangle
        scale: Uniform scale used to draw the content, in (0, 1]
        spare_height: Unused height below the content (0 when overflowing)
    """

    fitted: bool
    scale: float = 1.0
    spare_height: float = 0.0

    @property
    def status(self) -> InsertStatus:
        return InsertStatus.OK if self.fitted else InsertStatus.OVERFLOW

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "fitted": self.fitted,
            "scale": self.scale,
            "spare_height": self.spare_height,
            "status": self.status.value,
        }
