# SPDX-License-Identifier: Apache-2.0
"""Content stream operator emission.

Every stream produced here is bracketed by ``q``/``Q`` so that its
graphics state changes cannot leak into neighbouring streams.
"""

from __future__ import annotations

from .models import Color, Matrix


def fmt_number(value: float) -> str:
    """Format a number in compact decimal form (no exponent notation)."""
    if value == int(value):
        return str(int(value))
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _name(name: str) -> str:
    return name if name.startswith("/") else "/" + name


class ContentBuilder:
    """Accumulates drawing operators into a byte buffer.

    Example:
        >>> builder = ContentBuilder()
        >>> builder.save().begin_text().fill_rgb(BLACK).font("/F1", 11)
        >>> builder.move_text(72, 720).show(b"(Hi)").end_text().restore()
        >>> data = builder.to_bytes()
    """

    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def _op(self, operator: str, *operands: float) -> ContentBuilder:
        items = [fmt_number(v) for v in operands] + [operator]
        self._parts.append(" ".join(items).encode("ascii") + b"\n")
        return self

    def raw(self, data: bytes) -> ContentBuilder:
        """Append pre-built operator bytes, ending them on a line break."""
        if data:
            self._parts.append(data if data.endswith(b"\n") else data + b"\n")
        return self

    def save(self) -> ContentBuilder:
        return self._op("q")

    def restore(self) -> ContentBuilder:
        return self._op("Q")

    def begin_text(self) -> ContentBuilder:
        return self._op("BT")

    def end_text(self) -> ContentBuilder:
        return self._op("ET")

    def fill_rgb(self, color: Color) -> ContentBuilder:
        return self._op("rg", *color.components())

    def font(self, name: str, size: float) -> ContentBuilder:
        line = f"{_name(name)} {fmt_number(size)} Tf\n"
        self._parts.append(line.encode("ascii"))
        return self

    def move_text(self, x: float, y: float) -> ContentBuilder:
        return self._op("Td", x, y)

    def show(self, string_token: bytes) -> ContentBuilder:
        """Show an already encoded literal or hex string."""
        self._parts.append(string_token + b" Tj\n")
        return self

    def transform(self, matrix: Matrix) -> ContentBuilder:
        return self._op("cm", *matrix.values())

    def paint_xobject(self, name: str) -> ContentBuilder:
        self._parts.append(f"{_name(name)} Do\n".encode("ascii"))
        return self

    def to_bytes(self) -> bytes:
        return b"".join(self._parts)


def text_stream(
    font_name: str,
    font_size: float,
    x: float,
    y: float,
    string_token: bytes,
    color: Color,
    matrix: Matrix | None = None,
) -> bytes:
    """Build a stream that shows one string at a native-space point.

    With ``matrix`` set (rotated text) the point is applied through a
    ``cm`` and the text is positioned at the local origin.
    """
    builder = ContentBuilder().save()
    if matrix is not None:
        builder.transform(matrix)
        x, y = 0.0, 0.0
    return (
        builder.begin_text()
        .fill_rgb(color)
        .font(font_name, font_size)
        .move_text(x, y)
        .show(string_token)
        .end_text()
        .restore()
        .to_bytes()
    )


def image_stream(image_name: str, matrix: Matrix) -> bytes:
    """Build a stream that paints an image XObject through ``matrix``."""
    return (
        ContentBuilder()
        .save()
        .transform(matrix)
        .paint_xobject(image_name)
        .restore()
        .to_bytes()
    )


def wrap_stream(data: bytes, matrix: Matrix | None = None) -> bytes:
    """Bracket foreign content bytes in ``q``/``Q`` with an optional ``cm``."""
    builder = ContentBuilder().save()
    if matrix is not None:
        builder.transform(matrix)
    return builder.raw(data).restore().to_bytes()
