# SPDX-License-Identifier: Apache-2.0
"""Byte encodings for text shown with simple and composite fonts.

Simple fonts take a literal string of single-byte codes. Composite fonts
use UTF-16BE codes (surrogate pairs above U+FFFF) matching the predefined
``Uni*-UTF16-H`` CMaps, written as a hex string.
"""

from __future__ import annotations

from .models import Ordering

# Bytes that must be escaped inside a literal string
_LITERAL_ESCAPES: dict[int, bytes] = {
    ord("("): b"\\(",
    ord(")"): b"\\)",
    ord("\\"): b"\\\\",
    ord("\r"): b"\\r",
    ord("\n"): b"\\n",
}


def encode_latin(text: str) -> bytes:
    """Encode a run as single-byte codes.

    Codepoints outside Latin-1 become ``?``; the simple font's encoding
    decides what glyph each byte selects.
    """
    return text.encode("latin-1", errors="replace")


def literal_string(data: bytes) -> bytes:
    """Wrap raw bytes in a ``( )`` literal string, escaping as needed."""
    out = bytearray(b"(")
    for byte in data:
        out += _LITERAL_ESCAPES.get(byte, bytes((byte,)))
    out += b")"
    return bytes(out)


def encode_utf16(text: str) -> bytes:
    """Encode a run as UTF-16BE codes without a byte-order mark."""
    return text.encode("utf-16-be")


def hex_string(data: bytes) -> bytes:
    """Wrap raw bytes in a ``< >`` hex string."""
    return b"<" + data.hex().upper().encode("ascii") + b">"


def utf16_codes(text: str) -> list[tuple[bytes, str]]:
    """Split a run into (code bytes, character) pairs.

    BMP characters yield a 2-byte code, supplementary characters a 4-byte
    surrogate-pair code. Used to build the ToUnicode table.
    """
    return [(ch.encode("utf-16-be"), ch) for ch in text]


def encode_run(text: str, ordering: Ordering) -> bytes:
    """Return the string operand for ``Tj`` for the given ordering."""
    if ordering.is_composite:
        return hex_string(encode_utf16(text))
    return literal_string(encode_latin(text))
