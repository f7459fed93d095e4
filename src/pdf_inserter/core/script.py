# SPDX-License-Identifier: Apache-2.0
"""Script classification for text runs.

Decides whether a run can be shown with a simple single-byte font or needs
a composite (CID-keyed) font, and which regional ordering that font uses.
"""

from __future__ import annotations

import logging
from typing import Union

from .errors import EncodingError
from .models import Ordering

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"

# (first, last) codepoint ranges that flag a regional ordering
HIRAGANA_KATAKANA = (0x3040, 0x30FF)
HANGUL_SYLLABLES = (0xAC00, 0xD7AF)
HANGUL_JAMO = (0x1100, 0x11FF)
BOPOMOFO = (0x3100, 0x312F)


def _in_range(code: int, bounds: tuple[int, int]) -> bool:
    return bounds[0] <= code <= bounds[1]


def decode_text(data: Union[str, bytes], strict: bool = False) -> str:
    """Decode a caller text run into a Python string.

    Bytes are decoded as UTF-8. Invalid units become U+FFFD unless
    ``strict`` is set, in which case :class:`EncodingError` is raised.
    Lone surrogates in ``str`` input are replaced the same way.

    Args:
        data: UTF-8 bytes or an already decoded string
        strict: Raise instead of substituting replacement characters

    Returns:
        Decoded text containing only Unicode scalar values
    """
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            if strict:
                raise EncodingError(
                    f"Invalid UTF-8 at byte {exc.start}", cause=exc
                ) from exc
        text = data.decode("utf-8", errors="replace")
        logger.warning(
            "Replaced %d invalid byte sequence(s) in text run",
            text.count(REPLACEMENT_CHAR),
        )
        return text

    if not any(0xD800 <= ord(ch) <= 0xDFFF for ch in data):
        return data
    if strict:
        raise EncodingError("Text run contains lone surrogates")
    logger.warning("Replaced lone surrogates in text run")
    return "".join(
        REPLACEMENT_CHAR if 0xD800 <= ord(ch) <= 0xDFFF else ch for ch in data
    )


def needs_composite_font(text: str) -> bool:
    """True when any codepoint is outside 7-bit ASCII."""
    return any(ord(ch) > 0x7F for ch in text)


def classify(text: str) -> Ordering:
    """Pick the ordering for a text run.

    Pure ASCII is Latin. Otherwise every codepoint is scanned and the
    highest-priority flagged script wins: Japanese, then Korean, then
    Traditional Chinese, with Simplified Chinese as the default.
    """
    if not needs_composite_font(text):
        return Ordering.LATIN

    has_jp = has_kr = has_tc = False
    for ch in text:
        code = ord(ch)
        if _in_range(code, HIRAGANA_KATAKANA):
            has_jp = True
        elif _in_range(code, HANGUL_SYLLABLES) or _in_range(code, HANGUL_JAMO):
            has_kr = True
        elif _in_range(code, BOPOMOFO):
            has_tc = True

    if has_jp:
        return Ordering.JAPANESE
    if has_kr:
        return Ordering.KOREAN
    if has_tc:
        return Ordering.TRADITIONAL_CHINESE
    return Ordering.SIMPLIFIED_CHINESE
