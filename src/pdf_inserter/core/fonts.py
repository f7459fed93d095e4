# SPDX-License-Identifier: Apache-2.0
"""Font resource construction.

Builds two kinds of font dictionaries:

- Simple Type1 fonts referencing one of the 14 standard base fonts.
- Composite Type0 fonts over a non-embedded CIDFontType0 descendant. The
  viewer substitutes a system font matching the declared ordering, so no
  glyph outlines are ever written.

Font-substitution policy (which base font a caller name maps to, which
substitution font an ordering uses) is supplied by a :class:`FontResolver`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import pikepdf  # type: ignore[import-untyped]
from pikepdf import Name

from .encoding import utf16_codes
from .errors import ArgumentError
from .models import Ordering

logger = logging.getLogger(__name__)

STANDARD_FONTS: frozenset[str] = frozenset(
    {
        "Helvetica",
        "Helvetica-Bold",
        "Helvetica-Oblique",
        "Helvetica-BoldOblique",
        "Times-Roman",
        "Times-Bold",
        "Times-Italic",
        "Times-BoldItalic",
        "Courier",
        "Courier-Bold",
        "Courier-Oblique",
        "Courier-BoldOblique",
        "Symbol",
        "ZapfDingbats",
    }
)

# Symbolic fonts keep their built-in encoding
SYMBOLIC_FONTS: frozenset[str] = frozenset({"Symbol", "ZapfDingbats"})

# Short aliases accepted for the standard fonts
FONT_ALIASES: dict[str, str] = {
    "helv": "Helvetica",
    "hebo": "Helvetica-Bold",
    "heit": "Helvetica-Oblique",
    "hebi": "Helvetica-BoldOblique",
    "tiro": "Times-Roman",
    "tibo": "Times-Bold",
    "tiit": "Times-Italic",
    "tibi": "Times-BoldItalic",
    "cour": "Courier",
    "cobo": "Courier-Bold",
    "coit": "Courier-Oblique",
    "cobi": "Courier-BoldOblique",
    "symb": "Symbol",
    "zadb": "ZapfDingbats",
}


@dataclass(frozen=True)
class CIDOrderingInfo:
    """CIDSystemInfo and substitution defaults for one ordering."""

    ordering: str
    supplement: int
    cmap: str
    font_name: str


CID_ORDERINGS: dict[Ordering, CIDOrderingInfo] = {
    Ordering.SIMPLIFIED_CHINESE: CIDOrderingInfo("GB1", 5, "UniGB-UTF16-H", "STSong-Light"),
    Ordering.TRADITIONAL_CHINESE: CIDOrderingInfo("CNS1", 7, "UniCNS-UTF16-H", "MSung-Light"),
    Ordering.JAPANESE: CIDOrderingInfo("Japan1", 7, "UniJIS-UTF16-H", "HeiseiMin-W3"),
    Ordering.KOREAN: CIDOrderingInfo("Korea1", 2, "UniKS-UTF16-H", "HYSMyeongJo-Medium"),
}

CID_REGISTRY = "Adobe"
CID_DEFAULT_WIDTH = 1000

# FontDescriptor flags: Serif (bit 2) | Nonsymbolic (bit 6)
DESCRIPTOR_FLAGS = 2 | 32

# Generic CJK serif metrics, in 1/1000 em
DESCRIPTOR_METRICS = {
    "FontBBox": [-25, -254, 1000, 880],
    "ItalicAngle": 0,
    "Ascent": 880,
    "Descent": -120,
    "CapHeight": 880,
    "StemV": 80,
}

# CMap blocks hold at most 100 entries
_CMAP_CHUNK = 100


@runtime_checkable
class FontResolver(Protocol):
    """Font-substitution strategy used when building font resources."""

    def resolve_simple(self, fontname: str) -> str:
        """Map a caller font name to a standard base font name.

        Raises:
            ArgumentError: If the name is not a known standard font.
        """
        ...

    def resolve_composite(self, ordering: Ordering) -> str:
        """Return the substitution font name for a CID ordering."""
        ...


class StandardFontResolver:
    """Default resolver over the standard 14 fonts and Adobe CJK names.

    Example:
        >>> resolver = StandardFontResolver({Ordering.JAPANESE: "KozMinPro-Regular"})
        >>> resolver.resolve_simple("helv")
        'Helvetica'
    """

    def __init__(self, cid_fonts: Optional[dict[Ordering, str]] = None) -> None:
        self._cid_fonts = dict(cid_fonts or {})
        self._by_lower = {name.lower(): name for name in STANDARD_FONTS}

    def resolve_simple(self, fontname: str) -> str:
        key = fontname.lstrip("/").lower()
        if key in FONT_ALIASES:
            return FONT_ALIASES[key]
        if key in self._by_lower:
            return self._by_lower[key]
        raise ArgumentError(f"Unknown standard font: {fontname!r}")

    def resolve_composite(self, ordering: Ordering) -> str:
        if ordering in self._cid_fonts:
            return self._cid_fonts[ordering]
        return CID_ORDERINGS[ordering].font_name


def build_simple_font(base_font: str) -> pikepdf.Dictionary:
    """Create a Type1 font dictionary for a standard base font."""
    font = pikepdf.Dictionary(
        Type=Name.Font,
        Subtype=Name.Type1,
        BaseFont=Name("/" + base_font),
    )
    if base_font not in SYMBOLIC_FONTS:
        font.Encoding = Name.WinAnsiEncoding
    return font


def build_tounicode_cmap(text: str) -> bytes:
    """Generate a ToUnicode CMap covering the UTF-16 codes used by ``text``.

    Each distinct character becomes one ``bfchar`` entry; the destination
    is the character itself in UTF-16BE, so supplementary characters map
    their 4-byte surrogate code to the same surrogate pair.
    """
    entries = sorted(set(utf16_codes(text)))

    lines = [
        "/CIDInit /ProcSet findresource begin",
        "12 dict begin",
        "begincmap",
        "/CIDSystemInfo << /Registry (Adobe) /Ordering (UCS) /Supplement 0 >> def",
        "/CMapName /Adobe-Identity-UCS def",
        "/CMapType 2 def",
        "3 begincodespacerange",
        "<0000> <D7FF>",
        "<D800DC00> <DBFFDFFF>",
        "<E000> <FFFF>",
        "endcodespacerange",
    ]

    for i in range(0, len(entries), _CMAP_CHUNK):
        chunk = entries[i : i + _CMAP_CHUNK]
        lines.append(f"{len(chunk)} beginbfchar")
        for code, ch in chunk:
            dst = ch.encode("utf-16-be").hex().upper()
            lines.append(f"<{code.hex().upper()}> <{dst}>")
        lines.append("endbfchar")

    lines.extend(
        [
            "endcmap",
            "CMapName currentdict /CMap defineresource pop",
            "end",
            "end",
        ]
    )
    return ("\n".join(lines) + "\n").encode("ascii")


def build_composite_font(
    pdf: pikepdf.Pdf,
    ordering: Ordering,
    text: str,
    resolver: FontResolver,
) -> pikepdf.Dictionary:
    """Create a non-embedded Type0 font for a CJK ordering.

    Args:
        pdf: Document that will own the descendant objects
        ordering: Composite ordering picked by the classifier
        text: The run being shown, used for the ToUnicode table
        resolver: Font-substitution strategy

    Returns:
        The Type0 font dictionary (direct; the caller makes it indirect)
    """
    info = CID_ORDERINGS[ordering]
    font_name = resolver.resolve_composite(ordering)

    system_info = pikepdf.Dictionary(
        Registry=pikepdf.String(CID_REGISTRY),
        Ordering=pikepdf.String(info.ordering),
        Supplement=info.supplement,
    )
    descriptor = pikepdf.Dictionary(
        Type=Name.FontDescriptor,
        FontName=Name("/" + font_name),
        Flags=DESCRIPTOR_FLAGS,
        **DESCRIPTOR_METRICS,
    )
    cid_font = pikepdf.Dictionary(
        Type=Name.Font,
        Subtype=Name.CIDFontType0,
        BaseFont=Name("/" + font_name),
        CIDSystemInfo=system_info,
        FontDescriptor=pdf.make_indirect(descriptor),
        DW=CID_DEFAULT_WIDTH,
    )
    to_unicode = pdf.make_stream(build_tounicode_cmap(text))

    logger.debug(
        "Composite font %s (%s-%s-%d, %s)",
        font_name,
        CID_REGISTRY,
        info.ordering,
        info.supplement,
        info.cmap,
    )
    return pikepdf.Dictionary(
        Type=Name.Font,
        Subtype=Name.Type0,
        BaseFont=Name(f"/{font_name}-{info.cmap}"),
        Encoding=Name("/" + info.cmap),
        DescendantFonts=pikepdf.Array([pdf.make_indirect(cid_font)]),
        ToUnicode=to_unicode,
    )
