# SPDX-License-Identifier: Apache-2.0
"""Tests for font resource construction."""

import pikepdf
import pytest
from pikepdf import Name

from pdf_inserter.core.errors import ArgumentError
from pdf_inserter.core.fonts import (
    CID_ORDERINGS,
    DESCRIPTOR_FLAGS,
    FontResolver,
    StandardFontResolver,
    build_composite_font,
    build_simple_font,
    build_tounicode_cmap,
)
from pdf_inserter.core.models import Ordering


# ============================================================================
# Resolver
# ============================================================================


class TestStandardFontResolver:
    """Tests for StandardFontResolver."""

    def test_is_font_resolver(self) -> None:
        assert isinstance(StandardFontResolver(), FontResolver)

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Helvetica", "Helvetica"),
            ("helvetica", "Helvetica"),
            ("/Times-Roman", "Times-Roman"),
            ("helv", "Helvetica"),
            ("cobo", "Courier-Bold"),
            ("zadb", "ZapfDingbats"),
        ],
    )
    def test_resolve_simple(self, name: str, expected: str) -> None:
        assert StandardFontResolver().resolve_simple(name) == expected

    def test_unknown_font(self) -> None:
        with pytest.raises(ArgumentError):
            StandardFontResolver().resolve_simple("Comic-Sans")

    def test_default_composite_fonts(self) -> None:
        resolver = StandardFontResolver()
        assert resolver.resolve_composite(Ordering.SIMPLIFIED_CHINESE) == "STSong-Light"
        assert resolver.resolve_composite(Ordering.JAPANESE) == "HeiseiMin-W3"

    def test_composite_override(self) -> None:
        resolver = StandardFontResolver({Ordering.KOREAN: "HYGoThic-Medium"})
        assert resolver.resolve_composite(Ordering.KOREAN) == "HYGoThic-Medium"
        assert resolver.resolve_composite(Ordering.TRADITIONAL_CHINESE) == "MSung-Light"


# ============================================================================
# Simple fonts
# ============================================================================


class TestSimpleFont:
    """Tests for build_simple_font()."""

    def test_helvetica(self) -> None:
        font = build_simple_font("Helvetica")
        assert font.Type == Name.Font
        assert font.Subtype == Name.Type1
        assert font.BaseFont == Name.Helvetica
        assert font.Encoding == Name.WinAnsiEncoding

    def test_symbolic_font_has_no_encoding(self) -> None:
        font = build_simple_font("ZapfDingbats")
        assert "/Encoding" not in font


# ============================================================================
# Composite fonts
# ============================================================================


class TestCompositeFont:
    """Tests for build_composite_font()."""

    @pytest.mark.parametrize(
        "ordering,registry_ordering,supplement,cmap",
        [
            (Ordering.SIMPLIFIED_CHINESE, "GB1", 5, "UniGB-UTF16-H"),
            (Ordering.TRADITIONAL_CHINESE, "CNS1", 7, "UniCNS-UTF16-H"),
            (Ordering.JAPANESE, "Japan1", 7, "UniJIS-UTF16-H"),
            (Ordering.KOREAN, "Korea1", 2, "UniKS-UTF16-H"),
        ],
    )
    def test_system_info(
        self, ordering: Ordering, registry_ordering: str, supplement: int, cmap: str
    ) -> None:
        """Each ordering declares its Adobe character collection and CMap."""
        pdf = pikepdf.new()
        font = build_composite_font(pdf, ordering, "字", StandardFontResolver())

        assert font.Subtype == Name.Type0
        assert font.Encoding == Name("/" + cmap)
        descendant = font.DescendantFonts[0]
        assert descendant.Subtype == Name.CIDFontType0
        info = descendant.CIDSystemInfo
        assert str(info.Registry) == "Adobe"
        assert str(info.Ordering) == registry_ordering
        assert int(info.Supplement) == supplement
        assert int(descendant.DW) == 1000

    def test_not_embedded(self) -> None:
        """The descriptor names the font but carries no font file."""
        pdf = pikepdf.new()
        font = build_composite_font(pdf, Ordering.JAPANESE, "あ", StandardFontResolver())
        descriptor = font.DescendantFonts[0].FontDescriptor
        assert descriptor.FontName == Name("/HeiseiMin-W3")
        assert int(descriptor.Flags) == DESCRIPTOR_FLAGS
        for key in ("/FontFile", "/FontFile2", "/FontFile3"):
            assert key not in descriptor

    def test_base_font_name(self) -> None:
        pdf = pikepdf.new()
        font = build_composite_font(pdf, Ordering.KOREAN, "한", StandardFontResolver())
        assert font.BaseFont == Name("/HYSMyeongJo-Medium-UniKS-UTF16-H")

    def test_resolver_override(self) -> None:
        pdf = pikepdf.new()
        resolver = StandardFontResolver({Ordering.SIMPLIFIED_CHINESE: "STHeiti-Regular"})
        font = build_composite_font(pdf, Ordering.SIMPLIFIED_CHINESE, "中", resolver)
        assert font.DescendantFonts[0].BaseFont == Name("/STHeiti-Regular")

    def test_descendant_is_indirect(self) -> None:
        pdf = pikepdf.new()
        font = build_composite_font(pdf, Ordering.JAPANESE, "あ", StandardFontResolver())
        assert font.DescendantFonts[0].is_indirect

    def test_to_unicode_attached(self) -> None:
        pdf = pikepdf.new()
        font = build_composite_font(
            pdf, Ordering.SIMPLIFIED_CHINESE, "你好", StandardFontResolver()
        )
        cmap = font.ToUnicode.read_bytes().decode("ascii")
        assert "<4F60> <4F60>" in cmap
        assert "<597D> <597D>" in cmap


class TestToUnicodeCMap:
    """Tests for build_tounicode_cmap()."""

    def test_distinct_characters(self) -> None:
        cmap = build_tounicode_cmap("你你好").decode("ascii")
        assert "2 beginbfchar" in cmap
        assert cmap.count("<4F60> <4F60>") == 1

    def test_surrogate_pair(self) -> None:
        cmap = build_tounicode_cmap("\U00020000").decode("ascii")
        assert "<D840DC00> <D840DC00>" in cmap
        assert "<D800DC00> <DBFFDFFF>" in cmap

    def test_chunks_of_one_hundred(self) -> None:
        text = "".join(chr(0x4E00 + i) for i in range(250))
        cmap = build_tounicode_cmap(text).decode("ascii")
        assert cmap.count("100 beginbfchar") == 2
        assert "50 beginbfchar" in cmap
        assert cmap.count("endbfchar") == 3

    def test_orderings_cover_composites(self) -> None:
        composites = {o for o in Ordering if o.is_composite}
        assert set(CID_ORDERINGS) == composites
