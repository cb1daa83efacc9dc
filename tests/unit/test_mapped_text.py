"""Tests for mapped text provenance and line helpers."""

from __future__ import annotations

import pytest

from yamlassist.text.mapped import (
    MappedText,
    RangedLine,
    index_to_row_col,
    ranged_lines,
    row_col_to_index,
)


class TestSlicing:
    def test_from_string_is_its_own_root(self) -> None:
        doc = MappedText.from_string("hello", "doc.qmd")
        source, offset = doc.locate(3)
        assert source.name == "doc.qmd"
        assert offset == 3

    def test_three_levels_resolve_to_root(self) -> None:
        doc = MappedText.from_string("abcdefghij")
        root = doc.roots()[0]
        first = doc.slice([(2, 8)])
        second = first.slice([(1, 3), (4, 6)])
        third = second.slice([(1, 3)])
        assert first.value == "cdefgh"
        assert second.value == "degh"
        assert third.value == "eg"
        assert third.locate(0) == (root, 4)
        assert third.locate(1) == (root, 6)

    def test_every_character_matches_root(self) -> None:
        doc = MappedText.from_string("title: Foo\nauthor: Jo\n")
        derived = doc.substring(4).slice([(0, 5), (9, 14)]).substring(2)
        for offset, char in enumerate(derived.value):
            source, root_offset = derived.locate(offset)
            assert source.text[root_offset] == char

    def test_literal_text_has_its_own_root(self) -> None:
        doc = MappedText.from_string("abcdefg")
        mixed = doc.slice([(0, 2), "XY", (5, 7)])
        assert mixed.value == "abXYfg"
        literal, offset = mixed.locate(2)
        assert literal.name == "<literal>"
        assert offset == 0
        assert mixed.locate(4) == (doc.roots()[0], 5)

    def test_adjacent_ranges_are_merged(self) -> None:
        doc = MappedText.from_string("abcdef")
        assert len(doc.slice([(0, 2), (2, 4)]).segments) == 1
        assert len(doc.slice([(0, 2), (3, 4)]).segments) == 2

    def test_concat_keeps_each_root(self) -> None:
        left = MappedText.from_string("ab", "left")
        right = MappedText.from_string("cd", "right")
        joined = MappedText.concat(left, "--", right)
        assert joined.value == "ab--cd"
        assert [s.name for s in joined.roots()] == ["left", "<literal>", "right"]
        assert joined.locate(5)[0].name == "right"

    def test_empty_slice(self) -> None:
        doc = MappedText.from_string("abc")
        empty = doc.substring(1, 1)
        assert empty.value == ""
        assert empty.segments == ()

    def test_out_of_range_slice_raises(self) -> None:
        doc = MappedText.from_string("abc")
        with pytest.raises(IndexError):
            doc.slice([(1, 5)])

    def test_segments_must_cover_value(self) -> None:
        with pytest.raises(ValueError, match="cover"):
            MappedText("abc", ())


class TestLocate:
    def test_out_of_range_offset_raises(self) -> None:
        doc = MappedText.from_string("abc")
        with pytest.raises(IndexError):
            doc.locate(3)
        with pytest.raises(IndexError):
            doc.locate(-1)

    def test_locate_range_to_end(self) -> None:
        doc = MappedText.from_string("xxabc").substring(2)
        source, start, end = doc.locate_range(1, 3)
        assert (start, end) == (3, 5)
        assert source.text[start:end] == "bc"

    def test_locate_empty_range_at_end(self) -> None:
        doc = MappedText.from_string("xxabc").substring(2)
        _, start, end = doc.locate_range(3, 3)
        assert start == end == 5

    def test_root_position(self) -> None:
        cell = MappedText.from_string("ab\ncd").substring(3)
        assert cell.root_position(0) == (1, 0)
        assert cell.root_position(1) == (1, 1)
        assert cell.root_position(2) == (1, 2)

    def test_unlocate(self) -> None:
        doc = MappedText.from_string("ab\ncd")
        cell = doc.substring(3)
        root = doc.roots()[0]
        assert cell.unlocate(root, 4) == 1
        assert cell.unlocate(root, 0) is None

    def test_lines_keep_provenance(self) -> None:
        doc = MappedText.from_string("one\ntwo\n")
        second = doc.lines()[1]
        assert second.value == "two"
        assert second.root_position(0) == (1, 0)


class TestLineHelpers:
    def test_ranged_lines_handles_crlf(self) -> None:
        assert ranged_lines("a\r\nb\n") == [
            RangedLine("a", 0, 1),
            RangedLine("b", 3, 4),
            RangedLine("", 5, 5),
        ]

    def test_ranged_lines_of_empty_text(self) -> None:
        assert ranged_lines("") == [RangedLine("", 0, 0)]

    def test_row_col_to_index(self) -> None:
        assert row_col_to_index("ab\ncd", 1, 1) == 4
        assert row_col_to_index("ab", 0, 10) == 2
        with pytest.raises(IndexError):
            row_col_to_index("ab", 3, 0)

    def test_index_to_row_col(self) -> None:
        assert index_to_row_col("ab\ncd", 4) == (1, 1)
        assert index_to_row_col("ab\ncd", 5) == (1, 2)
