"""Tests for quillpane.buffer and quillpane.text."""

from __future__ import annotations

from quillpane.buffer import Buffer, render_line
from quillpane.geometry import Rect
from quillpane.text import DEFAULT_STYLE, Line, Span, Style, bold, dim


# ---------------------------------------------------------------------------
# Style / Line
# ---------------------------------------------------------------------------


class TestStyle:
    def test_default_has_no_sgr(self) -> None:
        assert DEFAULT_STYLE.sgr() == ""
        assert DEFAULT_STYLE.is_default()

    def test_bold_and_dim_sgr(self) -> None:
        assert Style(bold=True).sgr() == "\x1b[1m"
        assert Style(dim=True).sgr() == "\x1b[2m"
        assert Style(bold=True, dim=True).sgr() == "\x1b[1;2m"


class TestLine:
    def test_from_str(self) -> None:
        assert Line.from_("abc").spans == [Span("abc")]

    def test_from_mixed_list(self) -> None:
        line = Line.from_(["a", bold("b")])
        assert line.plain_text() == "ab"
        assert line.spans[1].style == Style(bold=True)

    def test_width_counts_wide_chars(self) -> None:
        assert Line.from_("日本").width() == 4


# ---------------------------------------------------------------------------
# Buffer writes
# ---------------------------------------------------------------------------


class TestSetString:
    def test_writes_and_returns_width(self) -> None:
        buf = Buffer(Rect(0, 0, 5, 1))
        assert buf.set_string(0, 0, "hi") == 2
        assert buf.to_plain_lines() == ["hi   "]

    def test_clips_at_right_edge(self) -> None:
        buf = Buffer(Rect(0, 0, 3, 1))
        assert buf.set_string(1, 0, "abcdef") == 2
        assert buf.to_plain_lines() == [" ab"]

    def test_max_width(self) -> None:
        buf = Buffer(Rect(0, 0, 10, 1))
        buf.set_string(0, 0, "abcdef", max_width=3)
        assert buf.to_plain_lines() == ["abc       "]

    def test_outside_rows_are_ignored(self) -> None:
        buf = Buffer(Rect(0, 0, 3, 1))
        assert buf.set_string(0, 1, "abc") == 0
        assert buf.to_plain_lines() == ["   "]

    def test_wide_grapheme_uses_placeholder(self) -> None:
        buf = Buffer(Rect(0, 0, 4, 1))
        buf.set_string(0, 0, "日x")
        assert buf.cell(0, 0).symbol == "日"
        assert buf.cell(1, 0).symbol == ""
        assert buf.cell(2, 0).symbol == "x"

    def test_wide_grapheme_not_split_at_edge(self) -> None:
        buf = Buffer(Rect(0, 0, 3, 1))
        buf.set_string(0, 0, "a日本")
        assert buf.to_plain_lines() == ["a日"]

    def test_offset_area(self) -> None:
        buf = Buffer(Rect(5, 5, 2, 2))
        buf.set_string(5, 6, "xy")
        assert buf.cell(0, 0) is None
        assert buf.to_plain_lines() == ["  ", "xy"]

    def test_cell_outside_is_none(self) -> None:
        buf = Buffer(Rect(0, 0, 2, 2))
        assert buf.cell(2, 0) is None
        assert buf.cell(0, 2) is None


class TestClear:
    def test_clear_resets_intersection_only(self) -> None:
        buf = Buffer(Rect(0, 0, 4, 1))
        buf.set_string(0, 0, "abcd", Style(bold=True))
        buf.clear(Rect(1, 0, 10, 1))
        assert buf.to_plain_lines() == ["a   "]
        assert buf.cell(1, 0).style == DEFAULT_STYLE
        assert buf.cell(0, 0).style == Style(bold=True)


class TestAnsiOutput:
    def test_style_transitions(self) -> None:
        buf = Buffer(Rect(0, 0, 3, 1))
        buf.set_line(0, 0, Line([dim("a"), Span("b")]))
        assert buf.to_ansi_lines() == ["\x1b[0m\x1b[2ma\x1b[0mb "]

    def test_trailing_reset(self) -> None:
        buf = Buffer(Rect(0, 0, 1, 1))
        buf.set_string(0, 0, "x", Style(bold=True))
        assert buf.to_ansi_lines() == ["\x1b[0m\x1b[1mx\x1b[0m"]


class TestRenderLine:
    def test_renders_first_row_only(self) -> None:
        buf = Buffer(Rect(0, 0, 4, 2))
        render_line("abcdef", Rect(0, 0, 4, 2), buf)
        assert buf.to_plain_lines() == ["abcd", "    "]

    def test_empty_area_is_noop(self) -> None:
        buf = Buffer(Rect(0, 0, 4, 1))
        render_line("abc", Rect(0, 0, 0, 1), buf)
        assert buf.to_plain_lines() == ["    "]
