"""Multi-line text area: content, cursor, word wrapping and rendering.

Content is kept as a list of logical lines plus a ``(line, column)``
cursor, where the column is a string index into the line.  Wrapping is
computed on demand for whatever width the caller asks about, so height
queries, rendering and caret placement always agree for the same width.

Rendering is stateful: ``TextAreaState`` carries the scroll offset from one
frame to the next so the caret row stays visible without the view jumping.
The same state object must be passed to ``cursor_pos_with_state`` for the
caret to land where the text was drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NamedTuple

from quillpane.buffer import Buffer
from quillpane.geometry import Rect
from quillpane.keybindings import KeybindingsManager, get_keybindings
from quillpane.keys import Key, KeyEvent, KeyModifiers
from quillpane.utils import (
    grapheme_width,
    graphemes,
    is_punctuation_char,
    is_whitespace_char,
    visible_width,
)

TAB_SPACES = "    "


# ---------------------------------------------------------------------------
# word_wrap_line
# ---------------------------------------------------------------------------


def word_wrap_line(line: str, max_width: int) -> list[tuple[int, int]]:
    """Split *line* into ``(start, end)`` index ranges no wider than *max_width*.

    Breaks go before the first character of a word, so the whitespace
    character right before a wrapped word may hang one column past the right
    edge of the earlier row; any other whitespace that does not fit starts a
    new row.  A word wider than the whole row is broken at the last grapheme
    that fits.  When the last row is full, an empty ``(len, len)`` row
    follows it so the caret after the text has a cell to sit in.
    ``max_width <= 0`` disables wrapping.
    """
    if max_width <= 0 or visible_width(line) < max_width:
        return [(0, len(line))]

    rows: list[tuple[int, int]] = []
    start = 0
    width = 0
    # start index of the latest word on the current row, and the width before it
    word_start = -1
    width_before_word = 0
    prev_ws = False

    parts = graphemes(line)
    index = 0
    for i, g in enumerate(parts):
        g_width = grapheme_width(g)
        is_ws = is_whitespace_char(g)

        if is_ws:
            word_follows = i + 1 < len(parts) and not is_whitespace_char(parts[i + 1])
            if width + g_width > max_width and index > start and not word_follows:
                rows.append((start, index))
                start = index
                width = 0
        else:
            if prev_ws:
                word_start, width_before_word = index, width
            if width + g_width > max_width and index > start:
                if word_start > start:
                    rows.append((start, word_start))
                    start = word_start
                    width -= width_before_word
                if width + g_width > max_width and index > start:
                    rows.append((start, index))
                    start = index
                    width = 0

        width += g_width
        prev_ws = is_ws
        index += len(g)

    rows.append((start, len(line)))
    if width >= max_width:
        rows.append((len(line), len(line)))
    return rows


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class VisualRow(NamedTuple):
    line: int
    start: int
    end: int


@dataclass
class TextAreaState:
    """Scroll offset (in visual rows) carried between render passes."""

    scroll: int = 0


def _effective_scroll(height: int, cursor_row: int, total_rows: int, scroll: int) -> int:
    if height <= 0:
        return 0
    if cursor_row < scroll:
        scroll = cursor_row
    elif cursor_row >= scroll + height:
        scroll = cursor_row - height + 1
    return max(0, min(scroll, total_rows - height))


# ---------------------------------------------------------------------------
# TextArea
# ---------------------------------------------------------------------------


class TextArea:
    """Editable multi-line text with emacs-style key handling."""

    def __init__(self, keybindings: KeybindingsManager | None = None) -> None:
        self._lines: list[str] = [""]
        self._cursor_line: int = 0
        self._cursor_col: int = 0
        self._keybindings = keybindings

        # Width of the last render, used for visual up/down movement
        self._wrap_width: int = 0
        # Display column kept across consecutive vertical moves
        self._preferred_col: int | None = None

        self._kill_buffer: str = ""
        self._last_action: Literal["kill"] | None = None

    @property
    def keybindings(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    # -- Content accessors ---------------------------------------------------

    def text(self) -> str:
        return "\n".join(self._lines)

    def set_text(self, text: str) -> None:
        """Replace the content and move the cursor to the end."""
        self._lines = [""]
        self._cursor_line = 0
        self._cursor_col = 0
        self._preferred_col = None
        self._last_action = None
        self.insert_str(text)

    def is_empty(self) -> bool:
        return len(self._lines) == 1 and not self._lines[0]

    def cursor(self) -> int:
        """Return the cursor as an index into ``text()``."""
        return sum(len(line) + 1 for line in self._lines[: self._cursor_line]) + self._cursor_col

    def set_cursor(self, pos: int) -> None:
        pos = max(0, min(pos, len(self.text())))
        for index, line in enumerate(self._lines):
            if pos <= len(line):
                self._cursor_line = index
                self._cursor_col = pos
                break
            pos -= len(line) + 1
        self._preferred_col = None

    @property
    def _line(self) -> str:
        return self._lines[self._cursor_line]

    def _set_cursor_col(self, col: int) -> None:
        """Move within the current line and forget the sticky column."""
        self._cursor_col = col
        self._preferred_col = None

    # -- Insertion -----------------------------------------------------------

    def insert_str(self, text: str) -> None:
        """Insert *text* at the cursor as a single edit.

        Line endings are normalised to ``\\n``, tabs become four spaces and
        any other control character is dropped.
        """
        text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", TAB_SPACES)
        text = "".join(ch for ch in text if ch == "\n" or (ord(ch) >= 0x20 and ord(ch) != 0x7F))
        self._last_action = None
        if not text:
            return

        line = self._line
        before, after = line[: self._cursor_col], line[self._cursor_col :]
        parts = text.split("\n")
        if len(parts) == 1:
            self._lines[self._cursor_line] = before + text + after
            self._set_cursor_col(self._cursor_col + len(text))
            return

        new_lines = [before + parts[0], *parts[1:-1], parts[-1] + after]
        self._lines[self._cursor_line : self._cursor_line + 1] = new_lines
        self._cursor_line += len(parts) - 1
        self._set_cursor_col(len(parts[-1]))

    # -- Key handling --------------------------------------------------------

    def input(self, event: KeyEvent) -> None:  # noqa: C901
        """Apply one key event to the content or the cursor."""
        if event.kind == "release":
            return
        kb = self.keybindings

        if event.code == Key.enter or kb.matches(event, "newLine"):
            self.insert_str("\n")
        elif kb.matches(event, "tab"):
            self.insert_str(TAB_SPACES)

        # Deletion
        elif kb.matches(event, "deleteCharBackward"):
            self._delete_backward()
        elif kb.matches(event, "deleteCharForward"):
            self._delete_forward()
        elif kb.matches(event, "deleteWordBackward"):
            self._delete_word_backward()
        elif kb.matches(event, "deleteWordForward"):
            self._delete_word_forward()
        elif kb.matches(event, "deleteToLineStart"):
            self._delete_to_line_start()
        elif kb.matches(event, "deleteToLineEnd"):
            self._delete_to_line_end()
        elif kb.matches(event, "yank"):
            self._yank()

        # Cursor movement
        elif kb.matches(event, "cursorUp"):
            self._move_vertical(-1)
        elif kb.matches(event, "cursorDown"):
            self._move_vertical(1)
        elif kb.matches(event, "cursorLeft"):
            self._move_left()
        elif kb.matches(event, "cursorRight"):
            self._move_right()
        elif kb.matches(event, "cursorWordLeft"):
            self._move_word_left()
        elif kb.matches(event, "cursorWordRight"):
            self._move_word_right()
        elif kb.matches(event, "cursorLineStart"):
            self._set_cursor_col(0)
        elif kb.matches(event, "cursorLineEnd"):
            self._set_cursor_col(len(self._line))
        elif kb.matches(event, "cursorTextStart"):
            self._cursor_line = 0
            self._set_cursor_col(0)
        elif kb.matches(event, "cursorTextEnd"):
            self._cursor_line = len(self._lines) - 1
            self._set_cursor_col(len(self._line))

        elif event.is_char() and not event.modifiers & (
            KeyModifiers.CTRL | KeyModifiers.ALT | KeyModifiers.SUPER
        ):
            self.insert_str(event.code)
            return
        else:
            return

        if not self._is_kill_action(event):
            self._last_action = None

    def _is_kill_action(self, event: KeyEvent) -> bool:
        kb = self.keybindings
        return any(
            kb.matches(event, action)
            for action in (
                "deleteWordBackward",
                "deleteWordForward",
                "deleteToLineStart",
                "deleteToLineEnd",
            )
        )

    # -- Deletion ------------------------------------------------------------

    def _join_with_previous(self) -> None:
        previous = self._lines[self._cursor_line - 1]
        self._lines[self._cursor_line - 1] = previous + self._line
        del self._lines[self._cursor_line]
        self._cursor_line -= 1
        self._set_cursor_col(len(previous))

    def _join_with_next(self) -> None:
        self._lines[self._cursor_line] = self._line + self._lines[self._cursor_line + 1]
        del self._lines[self._cursor_line + 1]

    def _delete_backward(self) -> None:
        if self._cursor_col > 0:
            line = self._line
            last = graphemes(line[: self._cursor_col])[-1]
            col = self._cursor_col - len(last)
            self._lines[self._cursor_line] = line[:col] + line[self._cursor_col :]
            self._set_cursor_col(col)
        elif self._cursor_line > 0:
            self._join_with_previous()

    def _delete_forward(self) -> None:
        line = self._line
        if self._cursor_col < len(line):
            first = graphemes(line[self._cursor_col :])[0]
            self._lines[self._cursor_line] = line[: self._cursor_col] + line[self._cursor_col + len(first) :]
        elif self._cursor_line < len(self._lines) - 1:
            self._join_with_next()
        self._preferred_col = None

    def _kill(self, text: str, *, prepend: bool) -> None:
        """Remember deleted text; consecutive kills accumulate."""
        if self._last_action == "kill":
            self._kill_buffer = text + self._kill_buffer if prepend else self._kill_buffer + text
        else:
            self._kill_buffer = text
        self._last_action = "kill"

    def _delete_word_backward(self) -> None:
        if self._cursor_col == 0:
            if self._cursor_line > 0:
                self._kill("\n", prepend=True)
                self._join_with_previous()
            return
        line = self._line
        end = self._cursor_col
        start = self._word_start_before(line, end)
        self._kill(line[start:end], prepend=True)
        self._lines[self._cursor_line] = line[:start] + line[end:]
        self._set_cursor_col(start)

    def _delete_word_forward(self) -> None:
        line = self._line
        if self._cursor_col >= len(line):
            if self._cursor_line < len(self._lines) - 1:
                self._kill("\n", prepend=False)
                self._join_with_next()
            return
        start = self._cursor_col
        end = self._word_end_after(line, start)
        self._kill(line[start:end], prepend=False)
        self._lines[self._cursor_line] = line[:start] + line[end:]
        self._preferred_col = None

    def _delete_to_line_start(self) -> None:
        if self._cursor_col > 0:
            line = self._line
            self._kill(line[: self._cursor_col], prepend=True)
            self._lines[self._cursor_line] = line[self._cursor_col :]
            self._set_cursor_col(0)
        elif self._cursor_line > 0:
            self._kill("\n", prepend=True)
            self._join_with_previous()

    def _delete_to_line_end(self) -> None:
        line = self._line
        if self._cursor_col < len(line):
            self._kill(line[self._cursor_col :], prepend=False)
            self._lines[self._cursor_line] = line[: self._cursor_col]
        elif self._cursor_line < len(self._lines) - 1:
            self._kill("\n", prepend=False)
            self._join_with_next()
        self._preferred_col = None

    def _yank(self) -> None:
        if self._kill_buffer:
            self.insert_str(self._kill_buffer)

    # -- Word boundaries -----------------------------------------------------

    @staticmethod
    def _word_start_before(line: str, col: int) -> int:
        """Skip whitespace, then one run of word or punctuation characters."""
        chars = graphemes(line[:col])
        while chars and is_whitespace_char(chars[-1]):
            col -= len(chars.pop())
        if chars:
            punct = is_punctuation_char(chars[-1])
            while chars and not is_whitespace_char(chars[-1]) and is_punctuation_char(chars[-1]) == punct:
                col -= len(chars.pop())
        return col

    @staticmethod
    def _word_end_after(line: str, col: int) -> int:
        chars = graphemes(line[col:])
        i = 0
        while i < len(chars) and is_whitespace_char(chars[i]):
            col += len(chars[i])
            i += 1
        if i < len(chars):
            punct = is_punctuation_char(chars[i])
            while i < len(chars) and not is_whitespace_char(chars[i]) and is_punctuation_char(chars[i]) == punct:
                col += len(chars[i])
                i += 1
        return col

    # -- Cursor movement -----------------------------------------------------

    def _move_left(self) -> None:
        if self._cursor_col > 0:
            last = graphemes(self._line[: self._cursor_col])[-1]
            self._set_cursor_col(self._cursor_col - len(last))
        elif self._cursor_line > 0:
            self._cursor_line -= 1
            self._set_cursor_col(len(self._line))

    def _move_right(self) -> None:
        if self._cursor_col < len(self._line):
            first = graphemes(self._line[self._cursor_col :])[0]
            self._set_cursor_col(self._cursor_col + len(first))
        elif self._cursor_line < len(self._lines) - 1:
            self._cursor_line += 1
            self._set_cursor_col(0)

    def _move_word_left(self) -> None:
        if self._cursor_col == 0:
            if self._cursor_line > 0:
                self._cursor_line -= 1
                self._set_cursor_col(len(self._line))
            return
        self._set_cursor_col(self._word_start_before(self._line, self._cursor_col))

    def _move_word_right(self) -> None:
        if self._cursor_col >= len(self._line):
            if self._cursor_line < len(self._lines) - 1:
                self._cursor_line += 1
                self._set_cursor_col(0)
            return
        self._set_cursor_col(self._word_end_after(self._line, self._cursor_col))

    def _move_vertical(self, delta: int) -> None:
        """Move one visual row up or down, keeping the display column."""
        rows = self._layout(self._wrap_width)
        current = self._cursor_row(rows)
        target = current + delta
        if target < 0:
            self._cursor_line = 0
            self._set_cursor_col(0)
            return
        if target >= len(rows):
            self._cursor_line = len(self._lines) - 1
            self._set_cursor_col(len(self._line))
            return

        row = rows[current]
        column = self._preferred_col
        if column is None:
            column = visible_width(self._lines[row.line][row.start : self._cursor_col])

        target_row = rows[target]
        is_last = target == len(rows) - 1 or rows[target + 1].line != target_row.line
        text = self._lines[target_row.line]
        pos = target_row.start
        used = 0
        for g in graphemes(text[target_row.start : target_row.end]):
            g_width = grapheme_width(g)
            if used + g_width > column:
                break
            # the end of a wrapped row belongs to the row below it
            if not is_last and pos + len(g) >= target_row.end:
                break
            used += g_width
            pos += len(g)

        self._cursor_line = target_row.line
        self._cursor_col = pos
        self._preferred_col = column

    # -- Layout --------------------------------------------------------------

    def _layout(self, width: int) -> list[VisualRow]:
        rows: list[VisualRow] = []
        for index, line in enumerate(self._lines):
            rows.extend(VisualRow(index, start, end) for start, end in word_wrap_line(line, width))
        return rows

    def _cursor_row(self, rows: list[VisualRow]) -> int:
        for i, row in enumerate(rows):
            if row.line != self._cursor_line:
                continue
            is_last = i == len(rows) - 1 or rows[i + 1].line != row.line
            if row.start <= self._cursor_col < row.end or (is_last and self._cursor_col <= row.end):
                return i
        return len(rows) - 1

    def desired_height(self, width: int) -> int:
        """Number of visual rows the content needs at *width* (at least 1)."""
        return max(1, len(self._layout(width)))

    # -- Rendering -----------------------------------------------------------

    def render_ref(self, area: Rect, buf: Buffer, state: TextAreaState) -> None:
        """Draw the visible rows into *area*, scrolling to keep the caret in view."""
        buf.clear(area)
        self._wrap_width = area.width
        if area.is_empty():
            return

        rows = self._layout(area.width)
        state.scroll = _effective_scroll(area.height, self._cursor_row(rows), len(rows), state.scroll)
        for offset, row in enumerate(rows[state.scroll : state.scroll + area.height]):
            text = self._lines[row.line][row.start : row.end]
            buf.set_string(area.x, area.y + offset, text, max_width=area.width)

    def cursor_pos_with_state(self, area: Rect, state: TextAreaState) -> tuple[int, int] | None:
        """Absolute ``(col, row)`` of the caret, or ``None`` when it is not visible.

        Only a caret on a whitespace character hanging past the right edge
        can fall outside the area; it is drawn on the last column.
        """
        if area.is_empty():
            return None
        rows = self._layout(area.width)
        cursor_row = self._cursor_row(rows)
        scroll = _effective_scroll(area.height, cursor_row, len(rows), state.scroll)
        if not scroll <= cursor_row < scroll + area.height:
            return None

        row = rows[cursor_row]
        col = visible_width(self._lines[row.line][row.start : self._cursor_col])
        return area.x + min(col, area.width - 1), area.y + cursor_row - scroll
