"""Character-cell buffer that views render into.

A ``Buffer`` covers one ``Rect`` of the screen.  Each cell holds a symbol
(one grapheme) and a ``Style``.  Wide graphemes occupy their own cell plus
an empty placeholder cell to the right.  Writes are always clipped to the
buffer area, so callers can hand in any rectangle without bounds checks.
"""

from __future__ import annotations

from dataclasses import dataclass

from quillpane.geometry import Rect, saturating_add
from quillpane.text import DEFAULT_STYLE, SGR_RESET, Line, LineLike, Span, Style
from quillpane.utils import grapheme_width, graphemes


@dataclass
class Cell:
    symbol: str = " "
    style: Style = DEFAULT_STYLE

    def reset(self) -> None:
        self.symbol = " "
        self.style = DEFAULT_STYLE


class Buffer:
    """Row-major grid of ``Cell`` objects for *area*."""

    def __init__(self, area: Rect) -> None:
        self._area = area
        self._cells: list[Cell] = [Cell() for _ in range(area.area)]

    @property
    def area(self) -> Rect:
        return self._area

    # -- Cell access ---------------------------------------------------------

    def _index(self, col: int, row: int) -> int:
        return (row - self._area.y) * self._area.width + (col - self._area.x)

    def cell(self, col: int, row: int) -> Cell | None:
        """Return the cell at absolute ``(col, row)``, or ``None`` if outside."""
        if not self._area.contains(col, row):
            return None
        return self._cells[self._index(col, row)]

    # -- Writing -------------------------------------------------------------

    def set_string(
        self,
        x: int,
        y: int,
        text: str,
        style: Style = DEFAULT_STYLE,
        max_width: int | None = None,
    ) -> int:
        """Write *text* starting at ``(x, y)`` and return the columns used.

        Zero-width graphemes are skipped.  A grapheme that would straddle
        the right edge (or *max_width*) is not drawn at all.
        """
        area = self._area
        if y < area.top or y >= area.bottom or x >= area.right:
            return 0

        limit = area.right
        if max_width is not None:
            limit = min(limit, saturating_add(x, max_width))

        col = x
        for g in graphemes(text):
            width = grapheme_width(g)
            if width == 0:
                continue
            if col + width > limit:
                break
            if col >= area.left:
                cell = self._cells[self._index(col, y)]
                cell.symbol = g
                cell.style = style
                for filler in range(1, width):
                    placeholder = self.cell(col + filler, y)
                    if placeholder is not None:
                        placeholder.symbol = ""
                        placeholder.style = style
            col += width
        return col - x

    def set_span(
        self, x: int, y: int, span: Span, max_width: int | None = None
    ) -> int:
        return self.set_string(x, y, span.content, span.style, max_width)

    def set_line(
        self, x: int, y: int, line: Line, max_width: int | None = None
    ) -> int:
        """Write every span of *line* left to right; return columns used."""
        used = 0
        for span in line.spans:
            remaining = None if max_width is None else max_width - used
            if remaining is not None and remaining <= 0:
                break
            used += self.set_span(x + used, y, span, remaining)
        return used

    def clear(self, area: Rect) -> None:
        """Reset every cell of *area* that lies inside the buffer."""
        target = self._area.intersection(area)
        for row in range(target.top, target.bottom):
            for col in range(target.left, target.right):
                self._cells[self._index(col, row)].reset()

    # -- Output --------------------------------------------------------------

    def _row(self, row: int) -> list[Cell]:
        start = (row - self._area.y) * self._area.width
        return self._cells[start : start + self._area.width]

    def to_plain_lines(self) -> list[str]:
        """Return the symbols of each row with styles dropped."""
        return [
            "".join(cell.symbol for cell in self._row(row))
            for row in range(self._area.top, self._area.bottom)
        ]

    def to_ansi_lines(self) -> list[str]:
        """Return each row as a string with SGR transitions between styles."""
        lines: list[str] = []
        for row in range(self._area.top, self._area.bottom):
            parts: list[str] = []
            current = DEFAULT_STYLE
            for cell in self._row(row):
                if cell.style != current:
                    parts.append(SGR_RESET)
                    parts.append(cell.style.sgr())
                    current = cell.style
                parts.append(cell.symbol)
            if not current.is_default():
                parts.append(SGR_RESET)
            lines.append("".join(parts))
        return lines


def render_line(line: LineLike, area: Rect, buf: Buffer) -> None:
    """Draw a single line into the first row of *area* (paragraph style)."""
    if area.is_empty():
        return
    buf.set_line(area.x, area.y, Line.from_(line), area.width)
