"""Rectangles and saturating arithmetic for character-cell layout.

Terminal coordinates are unsigned 16-bit quantities.  Every helper here
clamps instead of wrapping, so degenerate sizes (zero width, zero height)
collapse to empty rectangles rather than negative ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

U16_MAX = 0xFFFF


def saturating_add(a: int, b: int) -> int:
    """Return ``a + b`` clamped to ``[0, U16_MAX]``."""
    return max(0, min(a + b, U16_MAX))


def saturating_sub(a: int, b: int) -> int:
    """Return ``a - b`` clamped at zero."""
    return max(0, min(a - b, U16_MAX))


@dataclass(frozen=True)
class Rect:
    """A rectangular region of terminal cells in absolute coordinates."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        """One past the last column."""
        return saturating_add(self.x, self.width)

    @property
    def bottom(self) -> int:
        """One past the last row."""
        return saturating_add(self.y, self.height)

    @property
    def area(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def contains(self, col: int, row: int) -> bool:
        return self.left <= col < self.right and self.top <= row < self.bottom

    def intersection(self, other: Rect) -> Rect:
        """Return the overlap of two rects (empty when they do not touch)."""
        x1 = max(self.left, other.left)
        y1 = max(self.top, other.top)
        x2 = min(self.right, other.right)
        y2 = min(self.bottom, other.bottom)
        return Rect(x1, y1, saturating_sub(x2, x1), saturating_sub(y2, y1))

    def rows(self) -> Iterator[Rect]:
        """Yield one single-row rect per row of this rect."""
        for offset in range(self.height):
            yield Rect(self.x, saturating_add(self.y, offset), self.width, 1)
