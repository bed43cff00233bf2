"""Styled text spans.

Only two attributes exist: *dim* and *bold*.  A ``Line`` is an ordered
list of ``Span`` objects rendered left to right on a single terminal row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from quillpane.utils import visible_width

_SGR_BOLD = "1"
_SGR_DIM = "2"
SGR_RESET = "\x1b[0m"


@dataclass(frozen=True)
class Style:
    """Text emphasis applied to a span or a cell."""

    bold: bool = False
    dim: bool = False

    def is_default(self) -> bool:
        return not (self.bold or self.dim)

    def sgr(self) -> str:
        """Return the SGR sequence that switches a terminal to this style."""
        codes = []
        if self.bold:
            codes.append(_SGR_BOLD)
        if self.dim:
            codes.append(_SGR_DIM)
        if not codes:
            return ""
        return f"\x1b[{';'.join(codes)}m"


DEFAULT_STYLE = Style()


@dataclass(frozen=True)
class Span:
    content: str
    style: Style = DEFAULT_STYLE

    def width(self) -> int:
        return visible_width(self.content)


def dim(text: str) -> Span:
    return Span(text, Style(dim=True))


def bold(text: str) -> Span:
    return Span(text, Style(bold=True))


LineLike = Union[str, Span, "Line", list]


@dataclass
class Line:
    """A single row of styled spans."""

    spans: list[Span] = field(default_factory=list)

    @classmethod
    def from_(cls, value: LineLike) -> Line:
        """Build a line from a string, a span, or a list of either."""
        if isinstance(value, Line):
            return value
        if isinstance(value, str):
            return cls([Span(value)])
        if isinstance(value, Span):
            return cls([value])
        return cls([Span(item) if isinstance(item, str) else item for item in value])

    def width(self) -> int:
        return sum(span.width() for span in self.spans)

    def plain_text(self) -> str:
        return "".join(span.content for span in self.spans)
