"""Key hints shown underneath popup views."""

from __future__ import annotations

from quillpane.text import Line, Span, bold, dim


def key_hint(name: str) -> Span:
    return bold(name)


def standard_popup_hint_line() -> Line:
    """``Press enter to confirm or esc to go back`` with the keys emphasised."""
    return Line(
        [
            dim("Press "),
            key_hint("enter"),
            dim(" to confirm or "),
            key_hint("esc"),
            dim(" to go back"),
        ]
    )
