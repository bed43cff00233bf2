"""Interface shared by every view the bottom pane can host."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from quillpane.buffer import Buffer
from quillpane.geometry import Rect
from quillpane.keys import KeyEvent

if TYPE_CHECKING:
    from quillpane.bottom_pane import BottomPane

CancellationEvent = Literal["handled", "ignored"]


class BottomPaneView:
    """A modal view stacked on top of the bottom pane.

    The pane forwards input to the topmost view and removes it as soon as
    ``is_complete()`` turns true.  Subclasses must provide
    ``desired_height`` and ``render``; every other hook has a passive
    default.
    """

    def handle_key_event(self, pane: BottomPane, event: KeyEvent) -> None:
        return None

    def is_complete(self) -> bool:
        return False

    def on_ctrl_c(self, pane: BottomPane) -> CancellationEvent:
        return "ignored"

    def handle_paste(self, pane: BottomPane, pasted: str) -> bool:
        """Return ``True`` if the paste was consumed."""
        return False

    def desired_height(self, width: int) -> int:
        raise NotImplementedError

    def render(self, area: Rect, buf: Buffer) -> None:
        raise NotImplementedError

    def cursor_pos(self, area: Rect) -> tuple[int, int] | None:
        return None
