"""The bottom pane: a stack of modal views with input routed to the top one."""

from __future__ import annotations

import logging
from typing import Callable

from quillpane.bottom_pane_view import BottomPaneView, CancellationEvent
from quillpane.buffer import Buffer
from quillpane.custom_prompt_view import CustomPromptView, PromptSubmitted
from quillpane.geometry import Rect
from quillpane.keys import KeyEvent

logger = logging.getLogger(__name__)


class BottomPane:
    """Owns the view stack and forwards events, layout and drawing to it."""

    def __init__(self, request_redraw: Callable[[], None] | None = None) -> None:
        self._view_stack: list[BottomPaneView] = []
        self._request_redraw = request_redraw

    # -- View stack ----------------------------------------------------------

    def push_view(self, view: BottomPaneView) -> None:
        self._view_stack.append(view)
        logger.debug("Pushed %s (depth %d)", type(view).__name__, len(self._view_stack))
        self.request_redraw()

    def show_custom_prompt(self, title: str, on_submit: PromptSubmitted) -> CustomPromptView:
        view = CustomPromptView(title, on_submit)
        self.push_view(view)
        return view

    def active_view(self) -> BottomPaneView | None:
        return self._view_stack[-1] if self._view_stack else None

    def has_active_view(self) -> bool:
        return bool(self._view_stack)

    def _pop_if_complete(self, view: BottomPaneView) -> None:
        if view.is_complete() and view in self._view_stack:
            self._view_stack.remove(view)
            logger.debug("Popped %s (depth %d)", type(view).__name__, len(self._view_stack))

    def request_redraw(self) -> None:
        if self._request_redraw is not None:
            self._request_redraw()

    # -- Input ---------------------------------------------------------------

    def handle_key_event(self, event: KeyEvent) -> None:
        view = self.active_view()
        if view is None or event.kind == "release":
            return
        view.handle_key_event(self, event)
        self._pop_if_complete(view)
        self.request_redraw()

    def handle_paste(self, pasted: str) -> bool:
        view = self.active_view()
        if view is None:
            return False
        consumed = view.handle_paste(self, pasted)
        if consumed:
            self._pop_if_complete(view)
            self.request_redraw()
        return consumed

    def on_ctrl_c(self) -> CancellationEvent:
        view = self.active_view()
        if view is None:
            return "ignored"
        result = view.on_ctrl_c(self)
        if result == "handled":
            self._pop_if_complete(view)
            self.request_redraw()
        return result

    # -- Layout and drawing --------------------------------------------------

    def desired_height(self, width: int) -> int:
        view = self.active_view()
        return view.desired_height(width) if view is not None else 0

    def render(self, area: Rect, buf: Buffer) -> None:
        view = self.active_view()
        if view is not None:
            view.render(area, buf)

    def cursor_pos(self, area: Rect) -> tuple[int, int] | None:
        view = self.active_view()
        return view.cursor_pos(area) if view is not None else None
