"""Tests for quillpane.bottom_pane.BottomPane and the view interface."""

from __future__ import annotations

import pytest

from quillpane.bottom_pane import BottomPane
from quillpane.bottom_pane_view import BottomPaneView
from quillpane.buffer import Buffer
from quillpane.custom_prompt_view import CustomPromptView
from quillpane.geometry import Rect
from quillpane.keys import Key, KeyEvent


class ClosableView(BottomPaneView):
    """Completes on ctrl+c; renders a single marker row."""

    def __init__(self, marker: str = "view") -> None:
        self.marker = marker
        self.closed = False

    def on_ctrl_c(self, pane):
        self.closed = True
        return "handled"

    def is_complete(self) -> bool:
        return self.closed

    def desired_height(self, width: int) -> int:
        return 1

    def render(self, area: Rect, buf: Buffer) -> None:
        buf.set_string(area.x, area.y, self.marker)


def make_pane() -> tuple[BottomPane, list[int]]:
    redraws: list[int] = []
    return BottomPane(request_redraw=lambda: redraws.append(1)), redraws


# ---------------------------------------------------------------------------
# BottomPaneView defaults
# ---------------------------------------------------------------------------


class TestViewDefaults:
    def test_passive_defaults(self) -> None:
        view = BottomPaneView()
        pane = BottomPane()
        assert view.handle_key_event(pane, KeyEvent("a")) is None
        assert not view.is_complete()
        assert view.on_ctrl_c(pane) == "ignored"
        assert view.handle_paste(pane, "x") is False
        assert view.cursor_pos(Rect(0, 0, 10, 10)) is None

    def test_layout_must_be_overridden(self) -> None:
        view = BottomPaneView()
        with pytest.raises(NotImplementedError):
            view.desired_height(10)
        with pytest.raises(NotImplementedError):
            view.render(Rect(0, 0, 1, 1), Buffer(Rect(0, 0, 1, 1)))


# ---------------------------------------------------------------------------
# View stack
# ---------------------------------------------------------------------------


class TestViewStack:
    def test_starts_empty(self) -> None:
        pane, _ = make_pane()
        assert not pane.has_active_view()
        assert pane.active_view() is None
        assert pane.desired_height(80) == 0
        assert pane.cursor_pos(Rect(0, 0, 80, 5)) is None

    def test_push_requests_redraw(self) -> None:
        pane, redraws = make_pane()
        pane.push_view(ClosableView())
        assert pane.has_active_view()
        assert redraws

    def test_top_view_is_active(self) -> None:
        pane, _ = make_pane()
        bottom, top = ClosableView("bottom"), ClosableView("top")
        pane.push_view(bottom)
        pane.push_view(top)
        assert pane.active_view() is top

    def test_show_custom_prompt(self) -> None:
        pane, _ = make_pane()
        view = pane.show_custom_prompt("Review", lambda text: None)
        assert isinstance(view, CustomPromptView)
        assert pane.active_view() is view
        assert view.title == "Review"


# ---------------------------------------------------------------------------
# Event routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_key_goes_to_top_view_and_pops_on_completion(self) -> None:
        pane, _ = make_pane()
        submitted: list[str] = []
        pane.show_custom_prompt("Review", submitted.append)
        for ch in "ok":
            pane.handle_key_event(KeyEvent(ch))
        pane.handle_key_event(KeyEvent(Key.enter))
        assert submitted == ["ok"]
        assert not pane.has_active_view()

    def test_escape_pops_without_submit(self) -> None:
        pane, _ = make_pane()
        submitted: list[str] = []
        pane.show_custom_prompt("Review", submitted.append)
        pane.handle_key_event(KeyEvent(Key.escape))
        assert submitted == []
        assert not pane.has_active_view()

    def test_completion_reveals_view_below(self) -> None:
        pane, _ = make_pane()
        below = ClosableView()
        pane.push_view(below)
        pane.show_custom_prompt("Review", lambda text: None)
        pane.handle_key_event(KeyEvent(Key.escape))
        assert pane.active_view() is below

    def test_release_events_are_dropped(self) -> None:
        pane, _ = make_pane()
        view = pane.show_custom_prompt("Review", lambda text: None)
        pane.handle_key_event(KeyEvent(Key.escape, kind="release"))
        assert not view.is_complete()
        assert pane.active_view() is view

    def test_key_without_view_is_ignored(self) -> None:
        pane, redraws = make_pane()
        pane.handle_key_event(KeyEvent("a"))
        assert not redraws

    def test_paste(self) -> None:
        pane, _ = make_pane()
        view = pane.show_custom_prompt("Review", lambda text: None)
        assert pane.handle_paste("hello") is True
        assert view.textarea.text() == "hello"
        assert pane.handle_paste("") is False

    def test_paste_without_view(self) -> None:
        pane, _ = make_pane()
        assert pane.handle_paste("x") is False

    def test_ctrl_c_handled_pops_view(self) -> None:
        pane, _ = make_pane()
        pane.push_view(ClosableView())
        assert pane.on_ctrl_c() == "handled"
        assert not pane.has_active_view()

    def test_ctrl_c_ignored_by_prompt(self) -> None:
        pane, _ = make_pane()
        view = pane.show_custom_prompt("Review", lambda text: None)
        assert pane.on_ctrl_c() == "ignored"
        assert pane.active_view() is view


# ---------------------------------------------------------------------------
# Layout delegation
# ---------------------------------------------------------------------------


class TestLayout:
    def test_delegates_to_top_view(self) -> None:
        pane, _ = make_pane()
        view = pane.show_custom_prompt("Review", lambda text: None)
        area = Rect(0, 0, 40, pane.desired_height(40))
        buf = Buffer(area)
        pane.render(area, buf)
        assert pane.desired_height(40) == view.desired_height(40) == 5
        assert buf.to_plain_lines()[0].startswith("▌ Review")
        assert pane.cursor_pos(area) == (2, 2)
