"""Multi-line prompt that collects free-form instructions.

Layout, top to bottom::

    ▌ <title>
    ▌
    ▌ <text area, 1 to 8 rows>
    ▌
    Press enter to confirm or esc to go back

Plain Enter submits the trimmed text, Escape cancels, and Enter with any
modifier inserts a line break.  The view completes exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from quillpane.bottom_pane_view import BottomPaneView
from quillpane.buffer import Buffer, render_line
from quillpane.geometry import Rect, saturating_add, saturating_sub
from quillpane.hints import standard_popup_hint_line
from quillpane.keys import Key, KeyEvent, KeyModifiers
from quillpane.text import Line, bold, dim
from quillpane.textarea import TextArea, TextAreaState

if TYPE_CHECKING:
    from quillpane.bottom_pane import BottomPane

QUOTE_BAR = "▌ "
GUTTER_WIDTH = 2
MAX_TEXT_ROWS = 8
MAX_INPUT_ROWS = 9
PLACEHOLDER = "Type instructions and press Enter"

PromptSubmitted = Callable[[str], None]


class CustomPromptView(BottomPaneView):
    """Collects a custom instruction and hands it to *on_submit*."""

    def __init__(self, title: str, on_submit: PromptSubmitted) -> None:
        self._title = title
        self._on_submit: PromptSubmitted | None = on_submit

        self._textarea = TextArea()
        self._textarea_state = TextAreaState()
        self._complete = False

    @property
    def title(self) -> str:
        return self._title

    @property
    def textarea(self) -> TextArea:
        return self._textarea

    # -- Events --------------------------------------------------------------

    def handle_key_event(self, pane: BottomPane | None, event: KeyEvent) -> None:
        if event.code == Key.escape:
            self._complete = True
        elif event.code == Key.enter and event.modifiers == KeyModifiers.NONE:
            self._submit()
        else:
            # modified Enter reaches the text area as a line break
            self._textarea.input(event)

    def _submit(self) -> None:
        text = self._textarea.text().strip()
        callback, self._on_submit = self._on_submit, None
        if text and callback is not None:
            callback(text)
        self._complete = True

    def handle_paste(self, pane: BottomPane | None, pasted: str) -> bool:
        if not pasted:
            return False
        self._textarea.insert_str(pasted)
        return True

    def is_complete(self) -> bool:
        return self._complete

    # -- Layout --------------------------------------------------------------

    def _input_height(self, width: int) -> int:
        usable_width = saturating_sub(width, GUTTER_WIDTH)
        text_height = max(1, min(self._textarea.desired_height(usable_width), MAX_TEXT_ROWS))
        return min(saturating_add(text_height, 1), MAX_INPUT_ROWS)

    def desired_height(self, width: int) -> int:
        return 1 + self._input_height(width) + 2

    # -- Rendering -----------------------------------------------------------

    @staticmethod
    def _render_blank_prefixed_line(area: Rect, buf: Buffer) -> None:
        if area.is_empty():
            return
        buf.clear(area)
        render_line(dim(QUOTE_BAR), area, buf)

    def render(self, area: Rect, buf: Buffer) -> None:
        if area.is_empty():
            return

        input_height = self._input_height(area.width)

        title_area = Rect(area.x, area.y, area.width, 1)
        render_line(Line([dim(QUOTE_BAR), bold(self._title)]), title_area, buf)

        input_area = Rect(area.x, saturating_add(area.y, 1), area.width, input_height)
        if input_area.width >= GUTTER_WIDTH:
            for row in input_area.rows():
                render_line(dim(QUOTE_BAR), Rect(row.x, row.y, GUTTER_WIDTH, 1), buf)

            text_height = saturating_sub(input_area.height, 1)
            if text_height > 0:
                if input_area.width > GUTTER_WIDTH:
                    spacer = Rect(
                        saturating_add(input_area.x, GUTTER_WIDTH),
                        input_area.y,
                        saturating_sub(input_area.width, GUTTER_WIDTH),
                        1,
                    )
                    buf.clear(spacer)
                textarea_rect = Rect(
                    saturating_add(input_area.x, GUTTER_WIDTH),
                    saturating_add(input_area.y, 1),
                    saturating_sub(input_area.width, GUTTER_WIDTH),
                    text_height,
                )
                self._textarea.render_ref(textarea_rect, buf, self._textarea_state)
                if not self._textarea.text():
                    render_line(dim(PLACEHOLDER), textarea_rect, buf)

        bottom = area.bottom
        hint_blank_y = saturating_add(saturating_add(area.y, 1), input_height)
        if hint_blank_y < bottom:
            self._render_blank_prefixed_line(Rect(area.x, hint_blank_y, area.width, 1), buf)
        hint_y = saturating_add(hint_blank_y, 1)
        if hint_y < bottom:
            render_line(standard_popup_hint_line(), Rect(area.x, hint_y, area.width, 1), buf)

    def cursor_pos(self, area: Rect) -> tuple[int, int] | None:
        if area.height < 2 or area.width <= GUTTER_WIDTH:
            return None
        text_height = saturating_sub(self._input_height(area.width), 1)
        if text_height == 0:
            return None
        textarea_rect = Rect(
            saturating_add(area.x, GUTTER_WIDTH),
            saturating_add(area.y, 2),
            saturating_sub(area.width, GUTTER_WIDTH),
            text_height,
        )
        return self._textarea.cursor_pos_with_state(textarea_rect, self._textarea_state)
