"""Composition of terminal, input decoding and the bottom pane.

``PromptApp`` paints the pane inline, below whatever the shell printed
last, and repaints the whole region on every frame.  Renders requested
while handling input are coalesced into one pass on the next event-loop
tick.
"""

from __future__ import annotations

import asyncio
import logging

from quillpane.bottom_pane import BottomPane
from quillpane.buffer import Buffer
from quillpane.config import Config
from quillpane.geometry import Rect
from quillpane.input_decoder import InputDecoder, InputEvent, PasteEvent
from quillpane.keybindings import KeybindingsManager, set_keybindings
from quillpane.keys import matches_key
from quillpane.terminal import Terminal

logger = logging.getLogger(__name__)

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_TO_EOL = "\x1b[K"
_CLEAR_TO_EOS = "\x1b[J"


class PromptApp:
    """Runs bottom-pane views against a ``Terminal``."""

    def __init__(self, terminal: Terminal, config: Config | None = None) -> None:
        self.terminal = terminal
        self.config = config or Config()
        self.pane = BottomPane(request_redraw=self.request_render)

        self._decoder = InputDecoder()
        self._flush_handle: asyncio.TimerHandle | None = None
        self._session: asyncio.Future[str | None] | None = None

        # Render scheduling
        self._render_requested: bool = False
        self._stopped: bool = True

        # Inline region bookkeeping: rows painted last frame and the row
        # (relative to the top of the region) the terminal cursor sits on
        self._previous_height: int = 0
        self._cursor_row: int = 0

        set_keybindings(KeybindingsManager(self.config.keybindings))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.terminal.start(self.handle_input, self.request_render)
        self._stopped = False
        self.request_render()

    def stop(self) -> None:
        """Erase the painted region and hand the terminal back."""
        if self._stopped:
            return
        self._cancel_flush()
        self.clear()
        self._stopped = True
        self.terminal.stop()

    async def run_prompt(self, title: str | None = None) -> str | None:
        """Show a custom prompt and wait for it to finish.

        Resolves with the submitted text, or ``None`` when the user cancels
        or submits nothing.
        """
        loop = asyncio.get_running_loop()
        title = title if title is not None else self.config.title

        self._session = loop.create_future()
        self.pane.show_custom_prompt(title, self._finish)
        logger.info("Prompt started: %s", title)
        try:
            self.start()
            result = await self._session
        finally:
            self.stop()
            self._session = None
        logger.info("Prompt finished (%s)", "submitted" if result is not None else "cancelled")
        return result

    def _finish(self, result: str | None) -> None:
        if self._session is not None and not self._session.done():
            self._session.set_result(result)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        """Decode raw terminal input and dispatch the resulting events."""
        if self._stopped:
            return
        self._cancel_flush()
        for event in self._decoder.feed(data):
            self._dispatch(event)
        if self._decoder.has_pending():
            self._schedule_flush()
        self._check_done()

    def flush_input(self) -> None:
        """Resolve pending partial input, e.g. a lone ESC, immediately."""
        self._flush_handle = None
        for event in self._decoder.flush():
            self._dispatch(event)
        self._check_done()

    def _dispatch(self, event: InputEvent) -> None:
        if isinstance(event, PasteEvent):
            if not self.pane.handle_paste(event.text):
                logger.debug("Paste of %d characters not consumed", len(event.text))
            return
        if matches_key(event, "ctrl+c"):
            if self.pane.on_ctrl_c() == "ignored":
                logger.debug("ctrl+c cancels the session")
                self._finish(None)
            return
        self.pane.handle_key_event(event)

    def _check_done(self) -> None:
        if not self.pane.has_active_view():
            self._finish(None)

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Without a loop the caller flushes explicitly
            return
        self._flush_handle = loop.call_later(self.config.escape_timeout, self.flush_input)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    # ------------------------------------------------------------------
    # Render scheduling
    # ------------------------------------------------------------------

    def request_render(self) -> None:
        """Schedule a render on the next event-loop tick.

        Multiple calls coalesce into a single render pass.
        """
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
            loop.call_soon(self._do_render_tick)
        except RuntimeError:
            # No running event loop -- render synchronously
            self._do_render_tick()

    def _do_render_tick(self) -> None:
        self._render_requested = False
        if self._stopped:
            return
        self.do_render()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _move_to_region_top(self, out: list[str]) -> None:
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")

    def do_render(self) -> None:
        """Repaint the inline region and place the caret."""
        width = self.terminal.columns
        rows = self.terminal.rows
        if width <= 0 or rows <= 0:
            return

        height = min(self.pane.desired_height(width), rows)
        area = Rect(0, 0, width, height)
        buf = Buffer(area)
        self.pane.render(area, buf)
        caret = self.pane.cursor_pos(area)

        out: list[str] = [_HIDE_CURSOR]
        self._move_to_region_top(out)
        for i, line in enumerate(buf.to_ansi_lines()):
            if i > 0:
                out.append("\r\n")
            out.append(line)
            out.append(_CLEAR_TO_EOL)
        if height < self._previous_height:
            out.append(_CLEAR_TO_EOS)

        last_row = max(0, height - 1)
        col, row = caret if caret is not None else (0, last_row)
        if last_row > row:
            out.append(f"\x1b[{last_row - row}A")
        out.append("\r")
        if col > 0:
            out.append(f"\x1b[{col}C")
        if caret is not None:
            out.append(_SHOW_CURSOR)

        self._cursor_row = row
        self._previous_height = height
        self.terminal.write("".join(out))

    def clear(self) -> None:
        """Erase everything painted so far and show the caret again."""
        out: list[str] = []
        self._move_to_region_top(out)
        out.append(_CLEAR_TO_EOS)
        out.append(_SHOW_CURSOR)
        self.terminal.write("".join(out))
        self._cursor_row = 0
        self._previous_height = 0
