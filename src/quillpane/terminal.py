"""Terminal back-ends for the prompt.

``Terminal`` is the small surface ``PromptApp`` paints through.
``ProcessTerminal`` drives the real TTY: raw mode, bracketed paste, the
kitty keyboard protocol (the only way to tell shift+enter from enter) and
resize notifications.  Input is passed on undecoded; ``quillpane.input_decoder``
turns it into events.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

InputHandler = Callable[[str], None]
ResizeHandler = Callable[[], None]

# ---------------------------------------------------------------------------
# Mode switches
# ---------------------------------------------------------------------------

PASTE_MODE_ON = "\x1b[?2004h"
PASTE_MODE_OFF = "\x1b[?2004l"

# Ask for the current kitty flags; terminals without support stay silent
KITTY_QUERY = "\x1b[?u"
# Push flag 1 (disambiguate escape codes)
KITTY_PUSH = "\x1b[>1u"
KITTY_POP = "\x1b[<u"

_KITTY_REPLY = re.compile(r"\x1b\[\?\d+u")

_FALLBACK_SIZE = os.terminal_size((80, 24))


class TerminalUnavailableError(RuntimeError):
    """Raised when stdin is not an interactive terminal."""


class Terminal(Protocol):
    """What the prompt needs from a terminal."""

    def start(self, on_input: InputHandler, on_resize: ResizeHandler) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


# ---------------------------------------------------------------------------
# ProcessTerminal
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """The controlling terminal, through ``sys.stdin`` and ``sys.stdout``.

    ``start`` has to run inside an asyncio loop since stdin is watched with
    ``loop.add_reader``.  When ``QUILLPANE_WRITE_LOG`` names a file,
    every byte written is appended to it as well.
    """

    def __init__(self, kitty_protocol: bool = True) -> None:
        self._want_kitty = kitty_protocol
        self._kitty_on = False
        self._on_input: InputHandler | None = None
        self._on_resize: ResizeHandler | None = None
        self._saved_attrs: list | None = None
        self._saved_winch: signal.Handlers | None = None
        self._reader_fd: int | None = None
        self._write_log = os.environ.get("QUILLPANE_WRITE_LOG", "")

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    def _size(self) -> os.terminal_size:
        try:
            return os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return _FALLBACK_SIZE

    # -- lifecycle ------------------------------------------------------------

    def start(self, on_input: InputHandler, on_resize: ResizeHandler) -> None:
        """Switch to raw mode and begin delivering input and resizes."""
        if not sys.stdin.isatty():
            raise TerminalUnavailableError("stdin is not a terminal")

        loop = asyncio.get_running_loop()
        fd = sys.stdin.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._on_input = on_input
        self._on_resize = on_resize
        self._saved_winch = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, lambda signum, frame: self._notify_resize())

        loop.add_reader(fd, self._read_stdin)
        self._reader_fd = fd

        self._emit(PASTE_MODE_ON)
        if self._want_kitty:
            self._emit(KITTY_QUERY)

    def stop(self) -> None:
        """Undo everything ``start`` did; safe to call more than once."""
        self._emit(PASTE_MODE_OFF)
        if self._kitty_on:
            self._emit(KITTY_POP)
            self._kitty_on = False

        if self._reader_fd is not None:
            try:
                asyncio.get_running_loop().remove_reader(self._reader_fd)
            except RuntimeError:
                logger.debug("Event loop already gone, stdin reader not removed")
            self._reader_fd = None

        if self._saved_winch is not None:
            signal.signal(signal.SIGWINCH, self._saved_winch)
            self._saved_winch = None

        if self._saved_attrs is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

        self._on_input = None
        self._on_resize = None

    # -- output ---------------------------------------------------------------

    def write(self, data: str) -> None:
        self._emit(data)
        if not self._write_log:
            return
        try:
            with open(self._write_log, "a", encoding="utf-8") as log:
                log.write(data)
        except OSError:
            logger.warning("Cannot append to write log %s, disabling it", self._write_log)
            self._write_log = ""

    def _emit(self, data: str) -> None:
        # hangups are ignored
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass

    # -- input ----------------------------------------------------------------

    def _read_stdin(self) -> None:
        try:
            chunk = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if not chunk:
            return
        data = self._take_kitty_reply(chunk.decode("utf-8", errors="replace"))
        if data and self._on_input is not None:
            self._on_input(data)

    def _take_kitty_reply(self, data: str) -> str:
        """Remove the reply to ``KITTY_QUERY`` from *data*, enabling the protocol."""
        if not self._want_kitty or self._kitty_on:
            return data
        data, replies = _KITTY_REPLY.subn("", data)
        if replies:
            self._kitty_on = True
            self._emit(KITTY_PUSH)
            logger.debug("Kitty keyboard protocol enabled")
        return data

    def _notify_resize(self) -> None:
        if self._on_resize is not None:
            self._on_resize()
