"""Split raw terminal input into key and paste events.

Terminal reads can end in the middle of an escape sequence, and a
bracketed paste may span many reads.  ``InputDecoder`` accumulates raw
chunks, cuts them into complete sequences, and decodes each one.  A lone
trailing ``ESC`` is ambiguous (Escape key or the start of a sequence), so
it stays pending until more input arrives or the host calls ``flush``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal, Union

from quillpane.keys import ESC, Key, KeyEvent, parse_key_event
from quillpane.utils import graphemes

logger = logging.getLogger(__name__)

BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")

SequenceStatus = Literal["complete", "incomplete"]


@dataclass(frozen=True)
class PasteEvent:
    text: str


InputEvent = Union[KeyEvent, PasteEvent]


# ---------------------------------------------------------------------------
# Sequence completeness
# ---------------------------------------------------------------------------


def _csi_status(data: str) -> SequenceStatus:
    if len(data) < 3:
        return "incomplete"
    payload = data[2:]
    if payload.startswith("M"):
        # X10 mouse report: ESC [ M plus three bytes
        return "complete" if len(data) >= 6 else "incomplete"
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"
    if payload.startswith("<") and not _SGR_MOUSE_RE.match(payload):
        return "incomplete"
    return "complete"


def _string_terminated_status(data: str) -> SequenceStatus:
    if data.endswith(f"{ESC}\\") or data.endswith("\x07"):
        return "complete"
    return "incomplete"


def sequence_status(data: str) -> SequenceStatus:
    """Classify an ESC-prefixed candidate as complete or needing more data."""
    if len(data) == 1:
        return "incomplete"
    introducer = data[1]
    if introducer == "[":
        return _csi_status(data)
    if introducer in ("]", "P", "_"):
        return _string_terminated_status(data)
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Cut *buffer* into complete sequences; return ``(sequences, remainder)``.

    Plain text is split into single graphemes.  An escape sequence that is
    still incomplete at the end of the buffer is returned as the remainder.
    """
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        if buffer[pos] != ESC:
            end = buffer.find(ESC, pos)
            text = buffer[pos:] if end == -1 else buffer[pos:end]
            sequences.extend(graphemes(text))
            pos += len(text)
            continue

        end = pos + 1
        while end <= len(buffer):
            if sequence_status(buffer[pos:end]) == "complete":
                break
            end += 1
        else:
            return sequences, buffer[pos:]
        sequences.append(buffer[pos:end])
        pos = end
    return sequences, ""


# ---------------------------------------------------------------------------
# InputDecoder
# ---------------------------------------------------------------------------


class InputDecoder:
    """Stateful decoder from raw terminal strings to ``InputEvent`` objects."""

    def __init__(self) -> None:
        self._buffer: str = ""
        self._paste_buffer: str | None = None

    def has_pending(self) -> bool:
        """Return ``True`` while a partial escape sequence is buffered."""
        return bool(self._buffer) and self._paste_buffer is None

    def feed(self, data: str) -> list[InputEvent]:
        """Consume *data* and return every event it completes."""
        events: list[InputEvent] = []
        self._buffer += data

        while self._buffer:
            if self._paste_buffer is not None:
                # the end marker itself may have been split across reads
                pasted = self._paste_buffer + self._buffer
                end = pasted.find(BRACKETED_PASTE_END)
                if end == -1:
                    self._paste_buffer = pasted
                    self._buffer = ""
                    break
                events.append(PasteEvent(pasted[:end]))
                self._paste_buffer = None
                self._buffer = pasted[end + len(BRACKETED_PASTE_END) :]
                continue

            start = self._buffer.find(BRACKETED_PASTE_START)
            head = self._buffer if start == -1 else self._buffer[:start]
            sequences, remainder = split_sequences(head)
            events.extend(self._decode_all(sequences))
            if start == -1:
                self._buffer = remainder
                break
            # anything half-read before the paste marker cannot complete now
            events.extend(self._decode_all([remainder] if remainder else []))
            self._paste_buffer = ""
            self._buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]

        return events

    def flush(self) -> list[InputEvent]:
        """Decode whatever is pending as if no more input will follow."""
        if not self.has_pending():
            return []
        pending, self._buffer = self._buffer, ""
        if pending == ESC:
            return [KeyEvent(Key.escape)]
        event = parse_key_event(pending)
        if event is not None:
            return [event]
        # ESC followed by an unfinished sequence: report the escape, retry the rest
        if pending.startswith(ESC):
            return [KeyEvent(Key.escape), *self.feed(pending[1:]), *self.flush()]
        return []

    def clear(self) -> None:
        self._buffer = ""
        self._paste_buffer = None

    def _decode_all(self, sequences: list[str]) -> list[InputEvent]:
        events: list[InputEvent] = []
        for sequence in sequences:
            event = parse_key_event(sequence)
            if event is None:
                logger.debug("Dropping unrecognised input %r", sequence)
                continue
            events.append(event)
        return events
