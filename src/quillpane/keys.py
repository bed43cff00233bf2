"""Structured key events and decoding of raw terminal key sequences.

Raw input arrives as strings such as ``"\\x1b[A"`` or ``"\\x1b[13;2u"``.
``parse_key_event`` turns one complete sequence into a ``KeyEvent`` with a
key code and modifier flags, understanding the kitty keyboard protocol,
xterm's modifyOtherKeys format, modified CSI cursor keys and the legacy
single-byte control characters.  Key identifiers like ``"ctrl+a"`` or
``"shift+enter"`` are matched against events with ``matches_key``.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Literal

from quillpane.utils import graphemes

ESC = "\x1b"

KeyId = str
KeyEventKind = Literal["press", "repeat", "release"]


class KeyModifiers(enum.IntFlag):
    """Modifier bits, numbered as in the kitty keyboard protocol."""

    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4
    SUPER = 8


# ---------------------------------------------------------------------------
# Named keys
# ---------------------------------------------------------------------------


class Key:
    """Named key constants."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    f1 = "f1"
    f2 = "f2"
    f3 = "f3"
    f4 = "f4"
    f5 = "f5"
    f6 = "f6"
    f7 = "f7"
    f8 = "f8"
    f9 = "f9"
    f10 = "f10"
    f11 = "f11"
    f12 = "f12"


NAMED_KEYS: frozenset[str] = frozenset(
    value
    for name, value in vars(Key).items()
    if not name.startswith("_") and isinstance(value, str)
)

_NAMED_BY_LOWER: dict[str, str] = {name.lower(): name for name in NAMED_KEYS}

_KEY_ALIASES: dict[str, str] = {
    "esc": Key.escape,
    "return": Key.enter,
    "space": " ",
    "del": Key.delete,
    "pgup": Key.page_up,
    "pgdn": Key.page_down,
}

# Order defines how key ids are spelled: ctrl+shift+alt+super+<key>
_MODIFIER_NAMES: tuple[tuple[str, KeyModifiers], ...] = (
    ("ctrl", KeyModifiers.CTRL),
    ("shift", KeyModifiers.SHIFT),
    ("alt", KeyModifiers.ALT),
    ("super", KeyModifiers.SUPER),
)
_MODIFIERS_BY_NAME = dict(_MODIFIER_NAMES)


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A decoded key press.

    ``code`` is either one of the ``Key`` names or the single grapheme the
    key produces (``"a"``, ``"A"``, ``" "``, ``"é"``).
    """

    code: str
    modifiers: KeyModifiers = KeyModifiers.NONE
    kind: KeyEventKind = "press"

    def is_char(self) -> bool:
        return self.code not in NAMED_KEYS

    @property
    def key_id(self) -> KeyId:
        """The canonical identifier, e.g. ``"ctrl+shift+a"``."""
        if self.code == " ":
            name = "space"
        elif self.is_char():
            name = self.code.lower()
        else:
            name = self.code
        prefix = "".join(
            f"{label}+" for label, flag in _MODIFIER_NAMES if self.modifiers & flag
        )
        return prefix + name

    def matches(self, key_id: KeyId) -> bool:
        return matches_key(self, key_id)


# ---------------------------------------------------------------------------
# Key identifiers
# ---------------------------------------------------------------------------


def parse_key_id(key_id: KeyId) -> tuple[str, KeyModifiers]:
    """Split ``"ctrl+shift+enter"`` into ``("enter", CTRL | SHIFT)``.

    Raises ``ValueError`` for unknown modifiers or key names.
    """
    if key_id.endswith("++"):
        prefix_parts, name = key_id[:-2].split("+"), "+"
    elif key_id == "+":
        prefix_parts, name = [], "+"
    else:
        *prefix_parts, name = key_id.split("+")

    modifiers = KeyModifiers.NONE
    for part in prefix_parts:
        if not part:
            continue
        flag = _MODIFIERS_BY_NAME.get(part.lower())
        if flag is None:
            raise ValueError(f"Unknown modifier {part!r} in key id {key_id!r}")
        modifiers |= flag

    lowered = name.lower()
    if lowered in _KEY_ALIASES:
        return _KEY_ALIASES[lowered], modifiers
    if lowered in _NAMED_BY_LOWER:
        return _NAMED_BY_LOWER[lowered], modifiers
    if len(graphemes(name)) == 1:
        return lowered, modifiers
    raise ValueError(f"Unknown key {name!r} in key id {key_id!r}")


def matches_key(event: KeyEvent, key_id: KeyId) -> bool:
    """Return ``True`` if *event* is a press or repeat of *key_id*."""
    if event.kind == "release":
        return False
    try:
        code, modifiers = parse_key_id(key_id)
    except ValueError:
        return False
    event_code = event.code.lower() if event.is_char() else event.code
    return event_code == code and event.modifiers == modifiers


# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

# Caps lock and num lock never take part in matching
_LOCK_MASK = 64 + 128

_EVENT_KINDS: dict[int, KeyEventKind] = {1: "press", 2: "repeat", 3: "release"}

# CSI <codepoint>(:<shifted>(:<base>))?(;<modifier>(:<event>))?u
_KITTY_CSI_U_RE = re.compile(
    r"^\x1b\[(\d+)(?::(\d*))?(?::(\d+))?(?:;(\d+))?(?::(\d+))?u$"
)
# CSI 27;<modifier>;<keycode>~
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")
# CSI 1;<modifier>(:<event>)?<letter>
_MODIFIED_CSI_RE = re.compile(r"^\x1b\[1;(\d+)(?::(\d+))?([ABCDHFPQRS])$")
# CSI <number>(;<modifier>(:<event>)?)?~
_FUNCTIONAL_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+)(?::(\d+))?)?~$")

_CSI_LETTER_KEYS: dict[str, str] = {
    "A": Key.up,
    "B": Key.down,
    "C": Key.right,
    "D": Key.left,
    "H": Key.home,
    "F": Key.end,
    "P": Key.f1,
    "Q": Key.f2,
    "R": Key.f3,
    "S": Key.f4,
}

_TILDE_KEYS: dict[int, str] = {
    1: Key.home,
    2: Key.insert,
    3: Key.delete,
    4: Key.end,
    5: Key.page_up,
    6: Key.page_down,
    7: Key.home,
    8: Key.end,
    11: Key.f1,
    12: Key.f2,
    13: Key.f3,
    14: Key.f4,
    15: Key.f5,
    17: Key.f6,
    18: Key.f7,
    19: Key.f8,
    20: Key.f9,
    21: Key.f10,
    23: Key.f11,
    24: Key.f12,
}

_CODEPOINT_KEYS: dict[int, str] = {
    8: Key.backspace,
    9: Key.tab,
    13: Key.enter,
    27: Key.escape,
    127: Key.backspace,
    57414: Key.enter,  # keypad enter
}

_NONE = KeyModifiers.NONE
_SHIFT = KeyModifiers.SHIFT
_CTRL = KeyModifiers.CTRL

_LEGACY_SEQUENCES: dict[str, tuple[str, KeyModifiers]] = {
    "\x1b[A": (Key.up, _NONE),
    "\x1b[B": (Key.down, _NONE),
    "\x1b[C": (Key.right, _NONE),
    "\x1b[D": (Key.left, _NONE),
    "\x1b[H": (Key.home, _NONE),
    "\x1b[F": (Key.end, _NONE),
    "\x1bOA": (Key.up, _NONE),
    "\x1bOB": (Key.down, _NONE),
    "\x1bOC": (Key.right, _NONE),
    "\x1bOD": (Key.left, _NONE),
    "\x1bOH": (Key.home, _NONE),
    "\x1bOF": (Key.end, _NONE),
    "\x1bOP": (Key.f1, _NONE),
    "\x1bOQ": (Key.f2, _NONE),
    "\x1bOR": (Key.f3, _NONE),
    "\x1bOS": (Key.f4, _NONE),
    "\x1bOM": (Key.enter, _NONE),
    "\x1b[Z": (Key.tab, _SHIFT),
    # rxvt
    "\x1b[a": (Key.up, _SHIFT),
    "\x1b[b": (Key.down, _SHIFT),
    "\x1b[c": (Key.right, _SHIFT),
    "\x1b[d": (Key.left, _SHIFT),
    "\x1bOa": (Key.up, _CTRL),
    "\x1bOb": (Key.down, _CTRL),
    "\x1bOc": (Key.right, _CTRL),
    "\x1bOd": (Key.left, _CTRL),
}


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def _decode_modifiers(raw: str | None) -> KeyModifiers:
    if not raw:
        return KeyModifiers.NONE
    bits = (int(raw) - 1) & ~_LOCK_MASK
    return KeyModifiers(max(bits, 0) & 0b1111)


def _decode_kind(raw: str | None) -> KeyEventKind:
    if not raw:
        return "press"
    return _EVENT_KINDS.get(int(raw), "press")


def _from_codepoint(
    codepoint: int,
    modifiers: KeyModifiers,
    kind: KeyEventKind = "press",
    shifted: int | None = None,
) -> KeyEvent | None:
    named = _CODEPOINT_KEYS.get(codepoint)
    if named is not None:
        return KeyEvent(named, modifiers, kind)
    if codepoint == 32:
        return KeyEvent(" ", modifiers, kind)
    if codepoint < 32 or codepoint > 0x10FFFF:
        return None
    if shifted is not None and modifiers & KeyModifiers.SHIFT:
        codepoint = shifted
    char = chr(codepoint)
    if not char.isprintable():
        return None
    return KeyEvent(char, modifiers, kind)


def _from_single_char(ch: str) -> KeyEvent | None:
    """Decode one legacy byte: control characters, ESC, or a printable."""
    cp = ord(ch)
    if ch == "\r":
        return KeyEvent(Key.enter)
    if ch == "\n":
        return KeyEvent("j", KeyModifiers.CTRL)
    if ch == "\t":
        return KeyEvent(Key.tab)
    if ch in ("\x7f", "\x08"):
        return KeyEvent(Key.backspace)
    if ch == ESC:
        return KeyEvent(Key.escape)
    if cp == 0:
        return KeyEvent(" ", KeyModifiers.CTRL)
    if 1 <= cp <= 26:
        return KeyEvent(chr(cp + 96), KeyModifiers.CTRL)
    if 28 <= cp <= 31:
        return KeyEvent(chr(cp + 64), KeyModifiers.CTRL)
    if not ch.isprintable():
        return None
    if "A" <= ch <= "Z":
        return KeyEvent(ch, KeyModifiers.SHIFT)
    return KeyEvent(ch)


# ---------------------------------------------------------------------------
# parse_key_event
# ---------------------------------------------------------------------------


def parse_key_event(data: str) -> KeyEvent | None:
    """Decode one complete terminal key sequence.

    Returns ``None`` for empty input, unrecognised escape sequences and
    multi-character text (which should be split before decoding).
    """
    if not data:
        return None

    m = _KITTY_CSI_U_RE.match(data)
    if m:
        shifted = int(m.group(2)) if m.group(2) else None
        return _from_codepoint(
            int(m.group(1)),
            _decode_modifiers(m.group(4)),
            _decode_kind(m.group(5)),
            shifted,
        )

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        return _from_codepoint(int(m.group(2)), _decode_modifiers(m.group(1)))

    m = _MODIFIED_CSI_RE.match(data)
    if m:
        return KeyEvent(
            _CSI_LETTER_KEYS[m.group(3)],
            _decode_modifiers(m.group(1)),
            _decode_kind(m.group(2)),
        )

    m = _FUNCTIONAL_RE.match(data)
    if m:
        key = _TILDE_KEYS.get(int(m.group(1)))
        if key is None:
            return None
        return KeyEvent(key, _decode_modifiers(m.group(2)), _decode_kind(m.group(3)))

    legacy = _LEGACY_SEQUENCES.get(data)
    if legacy is not None:
        return KeyEvent(*legacy)

    if len(data) == 1:
        return _from_single_char(data)

    # ESC-prefixed byte: the alt modifier on a legacy terminal
    if len(data) == 2 and data[0] == ESC:
        inner = _from_single_char(data[1])
        if inner is None:
            return None
        return KeyEvent(inner.code, inner.modifiers | KeyModifiers.ALT)

    if data.isprintable() and len(graphemes(data)) == 1:
        return KeyEvent(data)

    return None
