"""Display-width helpers for terminal cells.

Widths are measured per grapheme cluster so that combining marks, emoji
ZWJ sequences and CJK characters occupy the number of columns a terminal
actually gives them.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme as _grapheme
import wcwidth as _wcwidth

# CSI, OSC 8 hyperlinks and APC payloads never take up a column
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z~]"
    r"|\x1b\]8;;[^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_PUNCTUATION_RE = re.compile(r"[(){}\[\]<>.,;:'\"!?\+\-=*/\\|&%\^$#@~`]")

_WHITESPACE = frozenset(" \t\n\r\f\v")

# ---------------------------------------------------------------------------
# Width cache (capped)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _remember(text: str, width: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[text] = width
    return width


# ---------------------------------------------------------------------------
# Graphemes
# ---------------------------------------------------------------------------


def graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    return list(_grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the column width of a single grapheme cluster.

    Control characters and lone combining marks are zero width; emoji
    presentation sequences (VS16, ZWJ, skin tones, flags) are two columns;
    everything else is delegated to ``wcwidth`` on the base codepoint.
    """
    if not g:
        return 0

    base = g[0]
    cp = ord(base)
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0

    if len(g) > 1:
        for ch in g[1:]:
            extra = ord(ch)
            if extra in (0xFE0F, 0x200D) or 0x1F3FB <= extra <= 0x1F3FF:
                return 2
        if 0x1F1E6 <= cp <= 0x1F1FF or cp >= 0x1F000:
            return 2
        category = unicodedata.category(base)
        if category.startswith("M") or category == "Cf":
            return 0

    return max(_wcwidth.wcwidth(base), 0)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def strip_ansi(text: str) -> str:
    """Remove escape sequences that do not occupy terminal columns."""
    return _STRIP_RE.sub("", text)


def visible_width(text: str) -> int:
    """Return the number of terminal columns *text* occupies.

    ANSI sequences are ignored and a tab counts as three columns.
    """
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0
    stripped = stripped.replace("\t", "   ")

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    return _remember(stripped, sum(grapheme_width(g) for g in _grapheme.graphemes(stripped)))


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_whitespace_char(char: str) -> bool:
    return char in _WHITESPACE


def is_punctuation_char(char: str) -> bool:
    return bool(_PUNCTUATION_RE.match(char))
