"""Text-area keybindings manager."""

from __future__ import annotations

from typing import Literal, Mapping

from quillpane.keys import KeyEvent, KeyId, matches_key

TextAreaAction = Literal[
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "cursorTextStart",
    "cursorTextEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteWordForward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Kill buffer
    "yank",
    # Text input
    "newLine",
    "tab",
]

TextAreaKeybindingsConfig = Mapping[str, "KeyId | list[KeyId]"]

DEFAULT_TEXTAREA_KEYBINDINGS: dict[TextAreaAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorUp": ["up", "ctrl+p"],
    "cursorDown": ["down", "ctrl+n"],
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["alt+left", "ctrl+left", "alt+b"],
    "cursorWordRight": ["alt+right", "ctrl+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "cursorTextStart": "ctrl+home",
    "cursorTextEnd": "ctrl+end",
    # Deletion
    "deleteCharBackward": ["backspace", "shift+backspace", "ctrl+h"],
    "deleteCharForward": ["delete", "shift+delete", "ctrl+d"],
    "deleteWordBackward": ["ctrl+w", "alt+backspace", "ctrl+backspace"],
    "deleteWordForward": ["alt+d", "alt+delete", "ctrl+delete"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # Kill buffer
    "yank": "ctrl+y",
    # Text input
    "newLine": [
        "enter",
        "shift+enter",
        "alt+enter",
        "ctrl+enter",
        "ctrl+j",
        "ctrl+m",
    ],
    "tab": "tab",
}


class KeybindingsManager:
    """Maps text-area actions to the key ids that trigger them."""

    def __init__(self, config: TextAreaKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[str, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: TextAreaKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_TEXTAREA_KEYBINDINGS.items():
            self._action_to_keys[action] = list(keys) if isinstance(keys, list) else [keys]

        # User config replaces the default keys of an action entirely
        for action, keys in config.items():
            self._action_to_keys[action] = list(keys) if isinstance(keys, list) else [keys]

    def matches(self, event: KeyEvent, action: TextAreaAction) -> bool:
        """Return ``True`` if *event* triggers *action*."""
        return any(matches_key(event, key) for key in self.get_keys(action))

    def get_keys(self, action: TextAreaAction) -> list[KeyId]:
        return list(self._action_to_keys.get(action, []))


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
