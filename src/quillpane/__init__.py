"""quillpane: bottom-pane terminal prompt for multi-line instructions."""

# Application
from quillpane.app import PromptApp

# Host pane and views
from quillpane.bottom_pane import BottomPane
from quillpane.bottom_pane_view import BottomPaneView, CancellationEvent

# Rendering primitives
from quillpane.buffer import Buffer, Cell, render_line

# Configuration
from quillpane.config import Config, ConfigError
from quillpane.custom_prompt_view import CustomPromptView, PromptSubmitted
from quillpane.geometry import Rect, saturating_add, saturating_sub
from quillpane.hints import standard_popup_hint_line

# Input
from quillpane.input_decoder import InputDecoder, InputEvent, PasteEvent

# Keybindings
from quillpane.keybindings import (
    DEFAULT_TEXTAREA_KEYBINDINGS,
    KeybindingsManager,
    TextAreaAction,
    get_keybindings,
    set_keybindings,
)

# Keys
from quillpane.keys import Key, KeyEvent, KeyId, KeyModifiers, matches_key, parse_key_event

# Terminal
from quillpane.terminal import ProcessTerminal, Terminal, TerminalUnavailableError
from quillpane.text import Line, Span, Style

# Text area
from quillpane.textarea import TextArea, TextAreaState

# Utilities
from quillpane.utils import visible_width

__all__ = [
    # Application
    "PromptApp",
    # Host pane and views
    "BottomPane",
    "BottomPaneView",
    "CancellationEvent",
    "CustomPromptView",
    "PromptSubmitted",
    "standard_popup_hint_line",
    # Rendering primitives
    "Buffer",
    "Cell",
    "Line",
    "Rect",
    "Span",
    "Style",
    "render_line",
    "saturating_add",
    "saturating_sub",
    # Configuration
    "Config",
    "ConfigError",
    # Input
    "InputDecoder",
    "InputEvent",
    "PasteEvent",
    # Keybindings
    "DEFAULT_TEXTAREA_KEYBINDINGS",
    "KeybindingsManager",
    "TextAreaAction",
    "get_keybindings",
    "set_keybindings",
    # Keys
    "Key",
    "KeyEvent",
    "KeyId",
    "KeyModifiers",
    "matches_key",
    "parse_key_event",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "TerminalUnavailableError",
    # Text area
    "TextArea",
    "TextAreaState",
    # Utilities
    "visible_width",
]
