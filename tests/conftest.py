from __future__ import annotations

import pytest

from quillpane.keybindings import KeybindingsManager, set_keybindings


@pytest.fixture(autouse=True)
def default_keybindings():
    """Every test starts from the default text-area keybindings."""
    set_keybindings(KeybindingsManager())
    yield
    set_keybindings(KeybindingsManager())
