"""Configuration for the prompt: defaults, ``settings.json`` and environment.

Precedence, lowest first: dataclass defaults, the JSON settings file
(``~/.quillpane/settings.json`` unless another path is given), then
``QUILLPANE_*`` environment variables.  Command-line flags are applied on
top by ``quillpane.cli``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from quillpane.keybindings import DEFAULT_TEXTAREA_KEYBINDINGS
from quillpane.keys import parse_key_id

CONFIG_DIR_NAME = ".quillpane"
SETTINGS_FILE_NAME = "settings.json"

LOG_LEVELS = ("debug", "info", "warning", "error")


class ConfigError(ValueError):
    """Raised for unreadable settings or values of the wrong type."""


def get_config_dir(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    return Path(env.get("QUILLPANE_CONFIG_DIR", Path.home() / CONFIG_DIR_NAME))


@dataclass
class Config:
    """Prompt configuration."""

    title: str = "Custom review instructions"
    log_level: str = "warning"
    log_file: str = field(default_factory=lambda: str(get_config_dir() / "quillpane.log"))
    # action name -> key id or list of key ids, see quillpane.keybindings
    keybindings: dict[str, str | list[str]] = field(default_factory=dict)
    # seconds to wait before a lone ESC is taken as the Escape key
    escape_timeout: float = 0.01
    kitty_protocol: bool = True

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Config:
        """Build a config from the settings file and the environment.

        A missing settings file means defaults; a malformed one raises
        ``ConfigError``.
        """
        env = os.environ if env is None else env
        settings_path = Path(path) if path is not None else get_config_dir(env) / SETTINGS_FILE_NAME

        config = cls(log_file=str(get_config_dir(env) / "quillpane.log"))
        config._apply_settings(_read_settings(settings_path))
        config._apply_env(env)
        return config

    def _apply_settings(self, data: dict[str, Any]) -> None:
        if "title" in data:
            self.title = _expect(data, "title", str)
        if "logLevel" in data:
            self.log_level = _validate_level(_expect(data, "logLevel", str))
        if "logFile" in data:
            self.log_file = str(Path(_expect(data, "logFile", str)).expanduser())
        if "keybindings" in data:
            self.keybindings = _validate_keybindings(_expect(data, "keybindings", dict))
        if "escapeTimeout" in data:
            value = data["escapeTimeout"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigError(f"escapeTimeout must be a non-negative number, got {value!r}")
            self.escape_timeout = float(value)
        if "kittyProtocol" in data:
            self.kitty_protocol = _expect(data, "kittyProtocol", bool)

    def _apply_env(self, env: Mapping[str, str]) -> None:
        if env.get("QUILLPANE_LOG_LEVEL"):
            self.log_level = _validate_level(env["QUILLPANE_LOG_LEVEL"])
        if env.get("QUILLPANE_LOG_FILE"):
            self.log_file = env["QUILLPANE_LOG_FILE"]
        if env.get("QUILLPANE_KITTY") == "0":
            self.kitty_protocol = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_settings(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read settings from {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings in {path} must be a JSON object")
    return data


def _expect(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data[key]
    if not isinstance(value, kind):
        raise ConfigError(f"{key} must be of type {kind.__name__}, got {value!r}")
    return value


def _validate_level(level: str) -> str:
    lowered = level.lower()
    if lowered not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return lowered


def _validate_keybindings(data: dict[str, Any]) -> dict[str, str | list[str]]:
    result: dict[str, str | list[str]] = {}
    for action, keys in data.items():
        if action not in DEFAULT_TEXTAREA_KEYBINDINGS:
            raise ConfigError(f"Unknown keybinding action {action!r}")
        if isinstance(keys, str):
            key_ids = [keys]
        elif isinstance(keys, list) and all(isinstance(k, str) for k in keys):
            key_ids = list(keys)
        else:
            raise ConfigError(f"Keybinding for {action!r} must be a key id or a list of key ids")
        for key_id in key_ids:
            try:
                parse_key_id(key_id)
            except ValueError as e:
                raise ConfigError(f"Keybinding for {action!r}: {e}") from e
        result[action] = keys if isinstance(keys, str) else key_ids
    return result
