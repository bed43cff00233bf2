"""Tests for quillpane.config -- defaults, settings file, environment."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from quillpane.config import Config, ConfigError, get_config_dir


def write_settings(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestConfigDir:
    def test_env_override(self, tmp_path: Path) -> None:
        assert get_config_dir({"QUILLPANE_CONFIG_DIR": str(tmp_path)}) == tmp_path

    def test_default_under_home(self) -> None:
        assert get_config_dir({}) == Path.home() / ".quillpane"


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = Config.load(tmp_path / "nope.json", env={})
        assert config.title == "Custom review instructions"
        assert config.log_level == "warning"
        assert config.keybindings == {}
        assert config.escape_timeout == 0.01
        assert config.kitty_protocol is True

    def test_log_file_follows_config_dir(self, tmp_path: Path) -> None:
        config = Config.load(env={"QUILLPANE_CONFIG_DIR": str(tmp_path)})
        assert config.log_file == str(tmp_path / "quillpane.log")

    def test_settings_from_config_dir(self, tmp_path: Path) -> None:
        write_settings(tmp_path, {"title": "From dir"})
        config = Config.load(env={"QUILLPANE_CONFIG_DIR": str(tmp_path)})
        assert config.title == "From dir"

    def test_camel_case_keys(self, tmp_path: Path) -> None:
        path = write_settings(
            tmp_path,
            {
                "title": "Review notes",
                "logLevel": "DEBUG",
                "logFile": str(tmp_path / "q.log"),
                "keybindings": {"yank": ["ctrl+y", "alt+y"], "tab": "f2"},
                "escapeTimeout": 0.05,
                "kittyProtocol": False,
            },
        )
        config = Config.load(path, env={})
        assert config.title == "Review notes"
        assert config.log_level == "debug"
        assert config.log_file == str(tmp_path / "q.log")
        assert config.keybindings == {"yank": ["ctrl+y", "alt+y"], "tab": "f2"}
        assert config.escape_timeout == 0.05
        assert config.kitty_protocol is False

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, {"theme": "dark"})
        assert Config.load(path, env={}).title == "Custom review instructions"

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, {"logLevel": "info", "logFile": "/tmp/a.log"})
        env = {
            "QUILLPANE_LOG_LEVEL": "error",
            "QUILLPANE_LOG_FILE": "/tmp/b.log",
            "QUILLPANE_KITTY": "0",
        }
        config = Config.load(path, env=env)
        assert config.log_level == "error"
        assert config.log_file == "/tmp/b.log"
        assert config.kitty_protocol is False

    def test_empty_env_values_ignored(self, tmp_path: Path) -> None:
        config = Config.load(tmp_path / "nope.json", env={"QUILLPANE_LOG_LEVEL": ""})
        assert config.log_level == "warning"


class TestErrors:
    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot read settings"):
            Config.load(path, env={})

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, ["title"])
        with pytest.raises(ConfigError, match="JSON object"):
            Config.load(path, env={})

    def test_wrong_type(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, {"title": 3})
        with pytest.raises(ConfigError, match="title"):
            Config.load(path, env={})

    def test_unknown_level(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, {"logLevel": "loud"})
        with pytest.raises(ConfigError, match="Unknown log level"):
            Config.load(path, env={})

    def test_unknown_level_from_env(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            Config.load(tmp_path / "nope.json", env={"QUILLPANE_LOG_LEVEL": "verbose"})

    @pytest.mark.parametrize("value", [-1, "fast", True])
    def test_bad_escape_timeout(self, tmp_path: Path, value: object) -> None:
        path = write_settings(tmp_path, {"escapeTimeout": value})
        with pytest.raises(ConfigError, match="escapeTimeout"):
            Config.load(path, env={})

    @pytest.mark.parametrize("keys", [3, ["ctrl+y", 4], {"key": "x"}])
    def test_bad_keybindings(self, tmp_path: Path, keys: object) -> None:
        path = write_settings(tmp_path, {"keybindings": {"yank": keys}})
        with pytest.raises(ConfigError, match="yank"):
            Config.load(path, env={})

    @pytest.mark.parametrize("keys", ["ctlr+y", ["ctrl+y", "ctrl+nope"], ""])
    def test_unparseable_key_id(self, tmp_path: Path, keys: object) -> None:
        path = write_settings(tmp_path, {"keybindings": {"yank": keys}})
        with pytest.raises(ConfigError, match="yank"):
            Config.load(path, env={})

    def test_unknown_action(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, {"keybindings": {"cursorLeftt": "ctrl+b"}})
        with pytest.raises(ConfigError, match="cursorLeftt"):
            Config.load(path, env={})

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(ConfigError, ValueError)
