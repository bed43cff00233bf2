"""Tests for quillpane.cli -- argument handling and exit codes."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from quillpane import cli
from quillpane.app import PromptApp
from quillpane.config import Config


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("QUILLPANE_CONFIG_DIR", str(tmp_path))
    for name in ("QUILLPANE_LOG_LEVEL", "QUILLPANE_LOG_FILE", "QUILLPANE_KITTY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "_setup_logging", lambda config: None)
    return tmp_path


@pytest.fixture
def prompt_result(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Replace the interactive session; records the app it ran on."""
    seen: dict = {"result": None}

    async def fake_run_prompt(self: PromptApp, title: str | None = None) -> str | None:
        seen["config"] = self.config
        return seen["result"]

    monkeypatch.setattr(PromptApp, "run_prompt", fake_run_prompt)
    return seen


class TestParser:
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        assert args.title is None
        assert args.settings is None
        assert args.log_level is None
        assert args.log_file is None

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "loud"])


class TestMain:
    def test_submitted_text_printed(self, config_dir, prompt_result, capsys) -> None:
        prompt_result["result"] = "fix the bug\nand the test"
        assert cli.main([]) == cli.EXIT_SUBMITTED
        assert capsys.readouterr().out == "fix the bug\nand the test\n"

    def test_cancel_exits_one(self, config_dir, prompt_result, capsys) -> None:
        assert cli.main([]) == cli.EXIT_CANCELLED
        assert capsys.readouterr().out == ""

    def test_flags_override_settings(self, config_dir, prompt_result) -> None:
        (config_dir / "settings.json").write_text(json.dumps({"title": "From file"}), encoding="utf-8")
        cli.main(["--title", "From flag", "--log-level", "debug", "--log-file", "x.log"])
        config = prompt_result["config"]
        assert config.title == "From flag"
        assert config.log_level == "debug"
        assert config.log_file == "x.log"

    def test_settings_flag(self, config_dir, prompt_result, tmp_path: Path) -> None:
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"title": "Other"}), encoding="utf-8")
        cli.main(["--settings", str(path)])
        assert prompt_result["config"].title == "Other"

    def test_bad_settings_exit_two(self, config_dir, prompt_result, capsys) -> None:
        (config_dir / "settings.json").write_text("{", encoding="utf-8")
        assert cli.main([]) == cli.EXIT_ERROR
        assert "quillpane:" in capsys.readouterr().err
        assert "config" not in prompt_result

    def test_no_terminal_exit_two(self, config_dir, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        assert cli.main([]) == cli.EXIT_ERROR
        assert "stdin is not a terminal" in capsys.readouterr().err


class TestSetupLogging:
    def test_creates_log_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        log_file = tmp_path / "logs" / "quillpane.log"
        cli._setup_logging(Config(log_level="info", log_file=str(log_file)))
        assert log_file.parent.is_dir()
        assert calls[0]["filename"] == str(log_file)
        assert calls[0]["level"] == logging.INFO
