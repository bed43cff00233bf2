"""Entry point for the quillpane CLI."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from quillpane.config import LOG_LEVELS, Config, ConfigError

EXIT_SUBMITTED = 0
EXIT_CANCELLED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quillpane",
        description="Ask for multi-line instructions in the terminal and print them to stdout",
    )
    parser.add_argument("--title", default=None, help="Prompt title")
    parser.add_argument("--settings", default=None, help="Settings file (default: ~/.quillpane/settings.json)")
    parser.add_argument("--log-level", default=None, choices=list(LOG_LEVELS))
    parser.add_argument("--log-file", default=None, help="Log file; the terminal is busy while prompting")
    return parser


def _setup_logging(config: Config) -> None:
    log_path = Path(config.log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_path),
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config.load(args.settings)
    except ConfigError as e:
        print(f"quillpane: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.title is not None:
        config.title = args.title
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_file is not None:
        config.log_file = args.log_file

    _setup_logging(config)

    from quillpane.app import PromptApp
    from quillpane.terminal import ProcessTerminal, TerminalUnavailableError

    app = PromptApp(ProcessTerminal(kitty_protocol=config.kitty_protocol), config)
    try:
        result = asyncio.run(app.run_prompt())
    except TerminalUnavailableError as e:
        print(f"quillpane: {e}", file=sys.stderr)
        return EXIT_ERROR

    if result is None:
        return EXIT_CANCELLED
    print(result)
    return EXIT_SUBMITTED


if __name__ == "__main__":
    sys.exit(main())
