"""Entry point for the keyline CLI."""

from __future__ import annotations

import argparse
import logging
import sys

from keyline.commands import CommandResult
from keyline.config import Config
from keyline.parser import tokenize


def cat_command(config: Config):
    """Build the demo ``cat`` handler: echoes its arguments one per line."""

    def handler(line: str) -> CommandResult | None:
        args = tokenize(line, config.separator, config.quote)[1:]
        if not args:
            return None
        return CommandResult(1, "\n".join(args))

    return handler


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="keyline: interactive command line")
    parser.add_argument("--prompt", default=None, help="Prompt shown before the input (default: >)")
    parser.add_argument(
        "--single-line", action="store_true", help="Keep input on one row (no newlines or wrapping)"
    )
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--log-file", default=None, help="Write log records to this file")
    args = parser.parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level.upper()),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        # stderr shares the screen with the field; keep it quiet.
        logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(name)s: %(message)s")

    config = Config.from_env()
    if args.prompt is not None:
        config.prompt = args.prompt
    if args.single_line:
        config.multiline = False

    from keyline.commandline import CommandLine
    from keyline.terminal import ProcessTerminal

    terminal = ProcessTerminal(write_log=config.write_log)
    command_line = CommandLine(terminal, config)
    command_line.register(
        "cat",
        cat_command(config),
        description="Prints each of its arguments on its own line.",
        help='cat [argument ...]\n\nQuote an argument to keep separators in it: cat "a b" c',
    )

    terminal.start()
    try:
        return command_line.run()
    except (EOFError, KeyboardInterrupt):
        return 1
    finally:
        terminal.stop()


if __name__ == "__main__":
    sys.exit(main())
