"""Command-line front-end: feed stdin lines to a shell session."""

import argparse
import logging
import sys

from pydantic import ValidationError

from shellrelay import __version__
from shellrelay.config import load_config
from shellrelay.models import RelayConfig
from shellrelay.shell import Shell
from shellrelay.sinks import StreamSink

log = logging.getLogger("shellrelay")

DEFAULT_DRAIN_TIMEOUT = 5.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellrelay",
        description="Run commands read from stdin in a persistent shell session",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--shell", help="Interpreter to launch (default: detected)")
    parser.add_argument("--cwd", help="Working directory (default: system root)")
    parser.add_argument("--encoding", help="Native encoding (default: host code page)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_DRAIN_TIMEOUT,
        help="Seconds to wait for remaining output after stdin closes",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    try:
        config = load_config()
        overrides = {
            key: value
            for key, value in (
                ("shell", args.shell),
                ("working_dir", args.cwd),
                ("encoding", args.encoding),
            )
            if value
        }
        if overrides:
            config = RelayConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    exit_code = 0
    with Shell(StreamSink(sys.stdout, sys.stderr), config) as shell:
        for line in sys.stdin:
            command = line.rstrip("\r\n")
            log.debug("command=%r", command)
            if not shell.execute_command(command):
                exit_code = 1
                break
        shell.close(timeout=args.timeout)
    return exit_code


def entrypoint() -> None:
    raise SystemExit(main())
