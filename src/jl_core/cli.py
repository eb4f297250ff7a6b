"""The ``jl`` command: ``jl [-f FIELDSEP] PATTERN [FILE...]``."""

from __future__ import annotations

import argparse
import io
import logging
import os
import sys
from typing import IO

from .compiler import Pattern, compile_pattern
from .config import Config
from .errors import JLError
from .interpreter import Interpreter
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jl",
        description="Project fields out of a JSON stream into delimited lines.",
    )
    parser.add_argument(
        "-f", dest="fieldsep", metavar="FIELDSEP", default="\t",
        help="output field separator (default: tab)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="log debug information to stderr",
    )
    parser.add_argument("pattern", metavar="PATTERN", help="selection pattern, e.g. '[{foo,bar'")
    parser.add_argument("files", metavar="FILE", nargs="*", help="input files (default: stdin)")
    return parser


def _process(pattern: Pattern, stream: IO[str], config: Config, out: IO[str]) -> None:
    def emit(line: str) -> None:
        out.write(line + "\n")

    Interpreter(pattern, Tokenizer(stream), emit, config.fieldsep).run_all()


def _stdin(config: Config) -> IO[str]:
    """Standard input, decoded with the configured encoding like FILE arguments."""
    stream = sys.stdin
    if isinstance(stream, io.TextIOWrapper) and stream.encoding != config.encoding:
        stream.reconfigure(encoding=config.encoding)
    return stream


def run(pattern_text: str, files: list[str], config: Config, out: IO[str]) -> None:
    """Compile *pattern_text* and feed every input through it."""
    pattern = compile_pattern(pattern_text)

    if not files:
        _process(pattern, _stdin(config), config, out)
        return

    for path in files:
        logger.debug("reading %s", path)
        if path == "-":
            _process(pattern, _stdin(config), config, out)
            continue
        with open(path, encoding=config.encoding) as fh:
            _process(pattern, fh, config, out)


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, sys.stdout.fileno())
    finally:
        os.close(devnull)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.from_args(args, os.environ)
    logging.basicConfig(
        level=config.log_level,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args.pattern, args.files, config, sys.stdout)
        sys.stdout.flush()
    except BrokenPipeError:
        # The reader went away (e.g. `jl ... | head`); stop quietly.
        _silence_stdout()
        return 1
    except (JLError, OSError) as exc:
        sys.stdout.flush()
        print(f"jl: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
