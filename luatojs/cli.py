"""luatojs command line: translate a Lua file to JavaScript."""

from __future__ import annotations

import sys

from .backend.javascript import TranslateError, translate
from .frontend.parse import ParseError, parse
from .frontend.tokens import TokenizeError
from .serialize import to_json

PHASES: list[str] = [
    "parse",
]

USAGE: str = """\
luatojs [OPTIONS] [INPUT] [-o OUTPUT]

Translate Lua source (INPUT, or stdin) to JavaScript.

Options:
  --stop-at PHASE     Stop after phase: parse (prints the syntax tree as JSON)
  -o, --output FILE   Write output to FILE instead of stdout
  --help              Show this help message
"""


def read_source(input_file: str | None) -> tuple[bytes, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is None:
        return (sys.stdin.buffer.read(), 0)
    try:
        with open(input_file, "rb") as f:
            return (f.read(), 0)
    except OSError:
        print("error: cannot open '" + input_file + "'", file=sys.stderr)
        return (b"", 1)


def write_output(output: bytes, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is None:
        sys.stdout.buffer.write(output)
        sys.stdout.buffer.flush()
        return 0
    try:
        with open(output_file, "wb") as f:
            f.write(output)
    except OSError:
        print("error: cannot write '" + output_file + "'", file=sys.stderr)
        return 1
    return 0


def report_error(e: TokenizeError | ParseError | TranslateError) -> None:
    """Print a front-end or translation error to stderr as error:LINE:COL: msg."""
    print("error:" + str(e.line) + ":" + str(e.col) + ": " + e.msg, file=sys.stderr)


def run_pipeline(source: bytes, stop_at: str | None) -> tuple[int, bytes]:
    """Parse and translate. Returns (exit_code, output)."""
    try:
        block = parse(source)
    except (TokenizeError, ParseError) as e:
        report_error(e)
        return (1, b"")
    if stop_at == "parse":
        return (0, (to_json(block) + "\n").encode("utf-8"))
    try:
        output = translate(block)
    except TranslateError as e:
        report_error(e)
        return (1, b"")
    return (0, output)


def parse_args(args: list[str]) -> tuple[str | None, str | None, str | None] | int:
    """Parse command-line arguments.

    Returns (stop_at, input_file, output_file), or an exit code when the
    arguments ask for help or are invalid.
    """
    stop_at: str | None = None
    input_file: str | None = None
    output_file: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--stop-at":
            if i + 1 >= len(args):
                print("error: --stop-at requires an argument", file=sys.stderr)
                return 2
            stop_at = args[i + 1]
            i += 2
        elif arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                return 2
            output_file = args[i + 1]
            i += 2
        elif arg.startswith("-"):
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        else:
            if input_file is not None:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
                return 2
            input_file = arg
            i += 1
    if stop_at is not None and stop_at not in PHASES:
        print("error: unknown phase '" + stop_at + "'", file=sys.stderr)
        return 2
    return (stop_at, input_file, output_file)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(argv if argv is not None else sys.argv[1:])
    if isinstance(parsed, int):
        return parsed
    stop_at, input_file, output_file = parsed
    source, err = read_source(input_file)
    if err != 0:
        return err
    exit_code, output = run_pipeline(source, stop_at)
    if exit_code != 0:
        return exit_code
    return write_output(output, output_file)


if __name__ == "__main__":
    sys.exit(main())
