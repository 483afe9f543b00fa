"""dnscontrol-lua: translate dnscontrol.lua and run dnscontrol on the result."""

from __future__ import annotations

import os
import subprocess
import sys

from .backend.javascript import TranslateError, translate
from .cli import report_error
from .frontend.parse import ParseError, parse
from .frontend.tokens import TokenizeError

INPUT_NAME: str = "dnscontrol.lua"
OUTPUT_NAME: str = "dnscontrol.js"
COMMAND: str = "dnscontrol"


def translate_file(input_path: str, output_path: str) -> int:
    """Translate input_path into output_path. Returns 0 on success, 1 on error.

    The output file is only written when translation succeeds.
    """
    try:
        with open(input_path, "rb") as f:
            source = f.read()
    except OSError:
        print("error: cannot open '" + input_path + "'", file=sys.stderr)
        return 1
    try:
        output = translate(parse(source))
    except (TokenizeError, ParseError, TranslateError) as e:
        report_error(e)
        return 1
    try:
        with open(output_path, "wb") as f:
            f.write(output)
    except OSError:
        print("error: cannot write '" + output_path + "'", file=sys.stderr)
        return 1
    return 0


def run_command(args: list[str], cwd: str) -> int:
    """Run COMMAND with args in cwd. Returns its exit status, or 127 if missing."""
    try:
        result = subprocess.run([COMMAND] + args, cwd=cwd)
    except FileNotFoundError:
        print("error: command not found: " + COMMAND, file=sys.stderr)
        return 127
    return result.returncode


def main(argv: list[str] | None = None, cwd: str | None = None) -> int:
    """Main entry point."""
    args = argv if argv is not None else sys.argv[1:]
    workdir = cwd if cwd is not None else os.getcwd()
    err = translate_file(
        os.path.join(workdir, INPUT_NAME), os.path.join(workdir, OUTPUT_NAME)
    )
    if err != 0:
        return err
    return run_command(args, workdir)


if __name__ == "__main__":
    sys.exit(main())
