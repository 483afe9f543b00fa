"""Shared utilities for backend code emitters."""

from __future__ import annotations

import math

INDENT = "    "


def hex_escape_bytes(value: bytes) -> str:
    """Escape every byte as \\xNN (without quotes)."""
    return "".join(f"\\x{b:02x}" for b in value)


def format_number(value: int | float) -> str:
    """Decimal text of a number as a JavaScript numeric literal.

    Negative values (wrapped hex integers) are parenthesized so a preceding
    operator cannot fuse with the sign.
    """
    if value < 0:
        return "(-" + format_number(-value) + ")"
    if isinstance(value, int):
        return str(value)
    if math.isinf(value):
        return "Infinity"
    if math.isnan(value):
        return "NaN"
    # Integral floats print without a fraction; JavaScript has one number type
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def indent_lines(lines: list[str], depth: int = 1) -> list[str]:
    """Prefix each line with depth indentation units."""
    prefix = INDENT * depth
    return [prefix + line for line in lines]
