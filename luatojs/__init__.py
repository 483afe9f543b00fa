"""Lua to JavaScript translator: public API."""

from __future__ import annotations

from .ast import Block
from .backend.javascript import (
    BlockWriter as BlockWriter,
    IllegalIdentifier as IllegalIdentifier,
    TranslateError as TranslateError,
    UnsupportedConstruct as UnsupportedConstruct,
    translate,
)
from .frontend.parse import ParseError as ParseError, parse
from .frontend.tokens import TokenizeError as TokenizeError


def translate_source(source: bytes | str) -> bytes:
    """Parse Lua source and translate it to JavaScript source bytes."""
    block: Block = parse(source)
    return translate(block)


__all__ = [
    "BlockWriter",
    "IllegalIdentifier",
    "ParseError",
    "TokenizeError",
    "TranslateError",
    "UnsupportedConstruct",
    "parse",
    "translate",
    "translate_source",
]
