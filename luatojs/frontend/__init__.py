"""Frontend package - converts Lua source to the syntax tree."""

from .parse import ParseError, Parser, parse
from .tokens import Token, TokenizeError, tokenize

__all__ = ["ParseError", "Parser", "Token", "TokenizeError", "parse", "tokenize"]
