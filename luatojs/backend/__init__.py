"""Backend package - emits target source from the syntax tree."""

from .javascript import (
    BlockWriter,
    IllegalIdentifier,
    TranslateError,
    UnsupportedConstruct,
    expr_to_js,
    translate,
)

__all__ = [
    "BlockWriter",
    "IllegalIdentifier",
    "TranslateError",
    "UnsupportedConstruct",
    "expr_to_js",
    "translate",
]
