"""Serialization of syntax tree nodes to JSON-compatible dicts."""

from __future__ import annotations

import dataclasses
import json

from .ast import Pos


def node_to_dict(node: object) -> object:
    """Convert a node (or tuple of nodes) to dicts, lists and scalars.

    Each node becomes {"kind": ClassName, "line": L, "col": C, ...fields}.
    Byte strings become text with each byte mapped to one character.
    """
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, bytes):
        return node.decode("latin-1")
    if isinstance(node, (tuple, list)):
        return [node_to_dict(item) for item in node]
    if isinstance(node, Pos):
        return {"line": node.line, "col": node.col}
    if dataclasses.is_dataclass(node):
        d: dict[str, object] = {"kind": type(node).__name__}
        for fld in dataclasses.fields(node):
            value = getattr(node, fld.name)
            if isinstance(value, Pos):
                d["line"] = value.line
                d["col"] = value.col
            else:
                d[fld.name] = node_to_dict(value)
        return d
    raise TypeError("cannot serialize " + type(node).__name__)


def to_json(node: object) -> str:
    """Serialize a node to pretty-printed JSON."""
    return json.dumps(node_to_dict(node), indent=2)
