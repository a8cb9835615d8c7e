"""JSON serialization for the CODE AST.

Converts AST dataclasses into plain dict/list structures suitable for
`json.dump`. Each node becomes `{"__node__": <class name>, ...fields}` and
tokens become `{"type", "literal", "line", "column"}`.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any, Dict

from .ast import Binding, Node, Program
from .token import Token


def token_to_obj(tok: Token) -> Dict[str, Any]:
    return {
        "type": tok.type.name,
        "literal": tok.literal,
        "line": tok.position.line,
        "column": tok.position.column,
    }


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Token):
        return token_to_obj(node)

    if isinstance(node, (Node, Program, Binding)) and is_dataclass(node):
        obj: Dict[str, Any] = {"__node__": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")
