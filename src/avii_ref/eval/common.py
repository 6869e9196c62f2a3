from __future__ import annotations

from typing import Any, Callable, Optional

from lark import Token, Tree

from ..types import AvNumber, AvString, AvValue, Environment, AviiInternalError
from ..tree import is_token, is_tree

EvalFunc = Callable[[Any, Environment], AvValue]

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node)

    raise AviiInternalError(f"{context} must be an identifier")

def expect_tree(node: Any, label: str) -> Tree:
    if is_tree(node) and node.data == label:
        return node

    raise AviiInternalError(f"Expected '{label}' node, got {node!r}")

def token_number(token: Token, _: Any) -> AvNumber:
    return AvNumber(float(token))

def token_string(token: Token, _: Any) -> AvString:
    return AvString(str(token))
