from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from lark import Token, Tree

from .config import recursion_limit
from .runtime import (
    Environment,
    AvValue,
    AviiRuntimeError,
    AviiInternalError,
    CallDepthExceededError,
    init_stdlib,
)
from .tree import Node, is_token, node_line

from .eval.blocks import eval_program, eval_var_decl, eval_assign, eval_if_stmt
from .eval.chains import eval_member, eval_call
from .eval.common import token_number, token_string
from .eval.expr import eval_binary, eval_condition
from .eval.fn import eval_fn_decl, eval_fn_literal
from .eval.objects import eval_object, eval_array

logger = logging.getLogger(__name__)


def _maybe_attach_location(exc: AviiRuntimeError, node: Node) -> None:
    # The innermost node with a known line wins; outer frames leave it alone.
    if exc.line is not None:
        return

    exc.line = node_line(node)

def ensure_stack_budget() -> None:
    """Each interpreted call costs roughly ten Python frames; raise the ceiling to match."""
    limit = recursion_limit()
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)

# ---------------- Public API ----------------

def evaluate(node: Node, env: Optional[Environment] = None) -> AvValue:
    """Evaluate a program, statement or expression; `env` is mutated in place."""
    init_stdlib()
    ensure_stack_budget()

    if env is None:
        env = Environment.global_scope()

    logger.debug("evaluate %s", getattr(node, 'data', None) or getattr(node, 'type', None))

    try:
        return eval_node(node, env)
    except RecursionError:
        raise CallDepthExceededError("Maximum call depth exceeded") from None

# ---------------- Core evaluator ----------------

def eval_node(n: Node, env: Environment) -> AvValue:
    try:
        if is_token(n):
            return _eval_token(n, env)

        if not isinstance(n, Tree):
            raise AviiInternalError(f"Cannot evaluate {type(n).__name__}")

        handler = _NODE_DISPATCH.get(n.data)
        if handler is None:
            raise AviiInternalError(f"Unknown node: {n.data}")

        return handler(n, env, eval_node)
    except AviiRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

# ---------------- Tokens ----------------

def _eval_token(t: Token, env: Environment) -> AvValue:
    handler = _TOKEN_DISPATCH.get(t.type)
    if handler is None:
        raise AviiInternalError(f"Unhandled token {t.type}:{t}")

    return handler(t, env)

def _eval_ident(t: Token, env: Environment) -> AvValue:
    return env.lookup(str(t))

# ---------------- Grouping / dispatch ----------------

NodeHandler = Callable[[Tree, Environment, Callable[[Node, Environment], AvValue]], AvValue]

_NODE_DISPATCH: dict[str, NodeHandler] = {
    'program': eval_program,
    'body': eval_program,
    'vardecl': eval_var_decl,
    'fndecl': eval_fn_decl,
    'ifstmt': eval_if_stmt,
    'binary': eval_binary,
    'condition': eval_condition,
    'assign': eval_assign,
    'object': eval_object,
    'array': eval_array,
    'field': eval_member,
    'index': eval_member,
    'call': eval_call,
    'fnliteral': eval_fn_literal,
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Environment], AvValue]] = {
    'NUMBER': token_number,
    'STRING': token_string,
    'IDENT': _eval_ident,
}
