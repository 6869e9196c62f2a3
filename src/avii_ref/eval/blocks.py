from __future__ import annotations

from typing import Iterable, Optional

from lark import Tree

from ..tree import Node, is_token
from ..types import (
    AvBool,
    AvNull,
    AvValue,
    Environment,
    NonBooleanConditionError,
    type_name,
)
from .common import EvalFunc, expect_ident_token, expect_tree

def eval_statements(children: Iterable[Node], env: Environment, eval_func: EvalFunc) -> AvValue:
    """Evaluate statements in order in `env`; result is the last value (null if none)."""
    result: AvValue = AvNull()

    for child in children:
        result = eval_func(child, env)

    return result

def eval_program(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    return eval_statements(n.children, env, eval_func)

def eval_var_decl(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    keyword, name_node, init = n.children
    name = expect_ident_token(name_node, "Variable name")
    value = AvNull() if init is None else eval_func(init, env)

    return env.define(name, value, constant=is_token(keyword) and keyword.type == 'CONST')

def eval_assign(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    target, value_node = n.children
    name = expect_ident_token(target, "Assignment target")
    value = eval_func(value_node, env)

    return env.assign(name, value)

def eval_if_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    """Branches run in the current scope; no child scope is introduced."""
    test_node, consequent, alternate = n.children
    test = eval_func(test_node, env)

    if not isinstance(test, AvBool):
        raise NonBooleanConditionError(f"Condition must be boolean, got {type_name(test)}")

    branch: Optional[Node] = consequent if test.value else alternate
    if branch is None:
        return AvNull()

    return eval_statements(expect_tree(branch, 'body').children, env, eval_func)
