from __future__ import annotations

from lark import Tree

from ..tree import param_names
from ..types import AvClosure, Environment
from .common import EvalFunc, expect_ident_token, expect_tree

def eval_fn_decl(n: Tree, env: Environment, _eval_func: EvalFunc) -> AvClosure:
    """
    `func name(params) { body }`

    The closure captures a fresh child of the declaring scope, then `name` is
    bound in the declaring scope itself. Scopes are shared by reference, so
    the body sees that binding and can recurse.
    """
    name_node, params_node, body_node = n.children
    name = expect_ident_token(name_node, "Function name")
    params = param_names(expect_tree(params_node, 'params'))
    body = expect_tree(body_node, 'body')

    fn = AvClosure(params=params, body=body, env=env.child(), name=name)
    env.define(name, fn)
    return fn

def eval_fn_literal(n: Tree, env: Environment, _eval_func: EvalFunc) -> AvClosure:
    params_node, body_node = n.children
    params = param_names(expect_tree(params_node, 'params'))
    body = expect_tree(body_node, 'body')

    return AvClosure(params=params, body=body, env=env)
