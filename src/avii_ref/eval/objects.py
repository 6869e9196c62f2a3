from __future__ import annotations

from typing import Dict

from lark import Tree

from ..types import AvArray, AvObject, AvValue, Environment
from .common import EvalFunc, expect_ident_token, expect_tree

def eval_object(n: Tree, env: Environment, eval_func: EvalFunc) -> AvObject:
    """Build an object; `{ key }` reads the variable `key` from scope."""
    slots: Dict[str, AvValue] = {}

    for item in n.children:
        prop = expect_tree(item, 'prop')
        key_node, value_node = prop.children
        key = expect_ident_token(key_node, "Object key")

        if value_node is None:
            slots[key] = env.lookup(key)
        else:
            slots[key] = eval_func(value_node, env)

    return AvObject(slots)

def eval_array(n: Tree, env: Environment, eval_func: EvalFunc) -> AvArray:
    return AvArray([eval_func(c, env) for c in n.children])
