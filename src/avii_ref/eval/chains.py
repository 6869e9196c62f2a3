from __future__ import annotations

from typing import List

from lark import Tree

from ..runtime import call_value
from ..tree import Node, member_parts
from ..types import (
    AvArray,
    AvNull,
    AvObject,
    AvString,
    AvValue,
    Environment,
    InvalidPropertyAccessError,
    type_name,
)
from ..utils import object_key, sequence_index
from .common import EvalFunc, expect_tree

def get_member(target: AvValue, key: AvValue) -> AvValue:
    """
    Read target[key].

    Missing object keys and out-of-range indices give null; keys of the
    wrong type, or members of non-container values, raise.
    """
    if isinstance(target, AvObject):
        return target.slots.get(object_key(key), AvNull())

    if isinstance(target, AvArray):
        idx = sequence_index(key)
        if idx is None or idx >= len(target.items):
            return AvNull()
        return target.items[idx]

    if isinstance(target, AvString):
        idx = sequence_index(key)
        if idx is None or idx >= len(target.value):
            return AvNull()
        return AvString(target.value[idx])

    raise InvalidPropertyAccessError(f"Cannot read properties of {type_name(target)}")

def eval_member(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    target_node, prop, computed = member_parts(n)
    target = eval_func(target_node, env)

    if computed:
        key = eval_func(prop, env)
    else:
        key = AvString(str(prop))

    return get_member(target, key)

def eval_args_node(args_node: Node, env: Environment, eval_func: EvalFunc) -> List[AvValue]:
    args = expect_tree(args_node, 'args')
    return [eval_func(arg, env) for arg in args.children]

def eval_call(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    callee_node, args_node = n.children
    callee = eval_func(callee_node, env)
    args = eval_args_node(args_node, env, eval_func)
    return call_value(callee, args, env)
