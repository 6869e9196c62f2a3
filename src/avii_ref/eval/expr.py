from __future__ import annotations

import math
from typing import Callable, Dict

from lark import Tree

from ..types import (
    AvArray,
    AvBool,
    AvNumber,
    AvString,
    AvValue,
    DivisionByZeroError,
    Environment,
    TypeMismatchError,
    UnknownOperatorError,
    type_name,
)
from ..utils import is_string_coercible, stringify
from .common import EvalFunc

# ---------------- arithmetic ----------------

def _div(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZeroError("Division by zero")
    return a / b

def _mod(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZeroError("Modulo by zero")
    # Truncated remainder: the result takes the sign of the dividend.
    return math.fmod(a, b)

def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan

_NUMERIC_OPS: Dict[str, Callable[[float, float], float]] = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '/': _div,
    '%': _mod,
    '^': _pow,
}

def _split(text: str, sep: str) -> AvArray:
    if sep == "":
        parts = list(text)
    else:
        parts = text.split(sep)

    return AvArray([AvString(p) for p in parts])

def apply_binary_op(op: str, lhs: AvValue, rhs: AvValue) -> AvValue:
    """
    Dispatch on operand types:
    - number op number: arithmetic
    - '+' with a string side: concatenation of display forms
    - '/' with two string-coercible sides: split lhs on rhs
    Anything else is a type mismatch.
    """
    if op not in _NUMERIC_OPS:
        raise UnknownOperatorError(f"Unknown operator '{op}'")

    if isinstance(lhs, AvNumber) and isinstance(rhs, AvNumber):
        return AvNumber(_NUMERIC_OPS[op](lhs.value, rhs.value))

    if is_string_coercible(lhs) and is_string_coercible(rhs):
        if op == '+':
            return AvString(stringify(lhs) + stringify(rhs))
        if op == '/':
            return _split(stringify(lhs), stringify(rhs))

    raise TypeMismatchError(
        f"Unsupported operand types for {op}: {type_name(lhs)} and {type_name(rhs)}"
    )

def eval_binary(n: Tree, env: Environment, eval_func: EvalFunc) -> AvValue:
    left_node, op, right_node = n.children
    lhs = eval_func(left_node, env)
    rhs = eval_func(right_node, env)
    return apply_binary_op(str(op), lhs, rhs)

# ---------------- conditions ----------------

_BOOL_OPS: Dict[str, Callable[[bool, bool], bool]] = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    'and': lambda a, b: a and b,
    'or': lambda a, b: a or b,
}

_EQUALITY_OPS: Dict[str, Callable[[object, object], bool]] = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
}

def _pair_op(table: Dict[str, Callable], op: str, kind: str) -> Callable:
    fn = table.get(op)
    if fn is None:
        raise UnknownOperatorError(f"Operator '{op}' is not defined for two {kind}s")
    return fn

def apply_condition_op(op: str, lhs: AvValue, rhs: AvValue) -> AvBool:
    """
    Only matched pairs compare:
    - bool, bool: ==, !=, and, or
    - number, number / string, string: == and !=
    Any other pairing (mixed types, null, arrays, objects, functions) is false
    for every operator, `!=` included.
    """
    match lhs, rhs:
        case AvBool(value=a), AvBool(value=b):
            return AvBool(_pair_op(_BOOL_OPS, op, 'boolean')(a, b))
        case AvNumber(value=a), AvNumber(value=b):
            return AvBool(_pair_op(_EQUALITY_OPS, op, 'number')(a, b))
        case AvString(value=a), AvString(value=b):
            return AvBool(_pair_op(_EQUALITY_OPS, op, 'string')(a, b))
        case _:
            return AvBool(False)

def eval_condition(n: Tree, env: Environment, eval_func: EvalFunc) -> AvBool:
    # Both sides are always evaluated; and/or do not short-circuit.
    left_node, op, right_node = n.children
    lhs = eval_func(left_node, env)
    rhs = eval_func(right_node, env)
    return apply_condition_op(str(op), lhs, rhs)
