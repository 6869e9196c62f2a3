from __future__ import annotations

import importlib
import logging
import math
from typing import Callable, List, Optional

from .types import (
    AvNull, AvNumber, AvString, AvBool, AvArray, AvObject, AvClosure, AvNative,
    AvValue, Environment, Builtins, NativeFn,
    AviiRuntimeError, UndefinedVariableError, DuplicateDefinitionError,
    AssignToConstantError, DivisionByZeroError, ArityMismatchError,
    NonBooleanConditionError, UnknownOperatorError, InvalidPropertyAccessError,
    TypeMismatchError, NotCallableError, CallDepthExceededError, AviiInternalError,
    is_av_value, type_name,
)

logger = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("avii_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None) -> Callable[[NativeFn], NativeFn]:
    def dec(fn: NativeFn) -> NativeFn:
        Builtins.stdlib_functions[name] = AvNative(name=name, fn=fn, arity=arity)
        return fn

    return dec

# Constants every global scope starts with.
def _global_constants() -> dict[str, AvValue]:
    return {
        "true": AvBool(True),
        "false": AvBool(False),
        "null": AvNull(),
        "PI": AvNumber(math.pi),
    }

def seed_globals(env: Environment) -> Environment:
    """Bind the builtin constants and natives into a root environment."""
    init_stdlib()

    for name, value in _global_constants().items():
        env.define(name, value, constant=True)

    for name, native in Builtins.stdlib_functions.items():
        env.define(name, native, constant=True)

    return env

def create_global_env() -> Environment:
    return Environment.global_scope()

def call_closure(fn: AvClosure, args: List[AvValue]) -> AvValue:
    """
    Call semantics:
    - arity must equal len(fn.params)
    - a fresh scope whose parent is the closure's captured scope holds the params
    - the body's last statement value is the result (null for an empty body)
    """
    from .evaluator import eval_node  # local import to avoid cycle
    from .eval.blocks import eval_statements

    if len(args) != len(fn.params):
        label = fn.name or "anonymous function"
        raise ArityMismatchError(f"{label} expects {len(fn.params)} argument(s); got {len(args)}")

    call_env = Environment(parent=fn.env)

    for name, val in zip(fn.params, args):
        call_env.define(name, val)

    logger.debug("call %s(%s)", fn.name or "<anonymous>", ", ".join(fn.params))
    return eval_statements(fn.body.children, call_env, eval_node)

def call_native(fn: AvNative, args: List[AvValue], env: Environment) -> AvValue:
    if fn.arity is not None and len(args) != fn.arity:
        raise ArityMismatchError(f"{fn.name} expects {fn.arity} argument(s); got {len(args)}")

    result = fn.fn(env, args)
    if result is None:
        return AvNull()
    if not is_av_value(result):
        raise AviiInternalError(f"native {fn.name} returned {type(result).__name__}")

    return result

def call_value(callee: AvValue, args: List[AvValue], env: Environment) -> AvValue:
    if isinstance(callee, AvClosure):
        return call_closure(callee, args)

    if isinstance(callee, AvNative):
        return call_native(callee, args, env)

    raise NotCallableError(f"Cannot call a value of type {type_name(callee)}")
