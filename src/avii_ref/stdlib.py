"""Built-in stdlib functions (print, etc.) registered via avii_ref.runtime."""

from __future__ import annotations

from typing import List

from .runtime import register_stdlib, AvNull, AvNumber, AvString, AvArray, AvObject, AvValue, TypeMismatchError, type_name
from .utils import stringify

@register_stdlib("print")
def std_print(_env, args: List[AvValue]) -> AvNull:
    rendered = [stringify(arg) for arg in args]
    print(*rendered, end="", flush=True)
    return AvNull()

@register_stdlib("println")
def std_println(_env, args: List[AvValue]) -> AvNull:
    rendered = [stringify(arg) for arg in args]
    print(*rendered, flush=True)
    return AvNull()

@register_stdlib("len", arity=1)
def std_len(_env, args: List[AvValue]) -> AvNumber:
    value = args[0]

    if isinstance(value, AvString):
        return AvNumber(float(len(value.value)))

    if isinstance(value, AvArray):
        return AvNumber(float(len(value.items)))

    if isinstance(value, AvObject):
        return AvNumber(float(len(value.slots)))

    raise TypeMismatchError(f"len expects a string, array or object; got {type_name(value)}")
