from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional

from .types import (
    AvValue,
    AvArray,
    AvBool,
    AvNull,
    AvNumber,
    AvObject,
    AvString,
    InvalidPropertyAccessError,
    type_name,
)


def format_number(v: float) -> str:
    """Default decimal rendering: no exponent, no trailing '.0'."""
    if math.isnan(v):
        return "NaN"

    if math.isinf(v):
        return "inf" if v > 0 else "-inf"

    if v.is_integer():
        if v == 0 and math.copysign(1.0, v) < 0:
            return "-0"
        return str(int(v))

    return format(Decimal(repr(v)), "f")


def stringify(value: Optional[AvValue]) -> str:
    """Display form of a value, as written by print and string concatenation."""
    if isinstance(value, AvString):
        return value.value

    if isinstance(value, AvNumber):
        return format_number(value.value)

    if isinstance(value, AvBool):
        return "true" if value.value else "false"

    if value is None or isinstance(value, AvNull):
        return "null"

    if isinstance(value, AvArray):
        return "[" + ", ".join(stringify(item) for item in value.items) + "]"

    if isinstance(value, AvObject):
        pairs = [f"{k}: {stringify(v)}" for k, v in value.slots.items()]
        return "{" + ", ".join(pairs) + "}"

    return repr(value)


def is_string_coercible(value: AvValue) -> bool:
    return isinstance(value, (AvString, AvNumber))


def object_key(value: AvValue) -> str:
    """Coerce a computed member key to an object slot name."""
    if isinstance(value, AvString):
        return value.value

    if isinstance(value, AvNumber):
        return format_number(value.value)

    raise InvalidPropertyAccessError(f"Cannot use {type_name(value)} as an object key")


def sequence_index(value: AvValue) -> Optional[int]:
    """
    Coerce a key to an array/string index.

    Returns None for negative indices; raises for keys that are not
    non-negative integers (or digit strings).
    """
    if isinstance(value, AvNumber):
        v = value.value
        if not v.is_integer():
            raise InvalidPropertyAccessError(f"Index must be an integer, got {format_number(v)}")
        return int(v) if v >= 0 else None

    if isinstance(value, AvString):
        text = value.value
        if text.isascii() and text.isdigit():
            return int(text)
        raise InvalidPropertyAccessError(f"Cannot index with non-numeric string '{text}'")

    raise InvalidPropertyAccessError(f"Cannot index with {type_name(value)}")
