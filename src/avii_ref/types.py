from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple

from lark import Tree
from typing_extensions import TypeAlias, TypeGuard

# ---------- Value Model ----------

@dataclass
class AvNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class AvNumber:
    value: float
    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class AvString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class AvBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class AvArray:
    items: List['AvValue']
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class AvObject:
    slots: Dict[str, 'AvValue']
    def __repr__(self) -> str:
        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k}: {repr(v)}")

        return "{" + ", ".join(pairs) + "}"

@dataclass(eq=False)
class AvClosure:
    params: List[str]
    body: Tree                  # 'body' node
    env: 'Environment'          # captured scope, shared by reference
    name: Optional[str] = None  # None for function literals
    def __repr__(self) -> str:
        return f"<func {self.name or 'anonymous'}({', '.join(self.params)})>"

NativeFn = Callable[['Environment', List['AvValue']], 'AvValue']

@dataclass(frozen=True, eq=False)
class AvNative:
    name: str
    fn: NativeFn
    arity: Optional[int] = None
    def __repr__(self) -> str:
        return f"<native {self.name}>"

AvValue: TypeAlias = (
    AvNull
    | AvNumber
    | AvString
    | AvBool
    | AvArray
    | AvObject
    | AvClosure
    | AvNative
)

_AV_VALUE_TYPES: Tuple[type, ...] = (
    AvNull,
    AvNumber,
    AvString,
    AvBool,
    AvArray,
    AvObject,
    AvClosure,
    AvNative,
)

def is_av_value(value: object) -> TypeGuard[AvValue]:
    return isinstance(value, _AV_VALUE_TYPES)

def type_name(value: AvValue) -> str:
    return {
        AvNull: "null",
        AvNumber: "number",
        AvString: "string",
        AvBool: "bool",
        AvArray: "array",
        AvObject: "object",
        AvClosure: "function",
        AvNative: "function",
    }.get(type(value), type(value).__name__)

# ---------- Scopes ----------

class Environment:
    """One lexical scope: name -> value bindings plus a link to the enclosing scope."""

    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.vars: Dict[str, AvValue] = {}
        self.constants: Set[str] = set()

    @classmethod
    def global_scope(cls) -> 'Environment':
        """Root environment seeded with true/false/null, PI and the stdlib."""
        from .runtime import seed_globals
        env = cls()
        seed_globals(env)
        return env

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def define(self, name: str, val: AvValue, constant: bool = False) -> AvValue:
        if name in self.vars:
            raise DuplicateDefinitionError(f"Variable '{name}' is already defined in this scope")

        self.vars[name] = val
        if constant:
            self.constants.add(name)

        return val

    def resolve(self, name: str) -> Optional['Environment']:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                return env
            env = env.parent

        return None

    def get(self, name: str) -> Optional[AvValue]:
        env = self.resolve(name)
        if env is None:
            return None

        return env.vars[name]

    def lookup(self, name: str) -> AvValue:
        env = self.resolve(name)
        if env is None:
            raise UndefinedVariableError(f"Variable '{name}' is not defined")

        return env.vars[name]

    def assign(self, name: str, val: AvValue) -> AvValue:
        env = self.resolve(name)
        if env is None:
            raise UndefinedVariableError(f"Cannot assign to undefined variable '{name}'")

        if name in env.constants:
            raise AssignToConstantError(f"Cannot assign to constant '{name}'")

        env.vars[name] = val
        return val

    def is_constant(self, name: str) -> bool:
        env = self.resolve(name)
        return env is not None and name in env.constants

    def depth(self) -> int:
        n = 0
        env = self.parent

        while env is not None:
            n += 1
            env = env.parent

        return n

    def __repr__(self) -> str:
        return f"<Environment depth={self.depth()} names={sorted(self.vars)}>"

# ---------- Exceptions ----------

class AviiRuntimeError(Exception):
    line: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.line = None

    def __str__(self) -> str:
        msg = super().__str__()

        if self.line is None:
            return msg

        return f"{msg} (line {self.line})"

class UndefinedVariableError(AviiRuntimeError):
    pass

class DuplicateDefinitionError(AviiRuntimeError):
    pass

class AssignToConstantError(AviiRuntimeError):
    pass

class DivisionByZeroError(AviiRuntimeError):
    pass

class ArityMismatchError(AviiRuntimeError):
    pass

class NonBooleanConditionError(AviiRuntimeError):
    pass

class UnknownOperatorError(AviiRuntimeError):
    pass

class InvalidPropertyAccessError(AviiRuntimeError):
    pass

class TypeMismatchError(AviiRuntimeError):
    pass

class NotCallableError(AviiRuntimeError):
    pass

class CallDepthExceededError(AviiRuntimeError):
    pass

class AviiInternalError(Exception):
    """Evaluator invariant violated (malformed tree, unknown node label)."""

class Builtins:
    stdlib_functions: Dict[str, AvNative] = {}
