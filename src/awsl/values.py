"""AWSL runtime values."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .ast import BlockStatement
    from .environment import Environment


# ============================================================
# Type names
# ============================================================

INTEGER_OBJ = "INTEGER"
FLOAT_OBJ = "FLOAT"
STRING_OBJ = "STRING"
BOOLEAN_OBJ = "BOOLEAN"
NULL_OBJ = "NULL"
ERROR_OBJ = "ERROR"
BUILTIN_OBJ = "BUILTIN"
LIST_OBJ = "LIST"
FUNCTION_OBJ = "FUNCTION"
RETURN_VALUE_OBJ = "RETURN_VALUE"
HASH_OBJ = "HASH"

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def wrap_int64(n: int) -> int:
    """Wrap n into the signed 64-bit range (two's complement overflow)."""
    n &= (1 << 64) - 1
    if n > INT64_MAX:
        n -= 1 << 64
    return n


def format_float(f: float) -> str:
    """Shortest round-trip rendering; exponent form below 1e-4 or from 1e6 up."""
    if math.isnan(f):
        return "NaN"
    if math.isinf(f):
        return "+Inf" if f > 0 else "-Inf"
    sign, digit_tuple, exp = Decimal(repr(f)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exp += len(digits) - len(stripped)
    digits = stripped or "0"
    if stripped == "":
        exp = 0
    prefix = "-" if sign else ""
    dp = len(digits) + exp
    x = dp - 1
    if x < -4 or x >= 6:
        mantissa = digits[0]
        if len(digits) > 1:
            mantissa += "." + digits[1:]
        esign = "-" if x < 0 else "+"
        return prefix + mantissa + "e" + esign + str(abs(x)).rjust(2, "0")
    if dp <= 0:
        return prefix + "0." + "0" * (-dp) + digits
    if dp >= len(digits):
        return prefix + digits + "0" * (dp - len(digits))
    return prefix + digits[:dp] + "." + digits[dp:]


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value."""

    def type_name(self) -> str:
        raise NotImplementedError

    def inspect(self) -> str:
        raise NotImplementedError


@dataclass
class VInteger(Value):
    value: int

    def __post_init__(self) -> None:
        self.value = wrap_int64(self.value)

    def type_name(self) -> str:
        return INTEGER_OBJ

    def inspect(self) -> str:
        return str(self.value)


@dataclass
class VFloat(Value):
    value: float

    def type_name(self) -> str:
        return FLOAT_OBJ

    def inspect(self) -> str:
        return format_float(self.value)


@dataclass
class VString(Value):
    value: str

    def type_name(self) -> str:
        return STRING_OBJ

    def inspect(self) -> str:
        return self.value


@dataclass
class VBoolean(Value):
    value: bool

    def type_name(self) -> str:
        return BOOLEAN_OBJ

    def inspect(self) -> str:
        return "true" if self.value else "false"


@dataclass
class VNull(Value):
    def type_name(self) -> str:
        return NULL_OBJ

    def inspect(self) -> str:
        return "null"


@dataclass
class VError(Value):
    """A runtime error travelling as a value, tagged with its source position."""

    message: str
    line: int
    col: int

    def type_name(self) -> str:
        return ERROR_OBJ

    def inspect(self) -> str:
        return (
            "error at line "
            + str(self.line)
            + ", column "
            + str(self.col)
            + ": "
            + self.message
        )


BuiltinFn = Callable[["Environment", list[Value]], Value]


@dataclass(eq=False)
class VBuiltin(Value):
    name: str
    fn: BuiltinFn

    def type_name(self) -> str:
        return BUILTIN_OBJ

    def inspect(self) -> str:
        return "builtin:" + self.name


@dataclass(eq=False)
class VList(Value):
    elements: list[Value] = field(default_factory=list)

    def type_name(self) -> str:
        return LIST_OBJ

    def inspect(self) -> str:
        return "[" + ", ".join(e.inspect() for e in self.elements) + "]"


@dataclass(eq=False)
class VHash(Value):
    """String-keyed mapping; insertion order is preserved."""

    pairs: dict[str, Value] = field(default_factory=dict)

    def type_name(self) -> str:
        return HASH_OBJ

    def inspect(self) -> str:
        items = [k + ": " + v.inspect() for k, v in self.pairs.items()]
        return "{" + ", ".join(items) + "}"


@dataclass(eq=False, repr=False)
class VFunction(Value):
    """User function closing over its defining environment."""

    params: list[str]
    body: BlockStatement
    env: Environment

    def type_name(self) -> str:
        return FUNCTION_OBJ

    def inspect(self) -> str:
        return "fn(" + ", ".join(self.params) + ") " + str(self.body)

    def __repr__(self) -> str:
        return "VFunction(" + ", ".join(self.params) + ")"


@dataclass
class VReturn(Value):
    """Wraps a returned value while it unwinds to the enclosing call."""

    value: Value

    def type_name(self) -> str:
        return RETURN_VALUE_OBJ

    def inspect(self) -> str:
        return self.value.inspect()


TRUE = VBoolean(True)
FALSE = VBoolean(False)
NULL = VNull()


def native_bool(b: bool) -> VBoolean:
    return TRUE if b else FALSE


def is_truthy(v: Value) -> bool:
    """NULL and false are falsy; every other value is truthy."""
    if isinstance(v, VNull):
        return False
    if isinstance(v, VBoolean):
        return v.value
    return True


def is_error(v: Value | None) -> bool:
    return isinstance(v, VError)
