"""AWSL builtin functions and the registry that binds them into scopes."""

from __future__ import annotations

import time

from .environment import Environment
from .values import (
    NULL,
    BuiltinFn,
    Value,
    VBuiltin,
    VError,
    VHash,
    VInteger,
    VList,
    VString,
)


def builtin_error(msg: str) -> VError:
    """Error without a position; the evaluator stamps the call site on it."""
    return VError(msg, 0, 0)


def _check_arity(name: str, args: list[Value], want: int) -> VError | None:
    if len(args) != want:
        return builtin_error(
            "wrong number of arguments to "
            + name
            + ": expected "
            + str(want)
            + ", got "
            + str(len(args))
        )
    return None


def _bi_print(env: Environment, args: list[Value]) -> Value:
    env.stdout.write(" ".join(a.inspect() for a in args) + "\n")
    return NULL


def _bi_clock(env: Environment, args: list[Value]) -> Value:
    err = _check_arity("clock", args, 0)
    if err is not None:
        return err
    return VInteger(int(time.time()))


def _bi_len(env: Environment, args: list[Value]) -> Value:
    err = _check_arity("len", args, 1)
    if err is not None:
        return err
    x = args[0]
    if isinstance(x, VString):
        return VInteger(len(x.value))
    if isinstance(x, VList):
        return VInteger(len(x.elements))
    if isinstance(x, VHash):
        return VInteger(len(x.pairs))
    return builtin_error("argument to len not supported: " + x.type_name())


def _bi_type(env: Environment, args: list[Value]) -> Value:
    err = _check_arity("type", args, 1)
    if err is not None:
        return err
    return VString(args[0].type_name())


BUILTINS: dict[str, VBuiltin] = {
    "print": VBuiltin("print", _bi_print),
    "clock": VBuiltin("clock", _bi_clock),
    "len": VBuiltin("len", _bi_len),
    "type": VBuiltin("type", _bi_type),
}


def register_builtin(name: str, fn: BuiltinFn) -> VBuiltin:
    """Add or replace a builtin; later register_builtins() calls bind it."""
    builtin = VBuiltin(name, fn)
    BUILTINS[name] = builtin
    return builtin


def register_builtins(env: Environment) -> None:
    for name, builtin in BUILTINS.items():
        env.declare_local(name, builtin)
