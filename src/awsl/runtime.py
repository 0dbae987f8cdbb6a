"""AWSL runtime — tree-walking evaluator.

Runtime errors are values: every step returns a Value, and a VError
short-circuits the enclosing construct and propagates outward unchanged.
No Python exception escapes evaluate() for any AWSL program; runaway
recursion in user functions comes back as a "stack overflow" error.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TextIO

from .ast import (
    AssignmentStatement,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ContextStatement,
    ExpressionStatement,
    FloatLiteral,
    ForStatement,
    FunctionDeclaration,
    GroupedExpression,
    Identifier,
    IfStatement,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    ListLiteral,
    MemberExpression,
    Node,
    NullLiteral,
    ObjectLiteral,
    PipeExpression,
    Pos,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
)
from .builtins import register_builtins
from .environment import Environment, RunContext
from .formatting import FORMATTERS
from .lexer import Lexer
from .parse import RECURSION_LIMIT, ParseError, Parser
from .values import (
    FALSE,
    NULL,
    TRUE,
    Value,
    VBuiltin,
    VError,
    VFloat,
    VFunction,
    VHash,
    VInteger,
    VList,
    VReturn,
    VString,
    is_truthy,
    native_bool,
)


def new_error(pos: Pos, msg: str) -> VError:
    return VError(msg, pos.line, pos.col)


def _int_div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q


# ============================================================
# Dispatch
# ============================================================


def evaluate(node: Node | Program, env: Environment) -> Value:
    """Evaluate a node in env, returning its value or a VError."""
    if isinstance(node, Program):
        return _eval_program(node, env)

    # Statements
    if isinstance(node, ExpressionStatement):
        return evaluate(node.expr, env)
    if isinstance(node, AssignmentStatement):
        val = evaluate(node.value, env)
        if isinstance(val, VError):
            return val
        env.assign(node.name, val)
        return NULL
    if isinstance(node, ContextStatement):
        if node.kind == "profile":
            env.context.profile = node.value
        else:
            env.context.region = node.value
        return NULL
    if isinstance(node, BlockStatement):
        return _eval_block(node, env)
    if isinstance(node, IfStatement):
        return _eval_if(node, env)
    if isinstance(node, ForStatement):
        return _eval_for(node, env)
    if isinstance(node, FunctionDeclaration):
        env.declare_local(node.name, VFunction(node.params, node.body, env))
        return NULL
    if isinstance(node, ReturnStatement):
        if node.value is None:
            return VReturn(NULL)
        val = evaluate(node.value, env)
        if isinstance(val, VError):
            return val
        return VReturn(val)

    # Literals
    if isinstance(node, IntegerLiteral):
        return VInteger(node.value)
    if isinstance(node, FloatLiteral):
        return VFloat(node.value)
    if isinstance(node, StringLiteral):
        return VString(node.value)
    if isinstance(node, BooleanLiteral):
        return native_bool(node.value)
    if isinstance(node, NullLiteral):
        return NULL
    if isinstance(node, ListLiteral):
        return _eval_list(node, env)
    if isinstance(node, ObjectLiteral):
        return _eval_object(node, env)

    # Expressions
    if isinstance(node, Identifier):
        val = env.get(node.name)
        if val is None:
            return new_error(node.pos, "undefined variable: " + node.name)
        return val
    if isinstance(node, CallExpression):
        return _eval_call(node, env)
    if isinstance(node, PrefixExpression):
        return _eval_prefix(node, env)
    if isinstance(node, InfixExpression):
        return _eval_infix(node, env)
    if isinstance(node, IndexExpression):
        return _eval_index(node, env)
    if isinstance(node, MemberExpression):
        return _eval_member(node, env)
    if isinstance(node, PipeExpression):
        return _eval_pipe(node, env)
    if isinstance(node, GroupedExpression):
        return evaluate(node.inner, env)

    return new_error(node.pos, "unknown node type: " + type(node).__name__)


# ============================================================
# Statements
# ============================================================


def _eval_program(program: Program, env: Environment) -> Value:
    result: Value = NULL
    for stmt in program.statements:
        result = evaluate(stmt, env)
        if isinstance(result, VError):
            return result
        if isinstance(result, VReturn):
            return result.value
    return result


def _eval_block(block: BlockStatement, env: Environment) -> Value:
    result: Value = NULL
    for stmt in block.statements:
        result = evaluate(stmt, env)
        if isinstance(result, (VError, VReturn)):
            return result
    return result


def _eval_if(node: IfStatement, env: Environment) -> Value:
    condition = evaluate(node.condition, env)
    if isinstance(condition, VError):
        return condition
    if is_truthy(condition):
        return evaluate(node.consequence, env)
    if node.alternative is not None:
        return evaluate(node.alternative, env)
    return NULL


def _eval_for(node: ForStatement, env: Environment) -> Value:
    iterable = evaluate(node.iterable, env)
    if isinstance(iterable, VError):
        return iterable
    if not isinstance(iterable, VList):
        return new_error(node.pos, "cannot iterate over " + iterable.type_name())
    loop_env = env.enclosed()
    # Snapshot so appends made by the body don't extend this loop
    for elem in list(iterable.elements):
        loop_env.declare_local(node.var, elem)
        result = evaluate(node.body, loop_env)
        if isinstance(result, (VError, VReturn)):
            return result
    return NULL


# ============================================================
# Calls
# ============================================================


def _eval_call(node: CallExpression, env: Environment) -> Value:
    function = evaluate(node.function, env)
    if isinstance(function, VError):
        return function
    args: list[Value] = []
    for arg in node.arguments:
        val = evaluate(arg.value, env)
        if isinstance(val, VError):
            return val
        args.append(val)
    return apply_function(env, function, args, node.pos)


def apply_function(env: Environment, fn: Value, args: list[Value], pos: Pos) -> Value:
    """Call a user function or builtin with already-evaluated arguments."""
    if isinstance(fn, VFunction):
        if len(args) != len(fn.params):
            return new_error(
                pos,
                "wrong number of arguments: expected "
                + str(len(fn.params))
                + ", got "
                + str(len(args)),
            )
        call_env = fn.env.enclosed()
        for param, arg in zip(fn.params, args):
            call_env.declare_local(param, arg)
        try:
            result = evaluate(fn.body, call_env)
        except RecursionError:
            return new_error(pos, "stack overflow")
        if isinstance(result, VReturn):
            return result.value
        return result
    if isinstance(fn, VBuiltin):
        return _stamp(fn.fn(env, args), pos)
    return new_error(pos, "not a function: " + fn.type_name())


def _stamp(result: Value, pos: Pos) -> Value:
    """Give a position-less error from native code the call site's position."""
    if isinstance(result, VError) and result.line == 0:
        return new_error(pos, result.message)
    return result


# ============================================================
# Operators
# ============================================================


def _eval_prefix(node: PrefixExpression, env: Environment) -> Value:
    right = evaluate(node.right, env)
    if isinstance(right, VError):
        return right
    if node.op == "!":
        if right is TRUE:
            return FALSE
        if right is FALSE or right is NULL:
            return TRUE
        return FALSE
    if node.op == "-":
        if isinstance(right, VInteger):
            return VInteger(-right.value)
        if isinstance(right, VFloat):
            return VFloat(-right.value)
        return new_error(node.pos, "unknown operator: -" + right.type_name())
    return new_error(node.pos, "unknown operator: " + node.op + right.type_name())


def _eval_infix(node: InfixExpression, env: Environment) -> Value:
    left = evaluate(node.left, env)
    if isinstance(left, VError):
        return left
    right = evaluate(node.right, env)
    if isinstance(right, VError):
        return right
    op = node.op
    pos = node.pos
    if op == "&&":
        return native_bool(is_truthy(left) and is_truthy(right))
    if op == "||":
        return native_bool(is_truthy(left) or is_truthy(right))
    if isinstance(left, VInteger) and isinstance(right, VInteger):
        return _eval_integer_infix(op, left.value, right.value, pos)
    if isinstance(left, VFloat) and isinstance(right, VFloat):
        return _eval_float_infix(op, left.value, right.value, pos)
    if isinstance(left, VString) and isinstance(right, VString):
        return _eval_string_infix(op, left.value, right.value, pos)
    if op == "==":
        return native_bool(left is right)
    if op == "!=":
        return native_bool(left is not right)
    lt = left.type_name()
    rt = right.type_name()
    if lt != rt:
        return new_error(pos, "type mismatch: " + lt + " " + op + " " + rt)
    return new_error(pos, "unknown operator: " + lt + " " + op + " " + rt)


def _compare(op: str, a: int | float | str, b: int | float | str) -> Value | None:
    if op == "<":
        return native_bool(a < b)
    if op == ">":
        return native_bool(a > b)
    if op == "<=":
        return native_bool(a <= b)
    if op == ">=":
        return native_bool(a >= b)
    if op == "==":
        return native_bool(a == b)
    if op == "!=":
        return native_bool(a != b)
    return None


def _eval_integer_infix(op: str, a: int, b: int, pos: Pos) -> Value:
    if op == "+":
        return VInteger(a + b)
    if op == "-":
        return VInteger(a - b)
    if op == "*":
        return VInteger(a * b)
    if op == "/":
        if b == 0:
            return new_error(pos, "division by zero")
        return VInteger(_int_div_trunc(a, b))
    result = _compare(op, a, b)
    if result is None:
        return new_error(pos, "unknown operator: INTEGER " + op + " INTEGER")
    return result


def _eval_float_infix(op: str, a: float, b: float, pos: Pos) -> Value:
    if op == "+":
        return VFloat(a + b)
    if op == "-":
        return VFloat(a - b)
    if op == "*":
        return VFloat(a * b)
    if op == "/":
        if b == 0:
            return new_error(pos, "division by zero")
        return VFloat(a / b)
    result = _compare(op, a, b)
    if result is None:
        return new_error(pos, "unknown operator: FLOAT " + op + " FLOAT")
    return result


def _eval_string_infix(op: str, a: str, b: str, pos: Pos) -> Value:
    if op == "+":
        return VString(a + b)
    if op == "==":
        return native_bool(a == b)
    if op == "!=":
        return native_bool(a != b)
    return new_error(pos, "unknown operator: STRING " + op + " STRING")


# ============================================================
# Collections
# ============================================================


def _eval_list(node: ListLiteral, env: Environment) -> Value:
    elements: list[Value] = []
    for elem in node.elements:
        val = evaluate(elem, env)
        if isinstance(val, VError):
            return val
        elements.append(val)
    return VList(elements)


def _eval_object(node: ObjectLiteral, env: Environment) -> Value:
    pairs: dict[str, Value] = {}
    for pair in node.pairs:
        val = evaluate(pair.value, env)
        if isinstance(val, VError):
            return val
        pairs[pair.key] = val
    return VHash(pairs)


def _eval_index(node: IndexExpression, env: Environment) -> Value:
    left = evaluate(node.left, env)
    if isinstance(left, VError):
        return left
    index = evaluate(node.index, env)
    if isinstance(index, VError):
        return index
    if isinstance(left, (VList, VString)) and isinstance(index, VInteger):
        items = left.elements if isinstance(left, VList) else left.value
        i = index.value
        n = len(items)
        if i < 0:
            i += n
        if i < 0 or i >= n:
            return new_error(
                node.pos,
                "index out of bounds: " + str(index.value) + " (length: " + str(n) + ")",
            )
        if isinstance(left, VString):
            return VString(left.value[i])
        return left.elements[i]
    if isinstance(left, VHash) and isinstance(index, VString):
        return left.pairs.get(index.value, NULL)
    return new_error(
        node.pos,
        "index operator not supported: " + left.type_name() + "[" + index.type_name() + "]",
    )


def _eval_member(node: MemberExpression, env: Environment) -> Value:
    obj = evaluate(node.obj, env)
    if isinstance(obj, VError):
        return obj
    if isinstance(obj, VHash):
        return obj.pairs.get(node.member, NULL)
    return new_error(
        node.pos, "member access not supported: " + obj.type_name() + "." + node.member
    )


def _eval_pipe(node: PipeExpression, env: Environment) -> Value:
    left = evaluate(node.left, env)
    if isinstance(left, VError):
        return left
    formatter = FORMATTERS.get(node.fmt)
    if formatter is None:
        return new_error(node.pos, "unknown format: " + node.fmt)
    return _stamp(formatter(left), node.pos)


# ============================================================
# Running programs
# ============================================================


@dataclass
class RunResult:
    exit_code: int
    stdout: str
    value: Value | None = None
    parse_errors: list[ParseError] = field(default_factory=list)
    error: VError | None = None


def run(
    source: str,
    *,
    stdout: TextIO | None = None,
    env: Mapping[str, str] | None = None,
) -> RunResult:
    """Parse and run an AWSL program.

    Output goes to stdout when given; otherwise it is captured into the
    result. env seeds the AWS profile/region context (AWS_PROFILE,
    AWS_REGION, AWS_DEFAULT_REGION).
    """
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    if parser.has_errors():
        return RunResult(1, "", parse_errors=list(parser.errors))
    buf = io.StringIO()
    sink = stdout if stdout is not None else buf
    scope = Environment(stdout=sink, context=RunContext.from_env(env))
    register_builtins(scope)
    old_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
    try:
        value = evaluate(program, scope)
    except RecursionError:
        value = new_error(program.pos, "stack overflow")
    finally:
        sys.setrecursionlimit(old_limit)
    captured = buf.getvalue()
    if isinstance(value, VError):
        return RunResult(1, captured, value=value, error=value)
    return RunResult(0, captured, value=value)

