"""Evaluator tests: arithmetic, control flow, closures, and error values."""

import io
import sys

import pytest

from awsl import parse, run
from awsl.ast import Pos, Program
from awsl.builtins import register_builtins
from awsl.environment import Environment
from awsl.runtime import apply_function, evaluate
from awsl.values import (
    FALSE,
    NULL,
    TRUE,
    VError,
    VFloat,
    VFunction,
    VHash,
    VInteger,
    VList,
    VString,
)


def _eval(source: str, env: Environment | None = None):
    program, errors = parse(source)
    assert errors == [], [str(e) for e in errors]
    if env is None:
        env = Environment(stdout=io.StringIO())
        register_builtins(env)
    return evaluate(program, env)


def _error(source: str) -> VError:
    result = _eval(source)
    assert isinstance(result, VError), result
    return result


# ── Literals and arithmetic ──


@pytest.mark.parametrize(
    "source,expected",
    [
        ("5;", 5),
        ("-5;", -5),
        ("--5;", 5),
        ("1 + 2 * 3;", 7),
        ("(1 + 2) * 3;", 9),
        ("10 - 4 - 3;", 3),
        ("7 / 2;", 3),
        ("-7 / 2;", -3),
        ("7 / -2;", -3),
        ("9223372036854775807 + 1;", -9223372036854775808),
    ],
)
def test_integer_arithmetic(source, expected):
    assert _eval(source) == VInteger(expected)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1.5 + 2.25;", 3.75),
        ("-2.5;", -2.5),
        ("1.0 / 4.0;", 0.25),
        ("3.0 * 2.0;", 6.0),
    ],
)
def test_float_arithmetic(source, expected):
    assert _eval(source) == VFloat(expected)


def test_string_concatenation():
    assert _eval('"hello" + " " + "world";') == VString("hello world")


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1 < 2;", TRUE),
        ("1 > 2;", FALSE),
        ("2 <= 2;", TRUE),
        ("3 >= 4;", FALSE),
        ("1 == 1;", TRUE),
        ("1 != 1;", FALSE),
        ("1.5 < 2.5;", TRUE),
        ("2.0 == 2.0;", TRUE),
        ('"a" == "a";', TRUE),
        ('"a" != "b";', TRUE),
        ("true == true;", TRUE),
        ("true != false;", TRUE),
        ("null == null;", TRUE),
        ("1 == true;", FALSE),
        ('1 != "1";', TRUE),
        ("[1] == [1];", FALSE),
    ],
)
def test_comparisons(source, expected):
    assert _eval(source) is expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("!true;", FALSE),
        ("!false;", TRUE),
        ("!null;", TRUE),
        ("!5;", FALSE),
        ("!!true;", TRUE),
        ('!"";', FALSE),
    ],
)
def test_bang(source, expected):
    assert _eval(source) is expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("true && false;", FALSE),
        ("true || false;", TRUE),
        ("true || false && false;", TRUE),
        ("null || false;", FALSE),
        ("1 && 2;", TRUE),
        ('null && "x";', FALSE),
    ],
)
def test_logical_operators(source, expected):
    assert _eval(source) is expected


def test_logical_operators_evaluate_both_sides():
    out = io.StringIO()
    env = Environment(stdout=out)
    register_builtins(env)
    _eval('true || print("rhs");', env)
    assert out.getvalue() == "rhs\n"


# ── Errors ──


@pytest.mark.parametrize(
    "source,message",
    [
        ('5 + "hello";', "type mismatch: INTEGER + STRING"),
        ("5 - true;", "type mismatch: INTEGER - BOOLEAN"),
        ("1 + 1.5;", "type mismatch: INTEGER + FLOAT"),
        ('"hello" - "world";', "unknown operator: STRING - STRING"),
        ('"a" < "b";', "unknown operator: STRING < STRING"),
        ("true + false;", "unknown operator: BOOLEAN + BOOLEAN"),
        ("null + null;", "unknown operator: NULL + NULL"),
        ('-"hello";', "unknown operator: -STRING"),
        ("-true;", "unknown operator: -BOOLEAN"),
        ("1 / 0;", "division by zero"),
        ("1.0 / 0.0;", "division by zero"),
        ("missing;", "undefined variable: missing"),
        ("5();", "not a function: INTEGER"),
        ("for (x in 5) { x; }", "cannot iterate over INTEGER"),
        ("fn f(a) { a; } f(1, 2);", "wrong number of arguments: expected 1, got 2"),
        ("[1, 2][5];", "index out of bounds: 5 (length: 2)"),
        ("[1, 2][-3];", "index out of bounds: -3 (length: 2)"),
        ('[1]["a"];', "index operator not supported: LIST[STRING]"),
        ("{a: 1}[0];", "index operator not supported: HASH[INTEGER]"),
        ("5[0];", "index operator not supported: INTEGER[INTEGER]"),
        ("x = 5; x.y;", "member access not supported: INTEGER.y"),
        ("5 | format csv;", "cannot format INTEGER as csv"),
    ],
)
def test_runtime_errors(source, message):
    assert _error(source).message == message


def test_error_carries_position():
    err = _error("x = 1;\ny = x + true;")
    assert (err.line, err.col) == (2, 5)
    assert err.inspect() == "error at line 2, column 5: type mismatch: INTEGER + BOOLEAN"


def test_undefined_variable_position():
    err = _error("  nope;")
    assert (err.line, err.col) == (1, 3)


def test_error_stops_program():
    out = io.StringIO()
    env = Environment(stdout=out)
    register_builtins(env)
    result = _eval('print("a"); missing; print("b");', env)
    assert isinstance(result, VError)
    assert out.getvalue() == "a\n"


def test_error_in_argument_stops_call():
    out = io.StringIO()
    env = Environment(stdout=out)
    register_builtins(env)
    result = _eval("print(1, missing);", env)
    assert isinstance(result, VError)
    assert out.getvalue() == ""


def test_first_error_wins_in_list():
    err = _error("[a, b];")
    assert err.message == "undefined variable: a"


def test_left_operand_error_wins():
    err = _error("a + b;")
    assert err.message == "undefined variable: a"


# ── Bindings ──


def test_assignment_evaluates_to_null():
    assert _eval("x = 5;") is NULL


def test_assignment_then_read():
    assert _eval("x = 5; y = x * 2; y;") == VInteger(10)


def test_empty_program_is_null():
    assert _eval("") is NULL


def test_program_value_is_last_statement():
    assert _eval("1; 2; 3;") == VInteger(3)


# ── Control flow ──


def test_if_else():
    assert _eval("if (true) { 10; } else { 20; }") == VInteger(10)
    assert _eval("if (false) { 10; } else { 20; }") == VInteger(20)


def test_if_without_branch_is_null():
    assert _eval("if (false) { 10; }") is NULL


def test_if_condition_truthiness():
    assert _eval("if (1) { 10; } else { 20; }") == VInteger(10)
    assert _eval("if (null) { 10; } else { 20; }") == VInteger(20)


def test_for_sum():
    assert _eval("sum = 0; for (x in [1, 2, 3]) { sum = sum + x; } sum;") == VInteger(6)


def test_for_evaluates_to_null():
    assert _eval("for (x in [1]) { x; }") is NULL


def test_for_over_empty_list():
    assert _eval("n = 0; for (x in []) { n = n + 1; } n;") == VInteger(0)


def test_loop_variable_is_scoped_to_loop():
    err = _error("for (x in [1]) { } x;")
    assert err.message == "undefined variable: x"


def test_loop_variable_shadows_outer():
    assert _eval("x = 100; for (x in [1, 2]) { } x;") == VInteger(100)


def test_blocks_share_enclosing_scope():
    assert _eval("if (true) { y = 7; } y;") == VInteger(7)


def test_top_level_return_stops_program():
    assert _eval("1; return 2; 3;") == VInteger(2)


# ── Functions ──


def test_function_call():
    assert _eval("fn add(a, b) { return a + b; } add(2, 3);") == VInteger(5)


def test_function_declaration_evaluates_to_null():
    assert _eval("fn f() { }") is NULL


def test_function_value():
    fn = _eval("fn f(a) { a; } f;")
    assert isinstance(fn, VFunction)
    assert fn.inspect() == "fn(a) { a }"


def test_implicit_result_is_last_value():
    assert _eval("fn f() { 1; 2; } f();") == VInteger(2)


def test_empty_function_returns_null():
    assert _eval("fn f() { } f();") is NULL


def test_bare_return():
    assert _eval("fn f() { return; 5; } f();") is NULL


def test_early_return_from_nested_if():
    src = """
fn sign(n) {
    if (n < 0) { return -1; }
    if (n == 0) { return 0; }
    return 1;
}
[sign(-5), sign(0), sign(9)];
"""
    result = _eval(src)
    assert isinstance(result, VList)
    assert result.elements == [VInteger(-1), VInteger(0), VInteger(1)]


def test_return_from_inside_loop():
    src = """
fn first_big(xs) {
    for (x in xs) {
        if (x > 10) { return x; }
    }
    return null;
}
first_big([1, 20, 30]);
"""
    assert _eval(src) == VInteger(20)


def test_recursion():
    src = "fn fact(n) { if (n <= 1) { return 1; } return n * fact(n - 1); } fact(10);"
    assert _eval(src) == VInteger(3628800)


COUNT_DOWN = "fn count(n) { if (n == 0) { return 0; } return 1 + count(n - 1); }\n"


@pytest.mark.parametrize("depth", [150, 200, 1000])
def test_deep_recursion(depth):
    result = run(COUNT_DOWN + "count(" + str(depth) + ");")
    assert result.error is None
    assert result.value == VInteger(depth)


def test_runaway_recursion_is_an_error_value():
    src = "fn forever(n) {\n    return forever(n + 1);\n}\nforever(0);"
    result = run(src)
    assert result.exit_code == 1
    assert result.error is not None
    assert result.error.message == "stack overflow"
    assert (result.error.line, result.error.col) == (2, 12)


def test_runaway_recursion_under_plain_evaluate():
    err = _error("fn forever() { return forever(); } forever();")
    assert err.message == "stack overflow"


def test_run_restores_recursion_limit():
    before = sys.getrecursionlimit()
    run(COUNT_DOWN + "count(10);")
    run("fn forever() { return forever(); } forever();")
    assert sys.getrecursionlimit() == before


def test_closure_captures_defining_scope():
    src = """
fn make_adder(n) {
    fn add(x) { return x + n; }
    return add;
}
add5 = make_adder(5);
add5(10);
"""
    assert _eval(src) == VInteger(15)


def test_closure_sees_later_updates():
    src = "count = 1; fn get() { return count; } count = 2; get();"
    assert _eval(src) == VInteger(2)


def test_assignment_in_function_updates_global():
    assert _eval("n = 0; fn bump() { n = n + 1; } bump(); bump(); n;") == VInteger(2)


def test_parameters_are_local():
    assert _eval("a = 1; fn f(a) { a = 99; } f(5); a;") == VInteger(1)


def test_named_arguments_are_positional():
    assert _eval("fn f(a, b) { return a - b; } f(b: 10, a: 3);") == VInteger(7)


def test_apply_function_directly():
    fn = _eval("fn twice(x) { return x * 2; } twice;")
    assert apply_function(Environment(), fn, [VInteger(4)], Pos(1, 1)) == VInteger(8)


# ── Collections ──


def test_list_literal():
    result = _eval('[1, "two", 3.0];')
    assert isinstance(result, VList)
    assert result.elements == [VInteger(1), VString("two"), VFloat(3.0)]


@pytest.mark.parametrize(
    "source,expected",
    [
        ("[10, 20, 30][0];", VInteger(10)),
        ("[10, 20, 30][2];", VInteger(30)),
        ("[10, 20, 30][-1];", VInteger(30)),
        ('"hello"[1];', VString("e")),
        ('"hello"[-1];', VString("o")),
        ('{a: 1}["a"];', VInteger(1)),
    ],
)
def test_indexing(source, expected):
    assert _eval(source) == expected


def test_missing_hash_key_is_null():
    assert _eval('{a: 1}["b"];') is NULL


def test_object_literal():
    result = _eval('{name: "fn-a", size: 128};')
    assert isinstance(result, VHash)
    assert list(result.pairs) == ["name", "size"]
    assert result.pairs["size"] == VInteger(128)


def test_member_access():
    assert _eval('o = {name: "x", inner: {n: 3}}; o.inner.n;') == VInteger(3)
    assert _eval("o = {}; o.missing;") is NULL


def test_member_call_on_hash_of_builtins():
    env = Environment(stdout=io.StringIO())
    register_builtins(env)
    env.declare_local("util", VHash({"size": env.get("len")}))
    assert _eval("util.size([1, 2, 3]);", env) == VInteger(3)


def test_pipe_produces_string():
    result = _eval("[{a: 1, b: 2}] | format csv;")
    assert result == VString("a,b\n1,2")


# ── Context ──


def test_context_statements_update_run_context():
    env = Environment(stdout=io.StringIO())
    assert _eval('profile "prod"; region "us-east-1";', env) is NULL
    assert env.context.profile == "prod"
    assert env.context.region == "us-east-1"


def test_context_visible_from_function_scope():
    env = Environment(stdout=io.StringIO())
    _eval('fn f() { region "eu-west-1"; } f();', env)
    assert env.context.region == "eu-west-1"


# ── Robustness ──


def test_unknown_node_type():
    class Strange:
        pos = Pos(4, 2)

    result = evaluate(Strange(), Environment())
    assert isinstance(result, VError)
    assert result.message == "unknown node type: Strange"
    assert (result.line, result.col) == (4, 2)


def test_evaluate_empty_program():
    assert evaluate(Program([]), Environment()) is NULL


# ── run() ──


def test_run_captures_output():
    result = run('print("hi", 1, true);')
    assert result.exit_code == 0
    assert result.stdout == "hi 1 true\n"


def test_run_reports_parse_errors():
    result = run("x = ;")
    assert result.exit_code == 1
    assert [str(e) for e in result.parse_errors] == ["line 1, column 5: unexpected token ;"]
    assert result.stdout == ""


def test_run_reports_runtime_error():
    result = run('print("before"); 1 / 0;')
    assert result.exit_code == 1
    assert result.stdout == "before\n"
    assert result.error is not None
    assert result.error.message == "division by zero"


def test_run_writes_to_given_stream():
    out = io.StringIO()
    result = run('print("x");', stdout=out)
    assert out.getvalue() == "x\n"
    assert result.stdout == ""


def test_run_returns_final_value():
    assert run("1 + 1;").value == VInteger(2)
