"""Lexer tests: token kinds, literals, positions, and illegal input."""

import pytest

from awsl.lexer import Lexer, tokenize
from awsl.tokens import (
    TK_AND,
    TK_ASSIGN,
    TK_EOF,
    TK_EQ,
    TK_FLOAT,
    TK_FUNCTION,
    TK_GTE,
    TK_IDENT,
    TK_ILLEGAL,
    TK_INT,
    TK_LTE,
    TK_NOT_EQ,
    TK_OR,
    TK_PIPE,
    TK_PROFILE,
    TK_REGION,
    TK_SEMICOLON,
    TK_STRING,
    Token,
)


def _types(source: str) -> list[str]:
    return [t.type for t in tokenize(source)]


def _pairs(source: str) -> list[tuple[str, str]]:
    return [(t.type, t.value) for t in tokenize(source)]


# ── Operators and delimiters ──


def test_single_char_tokens():
    assert _types("=+-!*/<>,;:.|(){}[]") == [
        "=",
        "+",
        "-",
        "!",
        "*",
        "/",
        "<",
        ">",
        ",",
        ";",
        ":",
        ".",
        "|",
        "(",
        ")",
        "{",
        "}",
        "[",
        "]",
        TK_EOF,
    ]


def test_two_char_operators():
    assert _pairs("== != <= >= && ||") == [
        (TK_EQ, "=="),
        (TK_NOT_EQ, "!="),
        (TK_LTE, "<="),
        (TK_GTE, ">="),
        (TK_AND, "&&"),
        (TK_OR, "||"),
        (TK_EOF, ""),
    ]


def test_lone_pipe_and_ampersand():
    assert _pairs("x | y & z") == [
        (TK_IDENT, "x"),
        (TK_PIPE, "|"),
        (TK_IDENT, "y"),
        (TK_ILLEGAL, "&"),
        (TK_IDENT, "z"),
        (TK_EOF, ""),
    ]


def test_assign_versus_equals():
    assert _types("a = b == c") == [TK_IDENT, TK_ASSIGN, TK_IDENT, TK_EQ, TK_IDENT, TK_EOF]


# ── Keywords and identifiers ──


def test_keywords():
    assert _types("fn true false null if else for in return profile region") == [
        TK_FUNCTION,
        "TRUE",
        "FALSE",
        "NULL",
        "IF",
        "ELSE",
        "FOR",
        "IN",
        "RETURN",
        TK_PROFILE,
        TK_REGION,
        TK_EOF,
    ]


def test_identifiers():
    assert _pairs("foo _bar baz9 fnx") == [
        (TK_IDENT, "foo"),
        (TK_IDENT, "_bar"),
        (TK_IDENT, "baz9"),
        (TK_IDENT, "fnx"),
        (TK_EOF, ""),
    ]


# ── Numbers ──


def test_integers_and_floats():
    assert _pairs("42 3.14 0 10.0") == [
        (TK_INT, "42"),
        (TK_FLOAT, "3.14"),
        (TK_INT, "0"),
        (TK_FLOAT, "10.0"),
        (TK_EOF, ""),
    ]


def test_trailing_dot_is_not_float():
    assert _pairs("5.") == [(TK_INT, "5"), (".", "."), (TK_EOF, "")]


def test_number_then_member():
    assert _pairs("1.x") == [(TK_INT, "1"), (".", "."), (TK_IDENT, "x"), (TK_EOF, "")]


# ── Strings ──


def test_string_literal():
    assert _pairs('"hello world"') == [(TK_STRING, "hello world"), (TK_EOF, "")]


def test_empty_string():
    assert _pairs('""') == [(TK_STRING, ""), (TK_EOF, "")]


def test_string_has_no_escapes():
    assert _pairs(r'"a\nb"') == [(TK_STRING, r"a\nb"), (TK_EOF, "")]


def test_unterminated_string_is_illegal():
    toks = tokenize('x = "abc')
    assert toks[2].type == TK_ILLEGAL
    assert toks[2].value == '"abc'
    assert (toks[2].line, toks[2].col) == (1, 5)
    assert toks[3].type == TK_EOF


# ── Comments and whitespace ──


def test_line_comments_are_skipped():
    src = "// leading\nx = 1; // trailing\n// last"
    assert _types(src) == [TK_IDENT, TK_ASSIGN, TK_INT, TK_SEMICOLON, TK_EOF]


def test_slash_alone_is_division():
    assert _types("a / b") == [TK_IDENT, "/", TK_IDENT, TK_EOF]


def test_empty_input():
    assert tokenize("") == [Token(TK_EOF, "", 1, 1)]


def test_whitespace_only():
    assert _types(" \t\r\n ") == [TK_EOF]


# ── Positions ──


def test_positions_across_lines():
    toks = tokenize("foo\nbar baz")
    assert [(t.value, t.line, t.col) for t in toks] == [
        ("foo", 1, 1),
        ("bar", 2, 1),
        ("baz", 2, 5),
        ("", 2, 8),
    ]


def test_two_char_operator_positions():
    toks = tokenize("== != <= >=")
    assert [t.col for t in toks[:-1]] == [1, 4, 7, 10]


def test_string_position_is_opening_quote():
    toks = tokenize('  "hi"')
    assert (toks[0].line, toks[0].col) == (1, 3)


def test_position_after_comment():
    toks = tokenize("// c\n  x")
    assert (toks[0].line, toks[0].col) == (2, 3)


# ── Illegal input and EOF ──


@pytest.mark.parametrize("ch", ["@", "#", "$", "~", "é"])
def test_illegal_characters(ch):
    toks = tokenize("a " + ch + " b")
    assert toks[1].type == TK_ILLEGAL
    assert toks[1].value == ch
    assert toks[2].value == "b"


def test_eof_repeats():
    lexer = Lexer("x")
    assert lexer.next_token().type == TK_IDENT
    first = lexer.next_token()
    second = lexer.next_token()
    assert first.type == TK_EOF
    assert second == first


def test_token_repr():
    assert repr(Token(TK_INT, "5", 1, 2)) == "Token(INT, '5', 1, 2)"
