"""AWSL parser — recursive descent, one method per grammar production.

The parser never raises. Failed productions record a ParseError, return
None, and resynchronize at the next statement boundary so that several
independent errors are reported from a single pass.
"""

from __future__ import annotations

import math
import sys

from .ast import (
    Argument,
    AssignmentStatement,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ContextStatement,
    Expression,
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
    NullLiteral,
    ObjectLiteral,
    ObjectPair,
    PipeExpression,
    Pos,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)
from .lexer import Lexer
from .tokens import (
    STATEMENT_STARTS,
    TK_AND,
    TK_ASSIGN,
    TK_ASTERISK,
    TK_BANG,
    TK_COLON,
    TK_COMMA,
    TK_DOT,
    TK_ELSE,
    TK_EOF,
    TK_EQ,
    TK_FALSE,
    TK_FLOAT,
    TK_FOR,
    TK_FUNCTION,
    TK_GT,
    TK_GTE,
    TK_IDENT,
    TK_IF,
    TK_ILLEGAL,
    TK_IN,
    TK_INT,
    TK_LBRACE,
    TK_LBRACKET,
    TK_LPAREN,
    TK_LT,
    TK_LTE,
    TK_MINUS,
    TK_NOT_EQ,
    TK_NULL,
    TK_OR,
    TK_PIPE,
    TK_PLUS,
    TK_PROFILE,
    TK_RBRACE,
    TK_RBRACKET,
    TK_REGION,
    TK_RETURN,
    TK_RPAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STRING,
    TK_TRUE,
    Token,
)

MAX_ERRORS = 20

# Statements and expressions deeper than this are rejected, not recursed into
MAX_NESTING = 100

# Interpreter recursion limit while parsing or running a program
RECURSION_LIMIT = 12000

INT64_MAX = (1 << 63) - 1

PIPE_FORMATS: set[str] = {"csv", "table"}

# Binary precedence levels, loosest first
EQUALITY_OPS: set[str] = {TK_EQ, TK_NOT_EQ}
COMPARE_OPS: set[str] = {TK_LT, TK_GT, TK_LTE, TK_GTE}
TERM_OPS: set[str] = {TK_PLUS, TK_MINUS}
FACTOR_OPS: set[str] = {TK_ASTERISK, TK_SLASH}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__("line " + str(line) + ", column " + str(col) + ": " + msg)


def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


class Parser:
    """Recursive descent parser for AWSL with error recovery."""

    def __init__(self, lexer: Lexer):
        self.lexer: Lexer = lexer
        self.errors: list[ParseError] = []
        self.depth: int = 0
        self.cur_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

    # ── Helpers ──────────────────────────────────────────────

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, type_: str) -> bool:
        return self.cur_token.type == type_

    def peek_token_is(self, type_: str) -> bool:
        return self.peek_token.type == type_

    def expect_peek(self, type_: str) -> bool:
        """Advance if the next token has the given type, else record an error."""
        if self.peek_token_is(type_):
            self.next_token()
            return True
        self.peek_error(type_)
        return False

    def add_error(self, msg: str, line: int, col: int) -> None:
        if len(self.errors) >= MAX_ERRORS:
            return
        self.errors.append(ParseError(msg, line, col))

    def cur_error(self, msg: str) -> None:
        self.add_error(msg, self.cur_token.line, self.cur_token.col)

    def peek_error(self, expected: str) -> None:
        tok = self.peek_token
        self.add_error("expected " + expected + ", got " + tok.type, tok.line, tok.col)

    def at_error_limit(self) -> bool:
        return len(self.errors) >= MAX_ERRORS

    def synchronize(self) -> None:
        """Skip to just past a ';' or to the token before a statement keyword."""
        while not self.cur_token_is(TK_EOF):
            if self.cur_token_is(TK_SEMICOLON):
                self.next_token()
                return
            if self.peek_token.type in STATEMENT_STARTS:
                self.next_token()
                return
            self.next_token()

    def _pos(self) -> Pos:
        return Pos(self.cur_token.line, self.cur_token.col)

    def _enter(self, what: str) -> bool:
        """Open one nesting level; past MAX_NESTING, record an error instead."""
        if self.depth >= MAX_NESTING:
            self.cur_error(what + " nested too deeply")
            return False
        self.depth += 1
        return True

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
        try:
            statements: list[Statement] = []
            while not self.cur_token_is(TK_EOF):
                if self.at_error_limit():
                    break
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
            return Program(statements)
        finally:
            sys.setrecursionlimit(old_limit)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Statement | None:
        if not self._enter("statement"):
            self.synchronize()
            return None
        try:
            return self._parse_statement_kind()
        finally:
            self.depth -= 1

    def _parse_statement_kind(self) -> Statement | None:
        t = self.cur_token.type
        if t == TK_PROFILE or t == TK_REGION:
            return self.parse_context_statement()
        if t == TK_IF:
            return self.parse_if_statement()
        if t == TK_FOR:
            return self.parse_for_statement()
        if t == TK_RETURN:
            return self.parse_return_statement()
        if t == TK_FUNCTION:
            return self.parse_function_declaration()
        if t == TK_IDENT and self.peek_token_is(TK_ASSIGN):
            return self.parse_assignment_statement()
        return self.parse_expression_statement()

    def parse_context_statement(self) -> ContextStatement | None:
        """ContextStmt = ( 'profile' | 'region' ) STRING ';'"""
        pos = self._pos()
        kind = self.cur_token.value
        if not self.expect_peek(TK_STRING):
            self.synchronize()
            return None
        value = self.cur_token.value
        if not self.expect_peek(TK_SEMICOLON):
            self.synchronize()
            return None
        self.next_token()
        return ContextStatement(pos, kind, value)

    def parse_assignment_statement(self) -> AssignmentStatement | None:
        """Assignment = IDENT '=' Expr ';'"""
        pos = self._pos()
        name = self.cur_token.value
        if not self.expect_peek(TK_ASSIGN):
            self.synchronize()
            return None
        self.next_token()
        value = self.parse_expression()
        if value is None:
            self.synchronize()
            return None
        if not self.expect_peek(TK_SEMICOLON):
            self.synchronize()
            return None
        self.next_token()
        return AssignmentStatement(pos, name, value)

    def parse_if_statement(self) -> IfStatement | None:
        """IfStmt = 'if' '(' Expr ')' Block ( 'else' Block )?"""
        pos = self._pos()
        if not self.expect_peek(TK_LPAREN):
            self.synchronize()
            return None
        self.next_token()
        condition = self.parse_expression()
        if condition is None:
            self.synchronize()
            return None
        if not self.expect_peek(TK_RPAREN) or not self.expect_peek(TK_LBRACE):
            self.synchronize()
            return None
        consequence = self.parse_block_statement()
        if consequence is None:
            return None
        alternative: BlockStatement | None = None
        if self.cur_token_is(TK_ELSE):
            if not self.expect_peek(TK_LBRACE):
                self.synchronize()
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None
        return IfStatement(pos, condition, consequence, alternative)

    def parse_for_statement(self) -> ForStatement | None:
        """ForStmt = 'for' '(' IDENT 'in' Expr ')' Block"""
        pos = self._pos()
        if not self.expect_peek(TK_LPAREN) or not self.expect_peek(TK_IDENT):
            self.synchronize()
            return None
        var = self.cur_token.value
        if not self.expect_peek(TK_IN):
            self.synchronize()
            return None
        self.next_token()
        iterable = self.parse_expression()
        if iterable is None:
            self.synchronize()
            return None
        if not self.expect_peek(TK_RPAREN) or not self.expect_peek(TK_LBRACE):
            self.synchronize()
            return None
        body = self.parse_block_statement()
        if body is None:
            return None
        return ForStatement(pos, var, iterable, body)

    def parse_return_statement(self) -> ReturnStatement | None:
        """ReturnStmt = 'return' Expr? ';'"""
        pos = self._pos()
        self.next_token()
        if self.cur_token_is(TK_SEMICOLON):
            self.next_token()
            return ReturnStatement(pos, None)
        value = self.parse_expression()
        if value is None:
            self.synchronize()
            return None
        if not self.expect_peek(TK_SEMICOLON):
            self.synchronize()
            return None
        self.next_token()
        return ReturnStatement(pos, value)

    def parse_function_declaration(self) -> FunctionDeclaration | None:
        """FnDecl = 'fn' IDENT '(' Params? ')' Block"""
        pos = self._pos()
        if not self.expect_peek(TK_IDENT):
            self.synchronize()
            return None
        name = self.cur_token.value
        if not self.expect_peek(TK_LPAREN):
            self.synchronize()
            return None
        params = self.parse_parameter_list()
        if not self.expect_peek(TK_RPAREN) or not self.expect_peek(TK_LBRACE):
            self.synchronize()
            return None
        body = self.parse_block_statement()
        if body is None:
            return None
        return FunctionDeclaration(pos, name, params, body)

    def parse_parameter_list(self) -> list[str]:
        """Params = IDENT ( ',' IDENT )*"""
        params: list[str] = []
        if self.peek_token_is(TK_RPAREN):
            return params
        if not self.expect_peek(TK_IDENT):
            return params
        params.append(self.cur_token.value)
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            if not self.expect_peek(TK_IDENT):
                return params
            params.append(self.cur_token.value)
        return params

    def parse_block_statement(self) -> BlockStatement | None:
        """Block = '{' Stmt* '}' — entered with '{' as the current token."""
        pos = self._pos()
        self.next_token()
        statements: list[Statement] = []
        while not self.cur_token_is(TK_RBRACE) and not self.cur_token_is(TK_EOF):
            if self.at_error_limit():
                break
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
        if not self.cur_token_is(TK_RBRACE):
            self.cur_error("expected }, got " + self.cur_token.type)
            return None
        self.next_token()
        return BlockStatement(pos, statements)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        """ExprStmt = Expr ';'"""
        pos = self._pos()
        expr = self.parse_expression()
        if expr is None:
            self.synchronize()
            return None
        if not self.expect_peek(TK_SEMICOLON):
            self.synchronize()
            return None
        self.next_token()
        return ExpressionStatement(pos, expr)

    # ── Expressions ──────────────────────────────────────────
    #
    # Each expression method starts on the first token of its production
    # and leaves the current token on the last token it consumed.

    def parse_expression(self) -> Expression | None:
        if not self._enter("expression"):
            return None
        try:
            return self.parse_or()
        finally:
            self.depth -= 1

    def _parse_binary(self, ops: set[str], operand) -> Expression | None:
        left = operand()
        if left is None:
            return None
        while self.peek_token.type in ops:
            self.next_token()
            op = self.cur_token.value
            self.next_token()
            right = operand()
            if right is None:
                return None
            left = InfixExpression(left.pos, left, op, right)
        return left

    def parse_or(self) -> Expression | None:
        """Or = And ( '||' And )*"""
        return self._parse_binary({TK_OR}, self.parse_and)

    def parse_and(self) -> Expression | None:
        """And = Equality ( '&&' Equality )*"""
        return self._parse_binary({TK_AND}, self.parse_equality)

    def parse_equality(self) -> Expression | None:
        """Equality = Comparison ( ( '==' | '!=' ) Comparison )*"""
        return self._parse_binary(EQUALITY_OPS, self.parse_comparison)

    def parse_comparison(self) -> Expression | None:
        """Comparison = Term ( ( '<' | '>' | '<=' | '>=' ) Term )*"""
        return self._parse_binary(COMPARE_OPS, self.parse_term)

    def parse_term(self) -> Expression | None:
        """Term = Factor ( ( '+' | '-' ) Factor )*"""
        return self._parse_binary(TERM_OPS, self.parse_factor)

    def parse_factor(self) -> Expression | None:
        """Factor = Unary ( ( '*' | '/' ) Unary )*"""
        return self._parse_binary(FACTOR_OPS, self.parse_unary)

    def parse_unary(self) -> Expression | None:
        """Unary = ( '!' | '-' ) Unary | Postfix"""
        if self.cur_token_is(TK_BANG) or self.cur_token_is(TK_MINUS):
            if not self._enter("expression"):
                return None
            try:
                pos = self._pos()
                op = self.cur_token.value
                self.next_token()
                right = self.parse_unary()
                if right is None:
                    return None
                return PrefixExpression(pos, op, right)
            finally:
                self.depth -= 1
        return self.parse_postfix()

    def parse_postfix(self) -> Expression | None:
        """Postfix = Primary ( Call | Index | Member | Pipe )*"""
        left = self.parse_primary()
        while left is not None:
            if self.peek_token_is(TK_LPAREN):
                self.next_token()
                left = self.parse_call_expression(left)
            elif self.peek_token_is(TK_LBRACKET):
                self.next_token()
                left = self.parse_index_expression(left)
            elif self.peek_token_is(TK_DOT):
                self.next_token()
                left = self.parse_member_expression(left)
            elif self.peek_token_is(TK_PIPE):
                self.next_token()
                left = self.parse_pipe_expression(left)
            else:
                return left
        return None

    def parse_call_expression(self, function: Expression) -> CallExpression | None:
        """Call = '(' ( Arg ( ',' Arg )* )? ')'"""
        args = self.parse_argument_list()
        if args is None:
            return None
        if not self.expect_peek(TK_RPAREN):
            return None
        return CallExpression(function.pos, function, args)

    def parse_argument_list(self) -> list[Argument] | None:
        """Returns None once an argument fails; that error is already recorded."""
        args: list[Argument] = []
        if self.peek_token_is(TK_RPAREN):
            return args
        self.next_token()
        arg = self.parse_argument()
        if arg is None:
            return None
        args.append(arg)
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_argument()
            if arg is None:
                return None
            args.append(arg)
        return args

    def parse_argument(self) -> Argument | None:
        """Arg = IDENT ':' Expr | Expr"""
        pos = self._pos()
        name: str | None = None
        if self.cur_token_is(TK_IDENT) and self.peek_token_is(TK_COLON):
            name = self.cur_token.value
            self.next_token()
            self.next_token()
        value = self.parse_expression()
        if value is None:
            return None
        return Argument(pos, name, value)

    def parse_index_expression(self, left: Expression) -> IndexExpression | None:
        """Index = '[' Expr ']'"""
        self.next_token()
        index = self.parse_expression()
        if index is None:
            return None
        if not self.expect_peek(TK_RBRACKET):
            return None
        return IndexExpression(left.pos, left, index)

    def parse_member_expression(self, obj: Expression) -> MemberExpression | None:
        """Member = '.' IDENT"""
        if not self.expect_peek(TK_IDENT):
            return None
        return MemberExpression(obj.pos, obj, self.cur_token.value)

    def parse_pipe_expression(self, left: Expression) -> PipeExpression | None:
        """Pipe = '|' 'format' ( 'csv' | 'table' )"""
        if not self.expect_peek(TK_IDENT):
            return None
        if self.cur_token.value != "format":
            self.cur_error("expected 'format' after pipe, got " + _quote(self.cur_token.value))
            return None
        if not self.expect_peek(TK_IDENT):
            return None
        fmt = self.cur_token.value
        if fmt not in PIPE_FORMATS:
            self.cur_error("expected 'csv' or 'table', got " + _quote(fmt))
            return None
        return PipeExpression(left.pos, left, fmt)

    def parse_primary(self) -> Expression | None:
        """Primary = IDENT | INT | FLOAT | STRING | 'true' | 'false' | 'null'
        | '(' Expr ')' | List | Object"""
        tok = self.cur_token
        pos = self._pos()
        t = tok.type
        if t == TK_IDENT:
            return Identifier(pos, tok.value)
        if t == TK_INT:
            return self.parse_integer_literal()
        if t == TK_FLOAT:
            return self.parse_float_literal()
        if t == TK_STRING:
            return StringLiteral(pos, tok.value)
        if t == TK_TRUE:
            return BooleanLiteral(pos, True)
        if t == TK_FALSE:
            return BooleanLiteral(pos, False)
        if t == TK_NULL:
            return NullLiteral(pos)
        if t == TK_LPAREN:
            return self.parse_grouped_expression()
        if t == TK_LBRACKET:
            return self.parse_list_literal()
        if t == TK_LBRACE:
            return self.parse_object_literal()
        if t == TK_ILLEGAL and tok.value.startswith('"'):
            self.cur_error("unterminated string literal")
            return None
        if t == TK_ILLEGAL:
            self.cur_error("unexpected token ILLEGAL " + _quote(tok.value))
            return None
        self.cur_error("unexpected token " + t)
        return None

    def parse_integer_literal(self) -> IntegerLiteral | None:
        literal = self.cur_token.value
        value = int(literal)
        if value > INT64_MAX:
            self.cur_error("could not parse " + _quote(literal) + " as integer")
            return None
        return IntegerLiteral(self._pos(), value, literal)

    def parse_float_literal(self) -> FloatLiteral | None:
        literal = self.cur_token.value
        value = float(literal)
        if math.isinf(value):
            self.cur_error("could not parse " + _quote(literal) + " as float")
            return None
        return FloatLiteral(self._pos(), value, literal)

    def parse_grouped_expression(self) -> GroupedExpression | None:
        """Grouped = '(' Expr ')'"""
        pos = self._pos()
        self.next_token()
        inner = self.parse_expression()
        if inner is None:
            return None
        if not self.expect_peek(TK_RPAREN):
            return None
        return GroupedExpression(pos, inner)

    def parse_list_literal(self) -> ListLiteral | None:
        """List = '[' ( Expr ( ',' Expr )* )? ']'"""
        pos = self._pos()
        elements: list[Expression] = []
        if self.peek_token_is(TK_RBRACKET):
            self.next_token()
            return ListLiteral(pos, elements)
        self.next_token()
        elem = self.parse_expression()
        if elem is None:
            return None
        elements.append(elem)
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            self.next_token()
            elem = self.parse_expression()
            if elem is None:
                return None
            elements.append(elem)
        if not self.expect_peek(TK_RBRACKET):
            return None
        return ListLiteral(pos, elements)

    def parse_object_literal(self) -> ObjectLiteral | None:
        """Object = '{' ( Pair ( ',' Pair )* )? '}'"""
        pos = self._pos()
        pairs: list[ObjectPair] = []
        if self.peek_token_is(TK_RBRACE):
            self.next_token()
            return ObjectLiteral(pos, pairs)
        pair = self.parse_object_pair()
        if pair is None:
            return None
        pairs.append(pair)
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            pair = self.parse_object_pair()
            if pair is None:
                return None
            pairs.append(pair)
        if not self.expect_peek(TK_RBRACE):
            return None
        return ObjectLiteral(pos, pairs)

    def parse_object_pair(self) -> ObjectPair | None:
        """Pair = IDENT ':' Expr — entered one token before the key."""
        if not self.expect_peek(TK_IDENT):
            return None
        pos = self._pos()
        key = self.cur_token.value
        if not self.expect_peek(TK_COLON):
            return None
        self.next_token()
        value = self.parse_expression()
        if value is None:
            return None
        return ObjectPair(pos, key, value)

