"""AWSL lexer — pulls positioned tokens out of source text on demand."""

from __future__ import annotations

from .tokens import (
    TK_AND,
    TK_ASSIGN,
    TK_ASTERISK,
    TK_BANG,
    TK_COLON,
    TK_COMMA,
    TK_DOT,
    TK_EOF,
    TK_EQ,
    TK_FLOAT,
    TK_GT,
    TK_GTE,
    TK_ILLEGAL,
    TK_INT,
    TK_LBRACE,
    TK_LBRACKET,
    TK_LPAREN,
    TK_LT,
    TK_LTE,
    TK_MINUS,
    TK_NOT_EQ,
    TK_OR,
    TK_PIPE,
    TK_PLUS,
    TK_RBRACE,
    TK_RBRACKET,
    TK_RPAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STRING,
    Token,
    lookup_ident,
)

TWO_CHAR_OPS: dict[str, str] = {
    "==": TK_EQ,
    "!=": TK_NOT_EQ,
    "<=": TK_LTE,
    ">=": TK_GTE,
    "&&": TK_AND,
    "||": TK_OR,
}

SINGLE_CHAR_TOKENS: dict[str, str] = {
    "=": TK_ASSIGN,
    "+": TK_PLUS,
    "-": TK_MINUS,
    "!": TK_BANG,
    "*": TK_ASTERISK,
    "/": TK_SLASH,
    "<": TK_LT,
    ">": TK_GT,
    ",": TK_COMMA,
    ";": TK_SEMICOLON,
    ":": TK_COLON,
    ".": TK_DOT,
    "|": TK_PIPE,
    "(": TK_LPAREN,
    ")": TK_RPAREN,
    "{": TK_LBRACE,
    "}": TK_RBRACE,
    "[": TK_LBRACKET,
    "]": TK_RBRACKET,
}

WHITESPACE: set[str] = {" ", "\t", "\r", "\n"}


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Lexer:
    """Single-pass lexer with one character of lookahead.

    Line and column are 1-based. The empty string stands for end of input;
    once reached, next_token() keeps returning EOF at the same position.
    """

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0
        self.read_pos: int = 0
        self.ch: str = ""
        self.line: int = 1
        self.col: int = 0
        self._read_char()

    # ── Helpers ──────────────────────────────────────────────

    def _read_char(self) -> None:
        if self.ch == "\n":
            self.line += 1
            self.col = 0
        if self.read_pos >= len(self.source):
            self.ch = ""
        else:
            self.ch = self.source[self.read_pos]
        self.pos = self.read_pos
        self.read_pos += 1
        self.col += 1

    def _peek_char(self) -> str:
        if self.read_pos >= len(self.source):
            return ""
        return self.source[self.read_pos]

    def _skip_whitespace_and_comments(self) -> None:
        while True:
            if self.ch in WHITESPACE:
                self._read_char()
            elif self.ch == "/" and self._peek_char() == "/":
                while self.ch != "\n" and self.ch != "":
                    self._read_char()
            else:
                return

    # ── Tokens ───────────────────────────────────────────────

    def next_token(self) -> Token:
        self._skip_whitespace_and_comments()
        line = self.line
        col = self.col
        ch = self.ch
        if ch == "":
            return Token(TK_EOF, "", line, col)
        pair = ch + self._peek_char()
        if pair in TWO_CHAR_OPS:
            self._read_char()
            self._read_char()
            return Token(TWO_CHAR_OPS[pair], pair, line, col)
        if ch in SINGLE_CHAR_TOKENS:
            self._read_char()
            return Token(SINGLE_CHAR_TOKENS[ch], ch, line, col)
        if ch == '"':
            return self._read_string(line, col)
        if _is_alpha(ch):
            ident = self._read_identifier()
            return Token(lookup_ident(ident), ident, line, col)
        if _is_digit(ch):
            return self._read_number(line, col)
        self._read_char()
        return Token(TK_ILLEGAL, ch, line, col)

    def _read_identifier(self) -> str:
        start = self.pos
        while _is_alnum(self.ch):
            self._read_char()
        return self.source[start : self.pos]

    def _read_number(self, line: int, col: int) -> Token:
        start = self.pos
        while _is_digit(self.ch):
            self._read_char()
        if self.ch == "." and _is_digit(self._peek_char()):
            self._read_char()
            while _is_digit(self.ch):
                self._read_char()
            return Token(TK_FLOAT, self.source[start : self.pos], line, col)
        return Token(TK_INT, self.source[start : self.pos], line, col)

    def _read_string(self, line: int, col: int) -> Token:
        self._read_char()
        start = self.pos
        while self.ch != '"' and self.ch != "":
            self._read_char()
        if self.ch == "":
            # Unterminated: hand the parser an ILLEGAL token carrying the text
            return Token(TK_ILLEGAL, '"' + self.source[start:], line, col)
        value = self.source[start : self.pos]
        self._read_char()
        return Token(TK_STRING, value, line, col)


def tokenize(source: str) -> list[Token]:
    """Lex source into a token list ending with a single EOF token."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == TK_EOF:
            return tokens
