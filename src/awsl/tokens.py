"""AWSL token definitions — token kinds, keywords, and the Token record."""

from __future__ import annotations


# Special
TK_ILLEGAL = "ILLEGAL"
TK_EOF = "EOF"

# Identifiers and literals
TK_IDENT = "IDENT"
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_STRING = "STRING"

# Operators
TK_ASSIGN = "="
TK_PLUS = "+"
TK_MINUS = "-"
TK_BANG = "!"
TK_ASTERISK = "*"
TK_SLASH = "/"
TK_LT = "<"
TK_GT = ">"
TK_EQ = "=="
TK_NOT_EQ = "!="
TK_LTE = "<="
TK_GTE = ">="
TK_OR = "||"
TK_AND = "&&"

# Delimiters
TK_COMMA = ","
TK_SEMICOLON = ";"
TK_COLON = ":"
TK_DOT = "."
TK_PIPE = "|"
TK_LPAREN = "("
TK_RPAREN = ")"
TK_LBRACE = "{"
TK_RBRACE = "}"
TK_LBRACKET = "["
TK_RBRACKET = "]"

# Keywords
TK_FUNCTION = "FUNCTION"
TK_TRUE = "TRUE"
TK_FALSE = "FALSE"
TK_NULL = "NULL"
TK_IF = "IF"
TK_ELSE = "ELSE"
TK_FOR = "FOR"
TK_IN = "IN"
TK_RETURN = "RETURN"
TK_PROFILE = "PROFILE"
TK_REGION = "REGION"

KEYWORDS: dict[str, str] = {
    "fn": TK_FUNCTION,
    "true": TK_TRUE,
    "false": TK_FALSE,
    "null": TK_NULL,
    "if": TK_IF,
    "else": TK_ELSE,
    "for": TK_FOR,
    "in": TK_IN,
    "return": TK_RETURN,
    "profile": TK_PROFILE,
    "region": TK_REGION,
}

# Tokens that begin a statement; the parser resynchronizes on these
STATEMENT_STARTS: set[str] = {
    TK_FUNCTION,
    TK_IF,
    TK_FOR,
    TK_RETURN,
    TK_PROFILE,
    TK_REGION,
}


def lookup_ident(ident: str) -> str:
    """Return the keyword kind for ident, or TK_IDENT."""
    return KEYWORDS.get(ident, TK_IDENT)


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (
            self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )
