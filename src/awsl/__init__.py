"""AWSL scripting language core — public API."""

from __future__ import annotations

from .ast import Program
from .emit import to_source
from .lexer import Lexer as Lexer, tokenize as tokenize
from .parse import MAX_ERRORS as MAX_ERRORS, ParseError as ParseError, Parser
from .runtime import RunResult as RunResult, evaluate as evaluate, run as run

__version__ = "0.1.0"


def parse(source: str) -> tuple[Program, list[ParseError]]:
    """Parse AWSL source. Returns the (possibly partial) program and its errors."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors


def emit(program: Program) -> str:
    """Render a Program as canonical AWSL source."""
    return to_source(program)
