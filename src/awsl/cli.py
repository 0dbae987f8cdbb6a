"""AWSL CLI — run, lex, or pretty-print .awsl scripts."""

from __future__ import annotations

import os
import sys

from . import __version__, emit, parse
from .lexer import Lexer
from .runtime import run
from .tokens import TK_EOF, TK_ILLEGAL, TK_STRING, Token
from .values import VNull


USAGE: str = """\
awsl [OPTIONS] FILE

Run an AWSL script.

Options:
  --tokens        Print the token stream instead of running
  --ast           Print the parsed program instead of running
  --print-result  Print the value of the last statement
  --version, -v   Show version information
  --help, -h      Show this help message
"""


def format_token(tok: Token) -> str:
    """One token-dump line: LINE:COL<TAB>TYPE<TAB>LITERAL."""
    if tok.type == TK_STRING:
        literal = '"' + tok.value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    elif tok.type == TK_EOF:
        literal = "<eof>"
    elif tok.value == "":
        literal = "<empty>"
    else:
        literal = tok.value
    return str(tok.line) + ":" + str(tok.col) + "\t" + tok.type + "\t" + literal


def dump_tokens(source: str) -> int:
    lexer = Lexer(source)
    while True:
        tok = lexer.next_token()
        print(format_token(tok))
        if tok.type == TK_EOF:
            return 0
        if tok.type == TK_ILLEGAL:
            print(
                "awsl: illegal token "
                + repr(tok.value)
                + " at line "
                + str(tok.line)
                + ", column "
                + str(tok.col),
                file=sys.stderr,
            )
            return 1


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    mode = "run"
    print_result = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--version" or arg == "-v":
            print("awsl version " + __version__)
            return 0
        elif arg == "--tokens":
            mode = "tokens"
            i += 1
        elif arg == "--ast":
            mode = "ast"
            i += 1
        elif arg == "--print-result":
            print_result = True
            i += 1
        elif arg.startswith("-"):
            print("awsl: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("awsl: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("awsl: missing file argument", file=sys.stderr)
        return 2

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("awsl: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("awsl: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("awsl: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    if mode == "tokens":
        return dump_tokens(source)

    if mode == "ast":
        program, errors = parse(source)
        for err in errors:
            print("awsl: parse error: " + str(err), file=sys.stderr)
        if errors:
            return 1
        print(emit(program))
        return 0

    result = run(source, stdout=sys.stdout, env=dict(os.environ))
    for err in result.parse_errors:
        print("awsl: parse error: " + str(err), file=sys.stderr)
    if result.error is not None:
        print(
            "awsl: runtime error: line "
            + str(result.error.line)
            + ", column "
            + str(result.error.col)
            + ": "
            + result.error.message,
            file=sys.stderr,
        )
    elif print_result and result.value is not None and not isinstance(result.value, VNull):
        print(result.value.inspect())
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
