"""AWSL emitter — renders AST nodes back into canonical AWSL text.

Operators are fully parenthesized, so the rendering of a parsed program
shows exactly how precedence and associativity were resolved.
"""

from __future__ import annotations

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
    Node,
    NullLiteral,
    ObjectLiteral,
    ObjectPair,
    PipeExpression,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)


def to_source(node: Node | Program) -> str:
    """Render a node (or a whole Program) as AWSL source text."""
    return _Emitter().emit(node)


class _Emitter:
    def emit(self, node: Node | Program) -> str:
        if isinstance(node, Program):
            return "".join(self.emit_stmt(s) for s in node.statements)
        if isinstance(node, Statement):
            return self.emit_stmt(node)
        if isinstance(node, Expression):
            return self.emit_expr(node)
        if isinstance(node, Argument):
            return self.emit_arg(node)
        if isinstance(node, ObjectPair):
            return node.key + ": " + self.emit_expr(node.value)
        raise ValueError("cannot emit " + type(node).__name__)

    # ── Statements ───────────────────────────────────────────

    def emit_stmt(self, stmt: Statement) -> str:
        if isinstance(stmt, ExpressionStatement):
            return self.emit_expr(stmt.expr)
        if isinstance(stmt, AssignmentStatement):
            return stmt.name + " = " + self.emit_expr(stmt.value) + ";"
        if isinstance(stmt, ContextStatement):
            return stmt.kind + ' "' + stmt.value + '";'
        if isinstance(stmt, BlockStatement):
            return self.emit_block(stmt)
        if isinstance(stmt, IfStatement):
            out = "if (" + self.emit_expr(stmt.condition) + ") "
            out += self.emit_block(stmt.consequence)
            if stmt.alternative is not None:
                out += " else " + self.emit_block(stmt.alternative)
            return out
        if isinstance(stmt, ForStatement):
            return (
                "for ("
                + stmt.var
                + " in "
                + self.emit_expr(stmt.iterable)
                + ") "
                + self.emit_block(stmt.body)
            )
        if isinstance(stmt, ReturnStatement):
            if stmt.value is None:
                return "return;"
            return "return " + self.emit_expr(stmt.value) + ";"
        if isinstance(stmt, FunctionDeclaration):
            return (
                "fn "
                + stmt.name
                + "("
                + ", ".join(stmt.params)
                + ") "
                + self.emit_block(stmt.body)
            )
        raise ValueError("cannot emit statement " + type(stmt).__name__)

    def emit_block(self, block: BlockStatement) -> str:
        return "{ " + "".join(self.emit_stmt(s) for s in block.statements) + " }"

    # ── Expressions ──────────────────────────────────────────

    def emit_expr(self, expr: Expression) -> str:
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, (IntegerLiteral, FloatLiteral)):
            return expr.literal
        if isinstance(expr, StringLiteral):
            return '"' + expr.value + '"'
        if isinstance(expr, BooleanLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, NullLiteral):
            return "null"
        if isinstance(expr, PrefixExpression):
            return "(" + expr.op + self.emit_expr(expr.right) + ")"
        if isinstance(expr, InfixExpression):
            return (
                "("
                + self.emit_expr(expr.left)
                + " "
                + expr.op
                + " "
                + self.emit_expr(expr.right)
                + ")"
            )
        if isinstance(expr, CallExpression):
            args = ", ".join(self.emit_arg(a) for a in expr.arguments)
            return self.emit_expr(expr.function) + "(" + args + ")"
        if isinstance(expr, IndexExpression):
            return "(" + self.emit_expr(expr.left) + "[" + self.emit_expr(expr.index) + "])"
        if isinstance(expr, MemberExpression):
            return "(" + self.emit_expr(expr.obj) + "." + expr.member + ")"
        if isinstance(expr, PipeExpression):
            return "(" + self.emit_expr(expr.left) + " | format " + expr.fmt + ")"
        if isinstance(expr, ListLiteral):
            return "[" + ", ".join(self.emit_expr(e) for e in expr.elements) + "]"
        if isinstance(expr, ObjectLiteral):
            pairs = ", ".join(p.key + ": " + self.emit_expr(p.value) for p in expr.pairs)
            return "{" + pairs + "}"
        if isinstance(expr, GroupedExpression):
            return "(" + self.emit_expr(expr.inner) + ")"
        raise ValueError("cannot emit expression " + type(expr).__name__)

    def emit_arg(self, arg: Argument) -> str:
        if arg.name is not None:
            return arg.name + ": " + self.emit_expr(arg.value)
        return self.emit_expr(arg.value)
