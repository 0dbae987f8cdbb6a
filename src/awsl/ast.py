"""AWSL AST — node definitions produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# BASE
# ============================================================


@dataclass
class Node:
    """Base for all nodes. str(node) renders canonical AWSL source."""

    pos: Pos

    def __str__(self) -> str:
        from .emit import to_source

        return to_source(self)


@dataclass
class Statement(Node):
    """Base for statement nodes."""


@dataclass
class Expression(Node):
    """Base for expression nodes."""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Identifier(Expression):
    name: str


@dataclass
class IntegerLiteral(Expression):
    value: int
    literal: str


@dataclass
class FloatLiteral(Expression):
    value: float
    literal: str


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class BooleanLiteral(Expression):
    value: bool


@dataclass
class NullLiteral(Expression):
    pass


@dataclass
class PrefixExpression(Expression):
    """!x, -x. Position is the operator."""

    op: str
    right: Expression


@dataclass
class InfixExpression(Expression):
    """Binary operator. Position is the left operand."""

    left: Expression
    op: str
    right: Expression


@dataclass
class Argument(Node):
    """Call argument; name is None for positional arguments."""

    name: str | None
    value: Expression


@dataclass
class CallExpression(Expression):
    function: Expression
    arguments: list[Argument]


@dataclass
class IndexExpression(Expression):
    """left[index]."""

    left: Expression
    index: Expression


@dataclass
class MemberExpression(Expression):
    """obj.member."""

    obj: Expression
    member: str


@dataclass
class PipeExpression(Expression):
    """left | format csv, left | format table."""

    left: Expression
    fmt: str


@dataclass
class ListLiteral(Expression):
    elements: list[Expression]


@dataclass
class ObjectPair(Node):
    key: str
    value: Expression


@dataclass
class ObjectLiteral(Expression):
    """{key: value, ...} — pairs keep source order."""

    pairs: list[ObjectPair]


@dataclass
class GroupedExpression(Expression):
    """( expr ) — kept as a node so rendering can show the grouping."""

    inner: Expression


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class ExpressionStatement(Statement):
    expr: Expression


@dataclass
class AssignmentStatement(Statement):
    name: str
    value: Expression


@dataclass
class ContextStatement(Statement):
    """profile "name"; or region "name"; — kind is the keyword."""

    kind: str
    value: str


@dataclass
class BlockStatement(Statement):
    statements: list[Statement]


@dataclass
class IfStatement(Statement):
    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None


@dataclass
class ForStatement(Statement):
    var: str
    iterable: Expression
    body: BlockStatement


@dataclass
class ReturnStatement(Statement):
    value: Expression | None


@dataclass
class FunctionDeclaration(Statement):
    name: str
    params: list[str]
    body: BlockStatement


# ============================================================
# PROGRAM
# ============================================================


@dataclass
class Program:
    """Root node: top-level statements in source order."""

    statements: list[Statement]

    @property
    def pos(self) -> Pos:
        if self.statements:
            return self.statements[0].pos
        return Pos(1, 1)

    def __str__(self) -> str:
        from .emit import to_source

        return to_source(self)
