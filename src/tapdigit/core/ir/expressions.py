"""
Expression syntax tree for tapdigit.

A closed set of immutable node types produced by the parser and consumed by
the evaluator:

- Literals: 42, 3.14, .5, 1e-3 (kept as source text)
- Identifiers: pi, x
- Unary: -x, +x
- Binary: a + b, a - b, a * b, a / b
- Assignment: x = 1 + 2
- Function calls: sqrt(2), max(a, b)
- Grouping: (a + b)

Every node records ``pos``, the offset of the token that introduced it.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary arithmetic operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class UnaryOp(StrEnum):
    """Unary sign operators."""

    PLUS = "+"
    NEG = "-"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A numeric literal, stored as its source text."""

    text: str = Field(description="Literal text as written")
    pos: int = Field(default=0, description="Source offset")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.text


class Identifier(BaseModel):
    """Reference to a constant or variable."""

    name: str
    pos: int = Field(default=0, description="Source offset")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr
    pos: int = Field(default=0, description="Offset of the operator")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.op.value}{self.operand}"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr
    pos: int = Field(default=0, description="Offset of the operator")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class Assignment(BaseModel):
    """
    Assignment of a value to a variable: name = value.

    Only a bare identifier may appear on the left-hand side.
    """

    name: str = Field(description="Target variable name")
    value: Expr = Field(description="Right-hand side")
    pos: int = Field(default=0, description="Offset of the target name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


class FuncCall(BaseModel):
    """Function call: name(arg1, arg2, ...)."""

    name: str = Field(description="Function name")
    args: list[Expr] = Field(default_factory=list, description="Arguments")
    pos: int = Field(default=0, description="Offset of the function name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.name}({args_str})"


class Grouping(BaseModel):
    """
    A parenthesized subexpression.

    Kept as its own node so the parsed precedence is never re-associated.
    """

    inner: Expr
    pos: int = Field(default=0, description="Offset of the opening parenthesis")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.inner})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = Literal | Identifier | UnaryExpr | BinaryExpr | Assignment | FuncCall | Grouping

# Rebuild models for recursive forward references
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()
Assignment.model_rebuild()
FuncCall.model_rebuild()
Grouping.model_rebuild()
