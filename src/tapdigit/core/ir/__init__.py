"""
tapdigit Intermediate Representation (IR) types.

The syntax tree produced by the expression parser. All node types are
re-exported from this package.
"""

from .expressions import (
    Assignment,
    BinaryExpr,
    BinaryOp,
    Expr,
    FuncCall,
    Grouping,
    Identifier,
    Literal,
    UnaryExpr,
    UnaryOp,
)

__all__ = [
    "Assignment",
    "BinaryExpr",
    "BinaryOp",
    "Expr",
    "FuncCall",
    "Grouping",
    "Identifier",
    "Literal",
    "UnaryExpr",
    "UnaryOp",
]
