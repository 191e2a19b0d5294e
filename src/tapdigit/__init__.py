"""
tapdigit - arithmetic expression tokenizer, parser, and evaluator.

Turns text such as ``x = 2 * (pi + 1)`` into a number, keeping variables
between evaluations in a caller-owned environment.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import EvalError, ExpressionError, LexError, ParseError, TapDigitError
from .core.expression_lang import (
    Environment,
    Evaluator,
    Parser,
    Tokenizer,
    default_environment,
    evaluate,
    parse_expr,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "Environment",
    "Evaluator",
    "EvalError",
    "ExpressionError",
    "LexError",
    "ParseError",
    "Parser",
    "TapDigitError",
    "Tokenizer",
    "default_environment",
    "evaluate",
    "parse_expr",
]
