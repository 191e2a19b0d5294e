"""Core tapdigit functionality: syntax tree, expression language, configuration."""

from . import ir
from .errors import (
    ConfigError,
    ErrorKind,
    EvalError,
    ExpressionError,
    LexError,
    ParseError,
    TapDigitError,
)

__all__ = [
    "ConfigError",
    "ErrorKind",
    "EvalError",
    "ExpressionError",
    "LexError",
    "ParseError",
    "TapDigitError",
    "ir",
]
