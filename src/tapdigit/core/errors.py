"""
Error types for tapdigit tokenizing, parsing, and evaluation.
"""

from __future__ import annotations

from enum import StrEnum


class TapDigitError(Exception):
    """Base exception for all tapdigit errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return self.message


class ErrorKind(StrEnum):
    """Stage of the pipeline that raised an expression error."""

    LEX = "lex"
    PARSE = "parse"
    EVAL = "eval"


class ExpressionError(TapDigitError):
    """
    Raised when an expression cannot be tokenized, parsed, or evaluated.

    Attributes:
        message: Human-readable description
        pos: Character offset into the original input
        kind: Pipeline stage that detected the problem
    """

    kind: ErrorKind = ErrorKind.EVAL

    def __init__(self, message: str, pos: int = 0, kind: ErrorKind | None = None) -> None:
        self.pos = pos
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    def _format_message(self) -> str:
        return f"{self.message} at character {self.pos}"


class LexError(ExpressionError):
    """
    Raised when the tokenizer meets malformed input.

    Examples:
    - Unrecognized character
    - Lone dot with no digits
    - Exponent marker without digits
    """

    kind = ErrorKind.LEX


class ParseError(ExpressionError):
    """
    Raised when the token stream does not match the grammar.

    Examples:
    - Unexpected end of input
    - Missing closing parenthesis
    - Trailing tokens after a complete expression
    """

    kind = ErrorKind.PARSE


class EvalError(ExpressionError):
    """
    Raised when a syntax tree cannot be evaluated.

    Examples:
    - Unknown identifier or function
    - Assignment to a constant
    - Wrong number of arguments in a call
    """

    kind = ErrorKind.EVAL


class ConfigError(TapDigitError):
    """Raised when a tapdigit.toml file holds invalid settings."""

    pass
