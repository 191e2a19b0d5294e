"""
tapdigit arithmetic expression language.

Tokenizer, parser, and evaluator for single arithmetic expressions
evaluated against an Environment of constants, variables, and functions.

Usage:
    from tapdigit.core.expression_lang import Evaluator, default_environment

    evaluator = Evaluator(default_environment())
    evaluator.evaluate("x = 2 * pi")
    evaluator.evaluate("x / 2")
    # result == 3.141592653589793
"""

from tapdigit.core.expression_lang.environment import (
    Environment,
    NativeFunction,
    default_environment,
)
from tapdigit.core.expression_lang.evaluator import Evaluator, evaluate, interpret
from tapdigit.core.expression_lang.limits import check_nesting, nesting_depth
from tapdigit.core.expression_lang.parser import ParseResult, ParseWarning, Parser, parse_expr
from tapdigit.core.expression_lang.tokenizer import Token, Tokenizer, TokenKind, tokenize

__all__ = [
    "Environment",
    "Evaluator",
    "NativeFunction",
    "ParseResult",
    "ParseWarning",
    "Parser",
    "Token",
    "TokenKind",
    "Tokenizer",
    "check_nesting",
    "default_environment",
    "evaluate",
    "interpret",
    "nesting_depth",
    "parse_expr",
    "tokenize",
]
