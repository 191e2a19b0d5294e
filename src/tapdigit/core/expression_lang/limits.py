"""
Nesting limits for untrusted expressions.

The parser and evaluator recurse once per level of nesting, so very deep
input (thousands of parentheses or prefix signs) can exhaust the Python call
stack. These helpers measure nesting from the flat token stream, without
recursion, so callers can reject such input before parsing it.
"""

from __future__ import annotations

from tapdigit.core.errors import ParseError
from tapdigit.core.expression_lang.tokenizer import Tokenizer, TokenKind

# A parenthesised level costs five parser frames and a nested call costs eight,
# so 80 levels stay inside the interpreter's default recursion limit of 1000.
DEFAULT_MAX_DEPTH = 80

# Tokens after which "+" or "-" is a prefix sign rather than a binary operator.
_PREFIX_CONTEXT = frozenset("(=,+-*/")


def nesting_depth(source: str) -> int:
    """Return the deepest nesting of parentheses plus prefix signs in ``source``.

    Raises:
        LexError: If the source cannot be tokenized.
    """
    depth = 0
    signs = 0
    deepest = 0
    opened: list[int] = []
    previous: str | None = None

    for token in Tokenizer(source):
        is_sign = token.kind == TokenKind.OPERATOR and token.value in ("+", "-")
        if is_sign and (previous is None or previous in _PREFIX_CONTEXT):
            signs += 1
        elif token.is_op("("):
            # Signs in front of a group stay on the stack for its whole body.
            opened.append(signs + 1)
            depth += signs + 1
            signs = 0
        elif token.is_op(")"):
            if opened:
                depth -= opened.pop()
            signs = 0
        else:
            signs = 0
        deepest = max(deepest, depth + signs)
        previous = token.value if token.kind == TokenKind.OPERATOR else token.kind.value

    return deepest


def check_nesting(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Raise ParseError if ``source`` nests deeper than ``max_depth``."""
    depth = nesting_depth(source)
    if depth > max_depth:
        raise ParseError(f"Expression nests {depth} levels deep (limit {max_depth})", 0)
