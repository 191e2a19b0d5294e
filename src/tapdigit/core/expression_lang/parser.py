"""
Recursive descent parser for the tapdigit expression language.

Grammar (precedence low to high, binary operators left-associative):
    expression     → assignment
    assignment     → IDENT "=" assignment | additive
    additive       → multiplicative (("+"|"-") multiplicative)*
    multiplicative → unary (("*"|"/") unary)*
    unary          → ("+"|"-") unary | primary
    primary        → NUMBER | IDENT call? | "(" assignment ")"
    call           → "(" arg_list? ")"
    arg_list       → expression ("," expression)*

The parser pulls tokens from a Tokenizer with one token of lookahead.
Grammar violations raise ParseError. When an Environment is supplied, unknown
names and arity mismatches are collected as warnings instead.

Recursion depth follows the nesting depth of the input, so it is bounded by
the interpreter recursion limit. Use ``limits.check_nesting`` to cap it first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tapdigit.core.errors import ParseError
from tapdigit.core.expression_lang.environment import Environment
from tapdigit.core.expression_lang.tokenizer import Token, Tokenizer, TokenKind
from tapdigit.core.ir.expressions import (
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

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseWarning:
    """A non-fatal diagnostic recorded while parsing."""

    message: str
    pos: int

    def __str__(self) -> str:
        return self.message


@dataclass
class ParseResult:
    """Top-level parse result: one expression, or None for empty input."""

    expression: Expr | None
    warnings: list[ParseWarning] = field(default_factory=list)


def _is_op(token: Token | None, value: str) -> bool:
    return token is not None and token.is_op(value)


class Parser:
    """Builds expression trees from source text.

    Wraps one Tokenizer, so an instance must not be shared between
    concurrent parses.
    """

    def __init__(self, environment: Environment | None = None) -> None:
        self.environment = environment
        self.tokenizer = Tokenizer()
        self.warnings: list[ParseWarning] = []
        self._last_end = 0
        self._assigned: set[str] = set()

    def parse(self, source: str) -> ParseResult:
        """Parse a complete expression.

        Raises:
            ParseError: If the input does not match the grammar.
            LexError: If tokenization fails.
        """
        self.warnings = []
        self._last_end = 0
        self._assigned = set()

        if not source.strip("\t \u00a0"):
            return ParseResult(expression=None)

        self.tokenizer.reset(source)
        expr = self.parse_expression()

        token = self._next()
        if token is not None:
            raise ParseError(f'Unexpected token "{token.value}"', token.start or 0)

        if self.warnings:
            logger.debug("Parsed %r with %d warning(s)", source, len(self.warnings))
        return ParseResult(expression=expr, warnings=list(self.warnings))

    # -- Token helpers --

    def _peek(self) -> Token | None:
        return self.tokenizer.peek()

    def _next(self) -> Token | None:
        token = self.tokenizer.next()
        if token is not None and token.end is not None:
            self._last_end = token.end
        return token

    def _warn(self, message: str, pos: int) -> None:
        self.warnings.append(ParseWarning(message=message, pos=pos))

    # -- Grammar rules --

    def parse_expression(self) -> Expr:
        """assignment"""
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        """IDENT '=' assignment | additive"""
        expr = self.parse_additive()
        if isinstance(expr, Identifier) and _is_op(self._peek(), "="):
            self._next()
            value = self.parse_assignment()
            self._assigned.add(expr.name)
            return Assignment(name=expr.name, value=value, pos=expr.pos)
        return expr

    def parse_additive(self) -> Expr:
        """multiplicative (('+' | '-') multiplicative)*"""
        left = self.parse_multiplicative()
        while _is_op(self._peek(), "+") or _is_op(self._peek(), "-"):
            token = self._next()
            assert token is not None
            right = self.parse_multiplicative()
            left = BinaryExpr(op=BinaryOp(token.value), left=left, right=right, pos=token.start)
        return left

    def parse_multiplicative(self) -> Expr:
        """unary (('*' | '/') unary)*"""
        left = self.parse_unary()
        while _is_op(self._peek(), "*") or _is_op(self._peek(), "/"):
            token = self._next()
            assert token is not None
            right = self.parse_unary()
            left = BinaryExpr(op=BinaryOp(token.value), left=left, right=right, pos=token.start)
        return left

    def parse_unary(self) -> Expr:
        """('+' | '-') unary | primary"""
        peeked = self._peek()
        if _is_op(peeked, "+") or _is_op(peeked, "-"):
            token = self._next()
            assert token is not None
            operand = self.parse_unary()
            return UnaryExpr(op=UnaryOp(token.value), operand=operand, pos=token.start)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        """NUMBER | IDENT call? | '(' assignment ')'"""
        # Consuming here (rather than peeking) lets lexical errors surface.
        token = self._next()
        if token is None:
            raise ParseError("Unexpected end of expression", self._last_end)
        pos = token.start or 0

        if token.kind == TokenKind.NUMBER:
            return Literal(text=token.value, pos=pos)

        if token.kind == TokenKind.IDENTIFIER:
            if _is_op(self._peek(), "("):
                return self._parse_func_call(token.value, pos)
            self._check_identifier(token.value, pos)
            return Identifier(name=token.value, pos=pos)

        if token.is_op("("):
            inner = self.parse_assignment()
            closing = self._next()
            if not _is_op(closing, ")"):
                raise ParseError('Expecting ")"', self._error_pos(closing))
            return Grouping(inner=inner, pos=pos)

        raise ParseError(f'Unknown token "{token.value}"', pos)

    def _parse_func_call(self, name: str, pos: int) -> FuncCall:
        """IDENT '(' arg_list? ')'"""
        token = self._next()
        if not _is_op(token, "("):
            raise ParseError(f'Expecting "(" in a function call "{name}"', self._error_pos(token))

        args: list[Expr] = []
        if not _is_op(self._peek(), ")"):
            args = self._parse_arg_list()

        token = self._next()
        if not _is_op(token, ")"):
            raise ParseError(f'Missing ")" in function "{name}"', self._error_pos(token))

        self._check_call(name, len(args), pos)
        return FuncCall(name=name, args=args, pos=pos)

    def _parse_arg_list(self) -> list[Expr]:
        """expression (',' expression)*"""
        args = [self.parse_expression()]
        while _is_op(self._peek(), ","):
            self._next()
            args.append(self.parse_expression())
        return args

    def _error_pos(self, token: Token | None) -> int:
        if token is None or token.start is None:
            return self._last_end
        return token.start

    # -- Environment diagnostics --

    def _check_call(self, name: str, arg_count: int, pos: int) -> None:
        if self.environment is None:
            return
        native = self.environment.functions.get(name)
        if native is None:
            self._warn(f'Unknown function "{name}()"', pos)
        elif native.arity != arg_count:
            self._warn(
                f"Function {name}() expects {native.arity} arg(s), found {arg_count}",
                pos,
            )

    def _check_identifier(self, name: str, pos: int) -> None:
        if self.environment is None:
            return
        # An identifier followed by "=" is an assignment target, not a read.
        if _is_op(self._peek(), "="):
            return
        if self.environment.is_known(name) or name in self._assigned:
            return
        self._warn(f'Unknown identifier "{name}"', pos)


def parse_expr(source: str, environment: Environment | None = None) -> ParseResult:
    """Parse an expression string into an AST.

    Args:
        source: Expression string (e.g., "x = 2 * (pi + 1)")
        environment: Optional environment used for name/arity warnings

    Returns:
        ParseResult holding the tree (or None for empty input) and warnings.

    Raises:
        ParseError: If the expression is invalid.
        LexError: If tokenization fails.
    """
    return Parser(environment).parse(source)
