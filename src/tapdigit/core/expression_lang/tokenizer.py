"""
Tokenizer for the tapdigit expression language.

Scans an expression string lazily, one token per ``next()`` call. The token
stream (kind, lexeme, start, end) is also what syntax highlighters consume.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum

from tapdigit.core.errors import LexError


class TokenKind(StrEnum):
    """Token types for the expression language."""

    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"


class Token:
    """A single token from the expression tokenizer.

    ``start`` and ``end`` are inclusive offsets into the source. Tokens
    returned by lookahead have both set to ``None``.
    """

    __slots__ = ("kind", "value", "start", "end")

    def __init__(
        self,
        kind: TokenKind,
        value: str,
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        self.kind = kind
        self.value = value
        self.start = start
        self.end = end

    def is_op(self, value: str) -> bool:
        return self.kind == TokenKind.OPERATOR and self.value == value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (self.kind, self.value, self.start, self.end) == (
            other.kind,
            other.value,
            other.start,
            other.end,
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.start, self.end))

    def __repr__(self) -> str:
        if self.start is None:
            return f"Token({self.kind}, {self.value!r})"
        return f"Token({self.kind}, {self.value!r}, start={self.start}, end={self.end})"


OPERATORS = frozenset("+-*/()^%=;,")

_WHITESPACE = frozenset("\t \u00a0")


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_ident_start(c: str) -> bool:
    return c == "_" or ("a" <= c <= "z") or ("A" <= c <= "Z")


def _is_ident_part(c: str) -> bool:
    return _is_ident_start(c) or _is_digit(c)


class Tokenizer:
    """On-demand scanner over one expression string.

    Holds mutable cursor state; use one instance per concurrent parse.
    """

    def __init__(self, source: str = "") -> None:
        self.reset(source)

    def reset(self, source: str) -> None:
        """Discard prior state and start scanning ``source`` from offset 0."""
        self.source = source
        self.length = len(source)
        self.index = 0
        self.marker = 0

    def next(self) -> Token | None:
        """Return the next token and advance past it, or ``None`` at end of input."""
        self._skip_spaces()
        if self.index >= self.length:
            return None

        self.marker = self.index
        c = self.source[self.index]

        if _is_digit(c) or c == ".":
            return self._scan_number()
        if c in OPERATORS:
            self.index += 1
            return self._make_token(TokenKind.OPERATOR, c)
        if _is_ident_start(c):
            return self._scan_identifier()

        raise LexError(f"Unknown token from character {c!r}", self.marker)

    def peek(self) -> Token | None:
        """Return what ``next()`` would return without consuming it.

        The token comes back without position fields. A lexical error is
        reported as end of input and leaves the cursor untouched.
        """
        index, marker = self.index, self.marker
        try:
            token = self.next()
        except LexError:
            token = None
        finally:
            self.index, self.marker = index, marker

        if token is None:
            return None
        return Token(token.kind, token.value)

    def __iter__(self) -> Iterator[Token]:
        while (token := self.next()) is not None:
            yield token

    # -- Scanners --

    def _make_token(self, kind: TokenKind, value: str) -> Token:
        return Token(kind, value, self.marker, self.index - 1)

    def _current(self) -> str:
        if self.index < self.length:
            return self.source[self.index]
        return ""

    def _skip_spaces(self) -> None:
        while self.index < self.length and self.source[self.index] in _WHITESPACE:
            self.index += 1

    def _skip_digits(self) -> int:
        start = self.index
        while _is_digit(self._current()):
            self.index += 1
        return self.index - start

    def _scan_identifier(self) -> Token:
        self.index += 1
        while _is_ident_part(self._current()):
            self.index += 1
        return self._make_token(TokenKind.IDENTIFIER, self.source[self.marker : self.index])

    def _scan_number(self) -> Token:
        digits = self._skip_digits()
        if self._current() == ".":
            self.index += 1
            digits += self._skip_digits()

        if digits == 0:
            raise LexError("Expecting decimal digits after the dot sign", self.marker)

        if self._current() in ("e", "E"):
            self.index += 1
            c = self._current()
            if c in ("+", "-"):
                self.index += 1
                c = self._current()
            if not _is_digit(c):
                found = f"character {c!r}" if c else "<end>"
                raise LexError(f"Unexpected {found} after the exponent sign", self.marker)
            self._skip_digits()

        return self._make_token(TokenKind.NUMBER, self.source[self.marker : self.index])


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens."""
    return list(Tokenizer(source))
