"""
Expression evaluator for the tapdigit expression language.

Walks a parsed syntax tree and computes a float against an Environment.
Pure evaluation apart from assignment, which writes into the environment's
variables. Does NOT use Python's eval().

Arithmetic follows IEEE-754 double semantics: division by zero yields an
infinity or NaN rather than an error.
"""

from __future__ import annotations

import logging
import math

from tapdigit.core.errors import EvalError
from tapdigit.core.expression_lang.environment import Environment
from tapdigit.core.expression_lang.parser import Parser
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


class Evaluator:
    """Parses and evaluates expressions against one shared environment.

    Variables assigned by one ``evaluate`` call stay visible to the next.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self.parser = Parser(environment)

    def evaluate(self, source: str) -> float | None:
        """Evaluate an expression string.

        Returns:
            The computed value, or None when the input holds no expression.

        Raises:
            LexError, ParseError: If the source is malformed.
            EvalError: If evaluation fails.
        """
        result = self.parser.parse(source)
        if result.expression is None:
            return None
        return interpret(result.expression, self.environment)


def evaluate(source: str, environment: Environment) -> float | None:
    """Parse and evaluate ``source`` against ``environment``."""
    return Evaluator(environment).evaluate(source)


def interpret(expr: Expr, env: Environment) -> float:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Grouping):
        return interpret(expr.inner, env)

    if isinstance(expr, Literal):
        return float(expr.text)

    if isinstance(expr, BinaryExpr):
        return _interpret_binary(expr, env)

    if isinstance(expr, UnaryExpr):
        return _interpret_unary(expr, env)

    if isinstance(expr, Identifier):
        return _interpret_identifier(expr, env)

    if isinstance(expr, Assignment):
        return _interpret_assignment(expr, env)

    if isinstance(expr, FuncCall):
        return _interpret_func_call(expr, env)

    raise EvalError(f"Unknown syntax node: {type(expr).__name__}")


def _divide(left: float, right: float) -> float:
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


def _interpret_binary(expr: BinaryExpr, env: Environment) -> float:
    left = interpret(expr.left, env)
    right = interpret(expr.right, env)

    if expr.op == BinaryOp.ADD:
        return left + right
    if expr.op == BinaryOp.SUB:
        return left - right
    if expr.op == BinaryOp.MUL:
        return left * right
    if expr.op == BinaryOp.DIV:
        return _divide(left, right)

    raise EvalError(f"Unknown operator {expr.op}", expr.pos)


def _interpret_unary(expr: UnaryExpr, env: Environment) -> float:
    val = interpret(expr.operand, env)
    if expr.op == UnaryOp.PLUS:
        return val
    if expr.op == UnaryOp.NEG:
        return -val
    raise EvalError(f"Unknown operator {expr.op}", expr.pos)


def _interpret_identifier(expr: Identifier, env: Environment) -> float:
    try:
        return env.resolve(expr.name)
    except KeyError:
        raise EvalError(f'Unknown identifier "{expr.name}"', expr.pos) from None


def _interpret_assignment(expr: Assignment, env: Environment) -> float:
    """Evaluate the right-hand side, then store it; nothing is written on failure."""
    if env.is_constant(expr.name):
        raise EvalError(f'Cannot assign to constant "{expr.name}"', expr.pos)
    value = interpret(expr.value, env)
    env.assign(expr.name, value)
    logger.debug("Assigned %s = %r", expr.name, value)
    return value


def _interpret_func_call(expr: FuncCall, env: Environment) -> float:
    native = env.functions.get(expr.name)
    if native is None:
        raise EvalError(f"Unknown function {expr.name}", expr.pos)

    args = [interpret(a, env) for a in expr.args]

    if not callable(native.func):
        raise EvalError(f'The function "{expr.name}" does not have a valid callback', expr.pos)
    if len(args) != native.arity:
        raise EvalError(
            f"Function {expr.name}() expects {native.arity} arg(s), found {len(args)}",
            expr.pos,
        )
    try:
        result = native.func(*args)
    except TypeError as e:
        raise EvalError(f"Function {expr.name}() could not be called: {e}", expr.pos) from e
    try:
        return float(result)
    except (TypeError, ValueError) as e:
        raise EvalError(
            f"Function {expr.name}() returned a non-numeric value {result!r}", expr.pos
        ) from e
