"""Tests for the expression evaluator.

Covers:
- Arithmetic and precedence, IEEE-754 edge cases
- Identifier resolution, assignment, persistence across calls
- Function calls and their runtime errors
"""

from __future__ import annotations

import math

import pytest

from tapdigit.core.errors import ErrorKind, EvalError, LexError, ParseError
from tapdigit.core.expression_lang.environment import Environment, NativeFunction
from tapdigit.core.expression_lang.evaluator import Evaluator, evaluate, interpret
from tapdigit.core.ir.expressions import BinaryExpr, BinaryOp, Grouping, Literal


@pytest.fixture
def evaluator(sample_environment: Environment) -> Evaluator:
    return Evaluator(sample_environment)


class TestArithmetic:
    """Operators follow precedence and IEEE-754 double semantics."""

    def test_precedence(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("1+2*3") == 7

    def test_grouping_overrides_precedence(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("(1+2)*3") == 9

    def test_left_associativity(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("10 - 4 - 3") == 3
        assert evaluator.evaluate("64 / 4 / 2") == 8

    def test_unary(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("-3") == -3
        assert evaluator.evaluate("+3") == 3
        assert evaluator.evaluate("--3") == 3
        assert evaluator.evaluate("2 * -3") == -6

    def test_literal_forms(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate(".5") == 0.5
        assert evaluator.evaluate("5.") == 5.0
        assert evaluator.evaluate("1.5e3") == 1500.0
        assert evaluator.evaluate("25e-2") == 0.25

    def test_result_is_float(self, evaluator: Evaluator) -> None:
        assert isinstance(evaluator.evaluate("2"), float)

    def test_division_by_zero_is_infinity(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("1/0") == math.inf
        assert evaluator.evaluate("-1/0") == -math.inf

    def test_division_by_negative_zero(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("1/-0") == -math.inf

    def test_zero_over_zero_is_nan(self, evaluator: Evaluator) -> None:
        assert math.isnan(evaluator.evaluate("0/0"))

    def test_overflow_is_infinity(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("1e308 * 10") == math.inf

    def test_empty_input(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("") is None
        assert evaluator.evaluate("   ") is None


class TestIdentifiers:
    """Constants resolve first, variables second."""

    def test_constant(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("pi") == math.pi
        assert evaluator.evaluate("k * 2") == 20

    def test_unknown_identifier(self, evaluator: Evaluator) -> None:
        with pytest.raises(EvalError, match='Unknown identifier "y"') as exc_info:
            evaluator.evaluate("1 + y")
        assert exc_info.value.pos == 4
        assert exc_info.value.kind == ErrorKind.EVAL


class TestAssignment:
    """Assignment writes variables that persist across evaluations."""

    def test_returns_value(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("x = 5") == 5

    def test_persists_between_calls(self, evaluator: Evaluator) -> None:
        evaluator.evaluate("x = 5")
        assert evaluator.evaluate("x + 1") == 6
        assert evaluator.environment.variables == {"x": 5.0}

    def test_reassignment(self, evaluator: Evaluator) -> None:
        evaluator.evaluate("x = 1")
        evaluator.evaluate("x = x + 1")
        assert evaluator.evaluate("x") == 2

    def test_chained(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("a = b = 4") == 4
        assert evaluator.environment.variables == {"a": 4.0, "b": 4.0}

    def test_inside_expression(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("(x = 3) * x") == 9

    def test_failing_rhs_writes_nothing(self, evaluator: Evaluator) -> None:
        with pytest.raises(EvalError):
            evaluator.evaluate("x = 1 + missing")
        assert "x" not in evaluator.environment.variables

    def test_constant_is_write_protected(self, evaluator: Evaluator) -> None:
        with pytest.raises(EvalError, match='Cannot assign to constant "pi"') as exc_info:
            evaluator.evaluate("1 + (pi = 3)")
        assert exc_info.value.pos == 5
        assert evaluator.evaluate("pi") == math.pi
        assert "pi" not in evaluator.environment.variables


class TestFunctionCalls:
    """Calls resolve against registered native functions."""

    def test_call(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("double(4) + add(1, 2)") == 11

    def test_zero_arity(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("seven()") == 7

    def test_arguments_evaluated_left_to_right(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("add(x = 1, x * 10)") == 11

    def test_result_coerced_to_float(self, evaluator: Evaluator) -> None:
        assert isinstance(evaluator.evaluate("seven()"), float)

    def test_unknown_function(self, evaluator: Evaluator) -> None:
        with pytest.raises(EvalError, match="Unknown function foo") as exc_info:
            evaluator.evaluate("foo(1)")
        assert exc_info.value.pos == 0

    def test_arity_mismatch_warns_then_raises(self, evaluator: Evaluator) -> None:
        with pytest.raises(EvalError, match="expects 2 arg\\(s\\), found 1"):
            evaluator.evaluate("add(1)")
        assert [w.message for w in evaluator.parser.warnings] == [
            "Function add() expects 2 arg(s), found 1"
        ]

    def test_registered_without_callback(self) -> None:
        env = Environment(functions={"broken": NativeFunction(func=None, arity=1)})
        with pytest.raises(EvalError, match="does not have a valid callback"):
            Evaluator(env).evaluate("broken(1)")

    def test_declared_arity_wrong_for_callable(self) -> None:
        env = Environment(functions={"one": NativeFunction(func=lambda: 1.0, arity=1)})
        with pytest.raises(EvalError, match="could not be called") as exc_info:
            Evaluator(env).evaluate("2 + one(1)")
        assert exc_info.value.pos == 4

    @pytest.mark.parametrize("returned", ["abc", None, [1.0]])
    def test_non_numeric_result(self, returned: object) -> None:
        env = Environment(functions={"odd": NativeFunction(func=lambda x: returned, arity=1)})
        with pytest.raises(EvalError, match="non-numeric value") as exc_info:
            Evaluator(env).evaluate("odd(1)")
        assert exc_info.value.pos == 0

    def test_numeric_string_result_is_coerced(self) -> None:
        env = Environment(functions={"text": NativeFunction(func=lambda: "2.5", arity=0)})
        assert Evaluator(env).evaluate("text()") == 2.5


class TestErrorKinds:
    """Each stage reports its own error kind."""

    def test_lex(self, evaluator: Evaluator) -> None:
        with pytest.raises(LexError):
            evaluator.evaluate("1 + ?")

    def test_parse(self, evaluator: Evaluator) -> None:
        with pytest.raises(ParseError):
            evaluator.evaluate("(1 + 2")


class TestInterpret:
    """Trees can be evaluated directly."""

    def test_hand_built_tree(self) -> None:
        # (1 + 2) * 3
        inner = BinaryExpr(op=BinaryOp.ADD, left=Literal(text="1"), right=Literal(text="2"))
        tree = BinaryExpr(op=BinaryOp.MUL, left=Grouping(inner=inner), right=Literal(text="3"))
        assert interpret(tree, Environment()) == 9

    def test_unknown_node(self) -> None:
        with pytest.raises(EvalError, match="Unknown syntax node"):
            interpret("1 + 2", Environment())  # type: ignore[arg-type]

    def test_module_level_evaluate(self) -> None:
        env = Environment()
        assert evaluate("x = 2", env) == 2
        assert evaluate("x * x", env) == 4
