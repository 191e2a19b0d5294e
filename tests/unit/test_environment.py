"""Tests for the evaluation environment and built-in library."""

from __future__ import annotations

import math

import pytest

from tapdigit.core.expression_lang.environment import (
    BUILTIN_FUNCTIONS,
    Environment,
    NativeFunction,
    default_environment,
    infer_arity,
)
from tapdigit.core.expression_lang.evaluator import Evaluator


class TestEnvironment:
    """Constants, variables, and functions are kept apart."""

    def test_constants_are_read_only(self) -> None:
        env = Environment(constants={"c": 1})
        with pytest.raises(TypeError):
            env.constants["c"] = 2  # type: ignore[index]

    def test_resolve_prefers_constants(self) -> None:
        env = Environment(constants={"a": 1}, variables={"a": 2})
        assert env.resolve("a") == 1

    def test_resolve_unknown(self) -> None:
        with pytest.raises(KeyError):
            Environment().resolve("nope")

    def test_assign_constant_rejected(self) -> None:
        env = Environment(constants={"a": 1})
        with pytest.raises(KeyError):
            env.assign("a", 5)
        assert env.variables == {}

    def test_is_known(self) -> None:
        env = Environment(constants={"a": 1}, variables={"b": 2})
        assert env.is_known("a")
        assert env.is_known("b")
        assert not env.is_known("c")

    def test_values_stored_as_float(self) -> None:
        env = Environment(constants={"a": 1}, variables={"b": 2})
        assert isinstance(env.resolve("a"), float)
        assert isinstance(env.resolve("b"), float)

    def test_function_forms(self) -> None:
        def two(a, b):
            return a + b

        env = Environment(
            functions={
                "native": NativeFunction(abs, 1),
                "pair": (max, 2),
                "inferred": two,
            }
        )
        assert env.functions["native"].arity == 1
        assert env.functions["pair"].arity == 2
        assert env.functions["inferred"].arity == 2

    def test_register_function(self) -> None:
        env = Environment()
        env.register_function("hypot", math.hypot, arity=2)
        env.register_function("inc", lambda x: x + 1)
        assert env.functions["hypot"].arity == 2
        assert env.functions["inc"].arity == 1
        assert Evaluator(env).evaluate("hypot(3, 4) + inc(1)") == 7

    def test_register_without_callable_needs_arity(self) -> None:
        with pytest.raises(TypeError):
            Environment().register_function("broken", None)


class TestInferArity:
    def test_defaults_not_counted(self) -> None:
        def f(a, b=2):
            return a

        assert infer_arity(f) == 1

    def test_variadic_rejected(self) -> None:
        def f(*args):
            return 0

        with pytest.raises(TypeError, match="variadic"):
            infer_arity(f)


class TestDefaultEnvironment:
    """Built-in constants and functions."""

    @pytest.fixture
    def evaluator(self) -> Evaluator:
        return Evaluator(default_environment())

    def test_constants(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("pi") == math.pi
        assert evaluator.evaluate("phi") == pytest.approx(1.6180339887498948)

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("abs(-2)", 2.0),
            ("sqrt(16)", 4.0),
            ("floor(2.7)", 2.0),
            ("ceil(2.1)", 3.0),
            ("ln(exp(2))", 2.0),
            ("sin(0)", 0.0),
            ("cos(0)", 1.0),
            ("atan(0)", 0.0),
        ],
    )
    def test_functions(self, evaluator: Evaluator, source: str, expected: float) -> None:
        assert evaluator.evaluate(source) == pytest.approx(expected)

    def test_random(self, evaluator: Evaluator) -> None:
        value = evaluator.evaluate("random()")
        assert value is not None
        assert 0 <= value < 1

    def test_domain_errors_are_nan(self, evaluator: Evaluator) -> None:
        assert math.isnan(evaluator.evaluate("sqrt(-1)"))
        assert math.isnan(evaluator.evaluate("acos(2)"))

    def test_ln_zero(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("ln(0)") == -math.inf

    def test_exp_overflow(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("exp(1000)") == math.inf

    def test_floor_of_infinity(self, evaluator: Evaluator) -> None:
        assert evaluator.evaluate("floor(1/0)") == math.inf

    def test_extra_constants_merged(self) -> None:
        env = default_environment(constants={"g": 9.81})
        assert env.is_constant("g")
        assert env.is_constant("pi")

    def test_builtins_not_shared_between_environments(self) -> None:
        first = default_environment()
        first.register_function("extra", lambda: 1.0)
        assert "extra" not in default_environment().functions
        assert "extra" not in BUILTIN_FUNCTIONS
