"""Shared pytest fixtures for tapdigit tests."""

import math

import pytest

from tapdigit.core.expression_lang.environment import Environment


@pytest.fixture
def sample_environment() -> Environment:
    """Return an environment with two constants and three small functions."""
    return Environment(
        constants={"pi": math.pi, "k": 10},
        functions={
            "double": (lambda x: x * 2, 1),
            "add": (lambda a, b: a + b, 2),
            "seven": (lambda: 7, 0),
        },
    )
