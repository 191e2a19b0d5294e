"""
Evaluation environment for the tapdigit expression language.

An Environment holds three separate namespaces:

- constants: read-only numbers (pi, phi, ...)
- variables: numbers created or updated by assignment
- functions: native callables with a fixed arity

Identifiers resolve against constants first, then variables. The
environment is caller-owned and shared across evaluations, which is how
variables persist from one expression to the next. It performs no locking.

Usage:
    from tapdigit.core.expression_lang.environment import default_environment

    env = default_environment()
    env.register_function("hypot", math.hypot, arity=2)
"""

from __future__ import annotations

import functools
import inspect
import logging
import math
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeFunction:
    """A registered function and the number of arguments it accepts."""

    func: Callable[..., float] | None
    arity: int


def infer_arity(func: Callable[..., Any]) -> int:
    """Count the required positional parameters of ``func``.

    Raises:
        TypeError: If the callable has no inspectable signature or takes
            ``*args``.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise TypeError(f"Cannot infer arity of {func!r}; pass arity explicitly") from e

    arity = 0
    for param in sig.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            raise TypeError(f"Cannot infer arity of variadic {func!r}; pass arity explicitly")
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            if param.default is param.empty:
                arity += 1
    return arity


def _as_native(value: NativeFunction | tuple[Any, int] | Callable[..., float]) -> NativeFunction:
    if isinstance(value, NativeFunction):
        return value
    if isinstance(value, tuple):
        func, arity = value
        return NativeFunction(func=func, arity=arity)
    return NativeFunction(func=value, arity=infer_arity(value))


class Environment:
    """Constants, variables, and functions that expressions resolve against."""

    def __init__(
        self,
        constants: Mapping[str, float] | None = None,
        variables: Mapping[str, float] | None = None,
        functions: Mapping[str, NativeFunction | tuple[Any, int] | Callable[..., float]]
        | None = None,
    ) -> None:
        self._constants: dict[str, float] = {k: float(v) for k, v in (constants or {}).items()}
        self.variables: dict[str, float] = {k: float(v) for k, v in (variables or {}).items()}
        self.functions: dict[str, NativeFunction] = {}
        for name, value in (functions or {}).items():
            self.functions[name] = _as_native(value)

    @property
    def constants(self) -> Mapping[str, float]:
        """Read-only view of the constants."""
        return MappingProxyType(self._constants)

    def is_constant(self, name: str) -> bool:
        return name in self._constants

    def is_known(self, name: str) -> bool:
        """True if ``name`` resolves to a constant or variable."""
        return name in self._constants or name in self.variables

    def resolve(self, name: str) -> float:
        """Look up ``name``, constants first.

        Raises:
            KeyError: If the name is neither a constant nor a variable.
        """
        if name in self._constants:
            return self._constants[name]
        return self.variables[name]

    def assign(self, name: str, value: float) -> None:
        """Create or overwrite a variable.

        Raises:
            KeyError: If ``name`` is a constant.
        """
        if name in self._constants:
            raise KeyError(name)
        self.variables[name] = value

    def register_function(
        self,
        name: str,
        func: Callable[..., float] | None,
        arity: int | None = None,
    ) -> None:
        """Register a native function, inferring its arity when not given."""
        if arity is None:
            if func is None:
                raise TypeError(f"Function {name!r} needs an explicit arity")
            arity = infer_arity(func)
        self.functions[name] = NativeFunction(func=func, arity=arity)
        logger.debug("Registered function %s/%d", name, arity)

    def __repr__(self) -> str:
        return (
            f"Environment(constants={sorted(self._constants)}, "
            f"variables={sorted(self.variables)}, functions={sorted(self.functions)})"
        )


# ---------------------------------------------------------------------------
# Built-in library
# ---------------------------------------------------------------------------


def _ieee(func: Callable[..., float]) -> Callable[..., float]:
    """Map math domain errors to NaN and overflow to infinity."""

    @functools.wraps(func)
    def wrapper(*args: float) -> float:
        try:
            return func(*args)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    return wrapper


def _ceil(x: float) -> float:
    return float(math.ceil(x)) if math.isfinite(x) else x


def _floor(x: float) -> float:
    return float(math.floor(x)) if math.isfinite(x) else x


def _ln(x: float) -> float:
    if x == 0:
        return -math.inf
    return _ieee(math.log)(x)


BUILTIN_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "phi": (1 + math.sqrt(5)) / 2,
}

BUILTIN_FUNCTIONS: dict[str, NativeFunction] = {
    "abs": NativeFunction(abs, 1),
    "acos": NativeFunction(_ieee(math.acos), 1),
    "asin": NativeFunction(_ieee(math.asin), 1),
    "atan": NativeFunction(math.atan, 1),
    "ceil": NativeFunction(_ceil, 1),
    "cos": NativeFunction(_ieee(math.cos), 1),
    "exp": NativeFunction(_ieee(math.exp), 1),
    "ln": NativeFunction(_ln, 1),
    "sin": NativeFunction(_ieee(math.sin), 1),
    "sqrt": NativeFunction(_ieee(math.sqrt), 1),
    "tan": NativeFunction(_ieee(math.tan), 1),
    "floor": NativeFunction(_floor, 1),
    "random": NativeFunction(random.random, 0),
}


def default_environment(
    constants: Mapping[str, float] | None = None,
    variables: Mapping[str, float] | None = None,
) -> Environment:
    """Build an environment holding the built-in constants and functions.

    Extra ``constants`` are merged over the built-ins.
    """
    merged = dict(BUILTIN_CONSTANTS)
    merged.update(constants or {})
    return Environment(constants=merged, variables=variables, functions=BUILTIN_FUNCTIONS)
