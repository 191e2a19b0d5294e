"""
tapdigit.toml configuration.

Example:

    [environment]
    builtins = true

    [environment.constants]
    g = 9.81

    [environment.variables]
    x = 1

    [limits]
    max_depth = 80
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tapdigit.core.errors import ConfigError
from tapdigit.core.expression_lang.environment import Environment, default_environment
from tapdigit.core.expression_lang.limits import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "tapdigit.toml"
CONFIG_ENV_VAR = "TAPDIGIT_CONFIG"


@dataclass
class EnvironmentConfig:
    """Names available to expressions."""

    builtins: bool = True  # Register pi, phi, sqrt, sin, ...
    constants: dict[str, float] = field(default_factory=dict)
    variables: dict[str, float] = field(default_factory=dict)


@dataclass
class LimitsConfig:
    """Guards applied before parsing untrusted input."""

    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class CalcConfig:
    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)


def _table(data: dict[str, Any], section: str) -> dict[str, Any]:
    table = data.get(section, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{section}] must be a table, got {table!r}")
    return table


def _numbers(table: Any, section: str) -> dict[str, float]:
    if not isinstance(table, dict):
        raise ConfigError(f"[{section}] must be a table")
    numbers: dict[str, float] = {}
    for name, value in table.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"[{section}] {name} must be a number, got {value!r}")
        numbers[name] = float(value)
    return numbers


def load_config(path: Path | None) -> CalcConfig:
    """Load a config file, falling back to defaults when ``path`` is None or missing."""
    if path is None or not path.exists():
        return CalcConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e

    env_data = _table(data, "environment")
    limits_data = _table(data, "limits")

    builtins = env_data.get("builtins", True)
    if not isinstance(builtins, bool):
        raise ConfigError("[environment] builtins must be true or false")

    max_depth = limits_data.get("max_depth", DEFAULT_MAX_DEPTH)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ConfigError(f"[limits] max_depth must be a positive integer, got {max_depth!r}")

    config = CalcConfig(
        environment=EnvironmentConfig(
            builtins=builtins,
            constants=_numbers(env_data.get("constants", {}), "environment.constants"),
            variables=_numbers(env_data.get("variables", {}), "environment.variables"),
        ),
        limits=LimitsConfig(max_depth=max_depth),
    )
    logger.debug("Loaded config from %s", path)
    return config


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file: $TAPDIGIT_CONFIG, else tapdigit.toml in ``start``."""
    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)
    candidate = (start or Path.cwd()) / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def build_environment(config: CalcConfig) -> Environment:
    """Create a fresh Environment from the ``[environment]`` section."""
    env_config = config.environment
    if env_config.builtins:
        return default_environment(
            constants=env_config.constants,
            variables=env_config.variables,
        )
    return Environment(constants=env_config.constants, variables=env_config.variables)
