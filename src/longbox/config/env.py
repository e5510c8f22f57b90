"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import InvalidConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_env_unit_float(name: str, default: float) -> float:
    """Read a float in [0, 1] from the environment, falling back to ``default``."""

    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(name, raw, "not a number") from exc
    if not 0.0 <= value <= 1.0:
        raise InvalidConfigurationError(name, raw, "must be between 0 and 1")
    return value
