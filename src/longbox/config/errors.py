"""Errors raised while loading Longbox configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a configuration value is present but unusable."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configuration value cannot be parsed or is out of range."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for {name}={value!r}: {reason}")
        self.name = name
        self.value = value
