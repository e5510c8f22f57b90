"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_unit_float, optional_env_var
from .errors import ConfigurationError, InvalidConfigurationError
from .logging import configure_logging
from .resolution import (
    DEFAULT_CANDIDATE_CONFIDENCE,
    DEFAULT_POLICY_NAME,
    ResolutionConfig,
    get_resolution_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_CANDIDATE_CONFIDENCE",
    "DEFAULT_POLICY_NAME",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "ResolutionConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_resolution_config",
    "get_storage_config",
    "optional_env_unit_float",
    "optional_env_var",
]
