"""Where longbox keeps its SQLite catalog."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = optional_env_var("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = optional_env_var("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Catalog file location; ``LONGBOX_DATA_DIR`` replaces the platform default."""

    data_dir: Path
    database_filename: str = "longbox.db"

    def database_path(self) -> Path:
        """Return the catalog file path, creating its directory on first use."""

        directory = self.data_dir.expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("LONGBOX_DATA_DIR")
    return StorageConfig(
        data_dir=Path(configured) if configured else _platform_data_home() / "longbox"
    )


def get_database_config() -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise the SQLite file under the data directory."""

    return DatabaseConfig(
        uri=optional_env_var("DATABASE_URI") or get_storage_config().database_uri()
    )
