"""Run the bundled Alembic migrations against the catalog database."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config

from longbox.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH = Path(__file__).resolve().parent


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the schema to the newest revision.

    With ``engine`` the migrations share one of its connections, which keeps
    in-memory SQLite databases alive; otherwise Alembic connects to
    ``database_uri`` (or the configured database) itself. The ``alembic``
    command line reads the same script location from ``[tool.alembic]``.
    """

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
