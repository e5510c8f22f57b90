"""SQLAlchemy adapter package for longbox."""

from __future__ import annotations

from .mappings import (
    catalog_item_table,
    mapper_registry,
    resolution_policy_table,
    start_mappers,
)
from .repositories import SqlAlchemyCatalogItemRepository, SqlAlchemyPolicyRepository
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogItemRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyPolicyRepository",
    "StartupError",
    "catalog_item_table",
    "mapper_registry",
    "resolution_policy_table",
    "shutdown",
    "startup",
    "start_mappers",
]
