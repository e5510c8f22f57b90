"""Ports the domain expects collaborators to implement."""

from __future__ import annotations

from .persistence import CatalogItemRepository, PolicyRepository
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "CatalogItemRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "PolicyRepository",
    "RepositoryCollection",
    "UnitOfWork",
]
