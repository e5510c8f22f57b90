"""Ports for persisting catalog items and resolution policies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from longbox.domain.model import CatalogItem, ItemPage, ItemQuery
    from longbox.domain.resolution import ResolutionPolicy


@runtime_checkable
class CatalogItemRepository(Protocol):
    """Persistence contract for catalog items.

    Implementations serialise writes per item; a concurrent update of the
    same item surfaces as the adapter's own error and is not retried here.
    """

    def add(self, item: CatalogItem) -> None: ...

    def get(self, item_id: UUID) -> CatalogItem | None: ...

    def find(self, query: ItemQuery) -> ItemPage: ...


@runtime_checkable
class PolicyRepository(Protocol):
    """Named resolution policy documents."""

    def get(self, name: str) -> ResolutionPolicy | None: ...

    def save(self, name: str, policy: ResolutionPolicy) -> None: ...
