"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select

from longbox.adapters.sources import policy_from_document, policy_to_document
from longbox.adapters.sqlalchemy.mappings import catalog_item_table, resolution_policy_table
from longbox.domain.model import CatalogItem, ItemPage

if TYPE_CHECKING:
    import uuid

    from sqlalchemy import Select
    from sqlalchemy.orm import Session

    from longbox.domain.model import ItemQuery
    from longbox.domain.resolution import ResolutionPolicy

log = logging.getLogger(__name__)


class SqlAlchemyCatalogItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, item: CatalogItem) -> None:
        self.session.add(item)

    def get(self, item_id: uuid.UUID) -> CatalogItem | None:
        return self.session.get(CatalogItem, item_id)

    def find(self, query: ItemQuery) -> ItemPage:
        table = catalog_item_table
        total = self.session.execute(
            self._filtered(select(func.count()).select_from(table), query)
        ).scalar_one()
        stmt = (
            self._filtered(select(CatalogItem), query)
            .order_by(table.c.created_at.desc(), table.c.id)
            .offset(query.offset)
            .limit(query.limit)
        )
        items = tuple(self.session.execute(stmt).scalars())
        return ItemPage(items=items, total=total, page=query.page, limit=query.limit)

    @staticmethod
    def _filtered(stmt: Select[Any], query: ItemQuery) -> Select[Any]:
        table = catalog_item_table
        if query.search:
            stmt = stmt.where(
                or_(
                    table.c.title.icontains(query.search, autoescape=True),
                    table.c.series.icontains(query.search, autoescape=True),
                )
            )
        if query.series:
            stmt = stmt.where(table.c.series.icontains(query.series, autoescape=True))
        if query.publisher:
            stmt = stmt.where(table.c.publisher.icontains(query.publisher, autoescape=True))
        if query.min_completeness is not None:
            stmt = stmt.where(table.c.completeness_score >= query.min_completeness)
        return stmt


class SqlAlchemyPolicyRepository:
    """Named policy documents, stored in their camelCase JSON form."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, name: str) -> ResolutionPolicy | None:
        stmt = select(resolution_policy_table.c.document).where(
            resolution_policy_table.c.name == name
        )
        document = self.session.execute(stmt).scalar_one_or_none()
        if document is None:
            return None
        return policy_from_document(document)

    def save(self, name: str, policy: ResolutionPolicy) -> None:
        values = {
            "document": policy_to_document(policy),
            "updated_at": datetime.now(tz=UTC),
        }
        exists_stmt = select(resolution_policy_table.c.name).where(
            resolution_policy_table.c.name == name
        )
        if self.session.execute(exists_stmt).scalar_one_or_none() is None:
            self.session.execute(resolution_policy_table.insert().values(name=name, **values))
        else:
            self.session.execute(
                resolution_policy_table.update()
                .where(resolution_policy_table.c.name == name)
                .values(**values)
            )
        log.debug("Stored resolution policy %r", name)
