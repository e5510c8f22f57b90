"""SQLAlchemy mapping metadata for catalog items and resolution policies."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Float,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    event,
    orm,
)
from sqlalchemy.orm import column_property, configure_mappers

from longbox.domain.model import CanonicalRecord, CatalogItem, SourceBundle

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class JSONDocumentType(TypeDecorator[dict[str, Any]]):
    """Plain JSON object stored as text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, Any] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, sort_keys=True, default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, Any]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        return cast(dict[str, Any], loaded)


class SourceBundleType(TypeDecorator[SourceBundle]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: SourceBundle | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value.to_document(), default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> SourceBundle:
        _ = dialect
        if value is None:
            return SourceBundle()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return SourceBundle()
        return SourceBundle.from_document(cast(list[dict[str, Any]], loaded))


class CanonicalRecordType(TypeDecorator[CanonicalRecord]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: CanonicalRecord | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value.to_document(), default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> CanonicalRecord:
        _ = dialect
        if value is None:
            return CanonicalRecord()
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return CanonicalRecord()
        return CanonicalRecord.from_document(cast(dict[str, Any], loaded))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

catalog_item_table = Table(
    "catalog_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("sources", SourceBundleType(), nullable=False),
    Column("record", CanonicalRecordType(), nullable=False),
    # Denormalised from ``record`` for listing and filtering.
    Column("completeness_score", Float, nullable=False, default=0.0, index=True),
    Column("title", Text, nullable=True),
    Column("series", Text, nullable=True),
    Column("publisher", Text, nullable=True),
    Column("version", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

resolution_policy_table = Table(
    "resolution_policy",
    mapper_registry.metadata,
    Column("name", String(64), primary_key=True),
    Column("document", JSONDocumentType(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)


SEARCH_COLUMNS = ("title", "series", "publisher")


def _sync_denormalised(_mapper: object, _connection: object, target: CatalogItem) -> None:
    row = cast(Any, target)
    row._completeness_score = target.record.completeness_score  # noqa: SLF001
    for name in SEARCH_COLUMNS:
        setattr(row, f"_{name}", target.canonical_text(name))


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper = mapper_registry.map_imperatively(
        CatalogItem,
        catalog_item_table,
        properties={
            "_completeness_score": column_property(catalog_item_table.c.completeness_score),
            **{
                f"_{name}": column_property(catalog_item_table.c[name])
                for name in SEARCH_COLUMNS
            },
        },
        version_id_col=catalog_item_table.c.version,
    )
    event.listen(mapper, "before_insert", _sync_denormalised)
    event.listen(mapper, "before_update", _sync_denormalised)

    configure_mappers()
    return mapper_registry

