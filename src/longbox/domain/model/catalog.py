"""Catalog items: the persisted aggregate owning sources and the canonical record."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from .record import CanonicalRecord
from .sources import SourceBundle


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class CatalogItem:
    """One catalog item (a comic issue) as seen by the resolution engine.

    ``version`` is owned by the persistence adapter, which uses it to reject
    concurrent writes to the same item.
    """

    id: UUID = field(default_factory=uuid4)
    sources: SourceBundle = field(default_factory=SourceBundle)
    record: CanonicalRecord = field(default_factory=CanonicalRecord)
    version: int | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def replace_record(self, record: CanonicalRecord) -> None:
        self.record = record
        self.updated_at = _utcnow()

    def replace_sources(self, sources: SourceBundle) -> None:
        self.sources = sources
        self.updated_at = _utcnow()

    def canonical_text(self, field_name: str) -> str | None:
        """The canonical value of ``field_name`` as searchable text, if resolved."""

        resolved = self.record.get(field_name)
        if resolved is None or resolved.value is None:
            return None
        return str(resolved.value)


@dataclass(frozen=True, slots=True, kw_only=True)
class ItemQuery:
    """Filters and paging for listing catalog items, newest first.

    ``search`` matches the canonical title or series, ``series`` and
    ``publisher`` their own field; all three are case-insensitive substring
    matches. Pages are numbered from 1.
    """

    search: str | None = None
    series: str | None = None
    publisher: str | None = None
    min_completeness: float | None = None
    limit: int = 10
    page: int = 1

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be at least 1, got {self.limit}")
        if self.page < 1:
            raise ValueError(f"page must be at least 1, got {self.page}")
        if self.min_completeness is not None and not 0.0 <= self.min_completeness <= 1.0:
            raise ValueError(
                f"min_completeness must be between 0 and 1, got {self.min_completeness}"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True, kw_only=True)
class ItemPage:
    items: tuple[CatalogItem, ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1
