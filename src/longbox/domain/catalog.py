"""Application services for resolving and curating catalog items.

These functions are the entry points used by the transport layer and the
CLI. Each call receives the resolution policy explicitly and runs inside
one unit of work, so one call resolves one item at most once. Errors from
the persistence adapter (for example a concurrent write detected by the
item's version counter) propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from longbox.domain.model import CatalogItem
from longbox.domain.resolution import (
    DEFAULT_CANDIDATE_CONFIDENCE,
    analyze_conflicts,
    build_canonical_metadata,
    clear_override,
    extract_candidates,
    require_policy,
    set_override,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from longbox.domain.model import (
        CanonicalRecord,
        ItemPage,
        ItemQuery,
        SourceBundle,
        SourceDocument,
    )
    from longbox.domain.ports import CatalogUnitOfWork
    from longbox.domain.resolution import FieldConflict, OverrideOutcome, ResolutionPolicy

    type UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    """Raised when a catalog item id is unknown to the repository."""

    def __init__(self, item_id: UUID) -> None:
        super().__init__(f"Catalog item {item_id} not found")
        self.item_id = item_id


@dataclass(slots=True)
class ImportResult:
    """Outcome of an import or source update."""

    item: CatalogItem
    canonical_resolved: bool


def _load(uow: CatalogUnitOfWork, item_id: UUID) -> CatalogItem:
    item = uow.repositories.items.get(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def _rebuild(
    item: CatalogItem,
    policy: ResolutionPolicy,
    *,
    recompute: Iterable[str] = (),
    built_at: datetime | None = None,
    default_confidence: float,
) -> CanonicalRecord:
    return build_canonical_metadata(
        item.sources,
        policy,
        previous=item.record,
        recompute=recompute,
        built_at=built_at,
        default_confidence=default_confidence,
    )


def import_item(
    bundle: SourceBundle,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> ImportResult:
    """Store a newly imported item, resolving it when the policy auto-applies on import."""

    policy = require_policy(policy, operation="import_item")
    item = CatalogItem(sources=bundle)
    resolved = policy.auto_apply.applies_on_import
    if resolved:
        item.replace_record(
            _rebuild(item, policy, default_confidence=default_confidence)
        )

    with unit_of_work_factory() as uow:
        uow.repositories.items.add(item)
        uow.commit()

    log.info(
        "Imported item %s from %s (canonical resolved: %s)",
        item.id,
        ", ".join(bundle.sources) or "no sources",
        resolved,
    )
    return ImportResult(item=item, canonical_resolved=resolved)


def attach_source_document(
    item_id: UUID,
    document: SourceDocument,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> ImportResult:
    """Replace one source's document; rebuild when the policy auto-applies on update."""

    policy = require_policy(policy, operation="attach_source_document")
    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        item.replace_sources(item.sources.with_document(document))
        resolved = policy.auto_apply.applies_on_update
        if resolved:
            item.replace_record(
                _rebuild(item, policy, default_confidence=default_confidence)
            )
        uow.commit()

    log.info(
        "Attached %s metadata to item %s (canonical resolved: %s)",
        document.source,
        item_id,
        resolved,
    )
    return ImportResult(item=item, canonical_resolved=resolved)


def resolve_item(
    item_id: UUID,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    recompute: Iterable[str] = (),
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> CatalogItem:
    """Rebuild and store the canonical record on explicit request."""

    policy = require_policy(policy, operation="resolve_item")
    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        item.replace_record(
            _rebuild(item, policy, recompute=recompute, default_confidence=default_confidence)
        )
        uow.commit()
    log.info(
        "Resolved item %s (completeness %.2f)", item_id, item.record.completeness_score
    )
    return item


def bulk_resolve_items(
    item_ids: Iterable[UUID],
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> list[CatalogItem]:
    """Resolve each existing item in its own unit of work; unknown ids are skipped."""

    policy = require_policy(policy, operation="bulk_resolve_items")
    resolved: list[CatalogItem] = []
    for item_id in item_ids:
        try:
            resolved.append(
                resolve_item(
                    item_id,
                    policy=policy,
                    unit_of_work_factory=unit_of_work_factory,
                    default_confidence=default_confidence,
                )
            )
        except ItemNotFoundError:
            log.warning("Skipping unknown catalog item %s", item_id)
    return resolved


def preview_item(
    item_id: UUID,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> CanonicalRecord:
    """Build the record ``policy`` would produce without storing it."""

    policy = require_policy(policy, operation="preview_item")
    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        return _rebuild(item, policy, default_confidence=default_confidence)


def analyze_item_conflicts(
    item_id: UUID,
    field_names: Iterable[str] | None = None,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> list[FieldConflict]:
    policy = require_policy(policy, operation="analyze_item_conflicts")
    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        return analyze_conflicts(
            field_names,
            item.sources,
            policy,
            record=item.record,
            default_confidence=default_confidence,
        )


def set_item_override(
    item_id: UUID,
    field_name: str,
    value: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> OverrideOutcome:
    """Pin a field of a stored item to a user-supplied value."""

    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        outcome = set_override(item.record, field_name, value)
        item.replace_record(outcome.record)
        uow.commit()
    return outcome


def clear_item_override(
    item_id: UUID,
    field_name: str,
    *,
    policy: ResolutionPolicy | None,
    unit_of_work_factory: UnitOfWorkFactory,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> OverrideOutcome:
    """Release a pinned field and re-resolve it from the item's sources."""

    policy = require_policy(policy, operation="clear_item_override")
    with unit_of_work_factory() as uow:
        item = _load(uow, item_id)
        candidates = extract_candidates(
            field_name, item.sources, default_confidence=default_confidence
        )
        outcome = clear_override(item.record, field_name, candidates, policy)
        item.replace_record(outcome.record)
        uow.commit()
    return outcome


def get_item(item_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> CatalogItem:
    """Return the stored item as it is, without rebuilding its record."""

    with unit_of_work_factory() as uow:
        return _load(uow, item_id)


def list_items(query: ItemQuery, *, unit_of_work_factory: UnitOfWorkFactory) -> ItemPage:
    with unit_of_work_factory() as uow:
        page = uow.repositories.items.find(query)
    log.debug("Listed %d of %d items (page %d)", len(page.items), page.total, page.page)
    return page


def load_policy(name: str, *, unit_of_work_factory: UnitOfWorkFactory) -> ResolutionPolicy | None:
    with unit_of_work_factory() as uow:
        return uow.repositories.policies.get(name)


def save_policy(
    name: str,
    policy: ResolutionPolicy,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> None:
    with unit_of_work_factory() as uow:
        uow.repositories.policies.save(name, policy)
        uow.commit()
    log.info("Saved resolution policy %r (strategy %s)", name, policy.strategy)
