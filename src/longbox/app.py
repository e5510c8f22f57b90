"""Application orchestration entry points.

Wires the SQLAlchemy adapter, the stored resolution policy and environment
configuration into the catalog services. The CLI is the main caller.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from longbox.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from longbox.config import get_resolution_config
from longbox.domain import catalog
from longbox.domain.ports import CatalogUnitOfWork
from longbox.domain.resolution import default_policy

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from longbox.config import ResolutionConfig
    from longbox.domain.model import (
        CanonicalRecord,
        CatalogItem,
        ItemPage,
        ItemQuery,
        SourceBundle,
        SourceDocument,
    )
    from longbox.domain.resolution import FieldConflict, OverrideOutcome, ResolutionPolicy

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


def active_policy(
    *,
    name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ResolutionPolicy:
    """Return the stored policy ``name``, or the default document if none is stored yet."""

    config = get_resolution_config()
    policy_name = name or config.policy_name
    policy = catalog.load_policy(
        policy_name, unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory)
    )
    if policy is None:
        log.info("No stored policy %r, using the default policy", policy_name)
        return default_policy()
    return policy


def store_policy(
    policy: ResolutionPolicy,
    *,
    name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> str:
    policy_name = name or get_resolution_config().policy_name
    catalog.save_policy(
        policy_name,
        policy,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )
    return policy_name


class _Context:
    """Resolved collaborators for one application call."""

    def __init__(
        self,
        *,
        policy_name: str | None,
        unit_of_work_factory: UnitOfWorkFactory | None,
    ) -> None:
        self.config: ResolutionConfig = get_resolution_config()
        self.unit_of_work_factory = _unit_of_work_factory(unit_of_work_factory)
        self.policy = active_policy(
            name=policy_name, unit_of_work_factory=self.unit_of_work_factory
        )


def import_comic(
    bundle: SourceBundle,
    *,
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> catalog.ImportResult:
    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    return catalog.import_item(
        bundle,
        policy=ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )


def attach_metadata(
    item_id: UUID,
    document: SourceDocument,
    *,
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> catalog.ImportResult:
    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    return catalog.attach_source_document(
        item_id,
        document,
        policy=ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )


def resolve_comics(
    item_ids: Iterable[UUID],
    *,
    recompute: Iterable[str] = (),
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[CatalogItem]:
    """Rebuild one item (honouring ``recompute``) or many items in bulk."""

    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    ids = list(item_ids)
    recompute = tuple(recompute)
    if len(ids) == 1:
        return [
            catalog.resolve_item(
                ids[0],
                policy=ctx.policy,
                unit_of_work_factory=ctx.unit_of_work_factory,
                recompute=recompute,
                default_confidence=ctx.config.default_confidence,
            )
        ]
    if recompute:
        raise ValueError("recompute can only be combined with a single item")
    return catalog.bulk_resolve_items(
        ids,
        policy=ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )


def preview_comic(
    item_id: UUID,
    *,
    policy: ResolutionPolicy | None = None,
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CanonicalRecord:
    """Preview the record for ``item_id`` under ``policy`` (defaults to the stored one)."""

    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    return catalog.preview_item(
        item_id,
        policy=policy or ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )


def comic_conflicts(
    item_id: UUID,
    field_names: Iterable[str] | None = None,
    *,
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[FieldConflict]:
    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    return catalog.analyze_item_conflicts(
        item_id,
        field_names,
        policy=ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )


def show_comic(
    item_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CatalogItem:
    return catalog.get_item(
        item_id, unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory)
    )


def list_comics(
    query: ItemQuery,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ItemPage:
    return catalog.list_items(
        query, unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory)
    )


def set_field_override(
    item_id: UUID,
    field_name: str,
    value: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OverrideOutcome:
    return catalog.set_item_override(
        item_id,
        field_name,
        value,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def clear_field_override(
    item_id: UUID,
    field_name: str,
    *,
    policy_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OverrideOutcome:
    ctx = _Context(policy_name=policy_name, unit_of_work_factory=unit_of_work_factory)
    return catalog.clear_item_override(
        item_id,
        field_name,
        policy=ctx.policy,
        unit_of_work_factory=ctx.unit_of_work_factory,
        default_confidence=ctx.config.default_confidence,
    )
