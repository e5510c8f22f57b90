from __future__ import annotations

from typing import TYPE_CHECKING
from datetime import timedelta
from uuid import uuid4

from sqlalchemy import select

from longbox.adapters.sqlalchemy import (
    SqlAlchemyCatalogItemRepository,
    SqlAlchemyPolicyRepository,
    catalog_item_table,
)
from longbox.domain.model import (
    CatalogItem,
    FieldState,
    ItemQuery,
    MetadataSource,
    ResolutionStrategy,
)
from longbox.domain.resolution import build_canonical_metadata, default_policy, set_override
from tests.helpers.catalog import (
    FETCHED_AT,
    comicinfo_document,
    make_bundle,
    make_document,
    make_policy,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def test_catalog_item_round_trip(sqlite_session: Session) -> None:
    bundle = make_bundle()
    record = build_canonical_metadata(bundle, make_policy(), built_at=FETCHED_AT)
    record = set_override(record, "title", "Custom Title", set_at=FETCHED_AT).record
    item = CatalogItem(sources=bundle, record=record)

    repo = SqlAlchemyCatalogItemRepository(sqlite_session)
    repo.add(item)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repo.get(item.id)

    assert loaded is not None
    assert loaded is not item
    assert loaded.sources == bundle
    assert loaded.record == record
    assert loaded.record.state_of("title") is FieldState.USER_OVERRIDDEN
    assert loaded.version == 1


def test_catalog_item_version_and_completeness_columns(sqlite_session: Session) -> None:
    repo = SqlAlchemyCatalogItemRepository(sqlite_session)
    item = CatalogItem(sources=make_bundle())
    repo.add(item)
    sqlite_session.commit()

    item.replace_record(build_canonical_metadata(item.sources, make_policy()))
    sqlite_session.commit()

    row = sqlite_session.execute(
        select(catalog_item_table.c.version, catalog_item_table.c.completeness_score)
    ).one()
    assert row.version == 2
    assert row.completeness_score == 1.0


def test_missing_catalog_item_returns_none(sqlite_session: Session) -> None:
    assert SqlAlchemyCatalogItemRepository(sqlite_session).get(uuid4()) is None


def test_policy_repository_saves_and_replaces(sqlite_session: Session) -> None:
    repo = SqlAlchemyPolicyRepository(sqlite_session)
    assert repo.get("default") is None

    repo.save("default", default_policy())
    repo.save("default", default_policy(strategy=ResolutionStrategy.PRIORITY))
    sqlite_session.commit()

    stored = repo.get("default")
    assert stored is not None
    assert stored.strategy is ResolutionStrategy.PRIORITY


def _store_catalog(session: Session) -> list[CatalogItem]:
    policy = make_policy()
    bundles = [
        make_bundle(),
        make_bundle(comicinfo_document()),
        make_bundle(make_document(MetadataSource.MANUAL, {"title": "Saga #1", "series": "Saga"})),
    ]
    items = [
        CatalogItem(
            sources=bundle,
            record=build_canonical_metadata(bundle, policy),
            created_at=FETCHED_AT + timedelta(days=offset),
        )
        for offset, bundle in enumerate(bundles)
    ]
    repo = SqlAlchemyCatalogItemRepository(session)
    for item in items:
        repo.add(item)
    session.commit()
    return items


def test_find_lists_newest_first_with_paging(sqlite_session: Session) -> None:
    full, comicinfo_only, saga = _store_catalog(sqlite_session)
    repo = SqlAlchemyCatalogItemRepository(sqlite_session)

    first = repo.find(ItemQuery(limit=2))
    second = repo.find(ItemQuery(limit=2, page=2))

    assert [item.id for item in first.items] == [saga.id, comicinfo_only.id]
    assert [item.id for item in second.items] == [full.id]
    assert first.total == second.total == 3
    assert first.has_next_page
    assert not second.has_next_page


def test_find_filters_on_canonical_text(sqlite_session: Session) -> None:
    full, comicinfo_only, _saga = _store_catalog(sqlite_session)
    repo = SqlAlchemyCatalogItemRepository(sqlite_session)

    by_title = repo.find(ItemQuery(search="COURT"))
    by_series = repo.find(ItemQuery(series="batman"))
    by_publisher = repo.find(ItemQuery(publisher="dc comics"))

    assert [item.id for item in by_title.items] == [full.id]
    assert {item.id for item in by_series.items} == {full.id, comicinfo_only.id}
    assert [item.id for item in by_publisher.items] == [full.id]


def test_find_filters_on_completeness(sqlite_session: Session) -> None:
    full, _comicinfo_only, _saga = _store_catalog(sqlite_session)
    repo = SqlAlchemyCatalogItemRepository(sqlite_session)

    page = repo.find(ItemQuery(min_completeness=1.0))

    assert [item.id for item in page.items] == [full.id]


def test_find_treats_wildcards_literally(sqlite_session: Session) -> None:
    _store_catalog(sqlite_session)

    page = SqlAlchemyCatalogItemRepository(sqlite_session).find(ItemQuery(search="%"))

    assert page.total == 0
    assert page.items == ()


def test_search_columns_follow_record_updates(sqlite_session: Session) -> None:
    full, _comicinfo_only, _saga = _store_catalog(sqlite_session)
    full.replace_record(set_override(full.record, "series", "Batman (2011)").record)
    sqlite_session.commit()

    series = sqlite_session.execute(
        select(catalog_item_table.c.series).where(catalog_item_table.c.id == full.id)
    ).scalar_one()
    assert series == "Batman (2011)"
