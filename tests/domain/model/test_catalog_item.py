from __future__ import annotations

import pytest

from longbox.domain.model import CanonicalRecord, CatalogItem, ItemPage, ItemQuery
from tests.helpers.catalog import make_candidate


def test_canonical_text_reads_resolved_values() -> None:
    record = CanonicalRecord(
        fields={"title": make_candidate("Batman #1"), "pageCount": make_candidate(40)}
    )
    item = CatalogItem(record=record)

    assert item.canonical_text("title") == "Batman #1"
    assert item.canonical_text("pageCount") == "40"
    assert item.canonical_text("publisher") is None


@pytest.mark.parametrize(
    "changes",
    [{"limit": 0}, {"page": 0}, {"min_completeness": 1.5}, {"min_completeness": -0.1}],
)
def test_item_query_rejects_out_of_range_values(changes: dict[str, float]) -> None:
    with pytest.raises(ValueError, match="must be"):
        ItemQuery(**changes)  # type: ignore[arg-type]


def test_item_query_offset_follows_page() -> None:
    assert ItemQuery(limit=25, page=3).offset == 50


def test_empty_page_has_no_neighbours() -> None:
    page = ItemPage(items=(), total=0, page=1, limit=10)

    assert page.total_pages == 0
    assert not page.has_next_page
    assert not page.has_previous_page
