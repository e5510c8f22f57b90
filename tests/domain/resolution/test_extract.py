from __future__ import annotations

import logging

import pytest

from longbox.domain.model import MetadataSource
from longbox.domain.resolution import (
    LookupStatus,
    extract_candidates,
    extract_source_values,
    lookup_path,
)
from tests.helpers.catalog import (
    FETCHED_AT,
    comicinfo_document,
    comicvine_document,
    make_bundle,
    make_document,
    metron_document,
)


def test_lookup_path_follows_nested_keys() -> None:
    result = lookup_path({"volume": {"publisher": {"name": "DC"}}}, "volume.publisher.name")

    assert result.status is LookupStatus.FOUND
    assert result.value == "DC"


def test_lookup_path_indexes_into_lists() -> None:
    result = lookup_path({"credits": [{"name": "A"}, {"name": "B"}]}, "credits.1.name")

    assert result.found
    assert result.value == "B"


@pytest.mark.parametrize(
    ("document", "path"),
    [
        ({}, "name"),
        ({"name": None}, "name"),
        ({"volume": None}, "volume.name"),
        ({"credits": []}, "credits.0"),
    ],
)
def test_lookup_path_reports_missing_values(document: dict[str, object], path: str) -> None:
    assert lookup_path(document, path).status is LookupStatus.MISSING


@pytest.mark.parametrize(
    ("document", "path"),
    [
        ({"name": "Batman"}, "name.first"),
        ({"credits": [{"name": "A"}]}, "credits.name"),
        ({"name": "Batman"}, ""),
    ],
)
def test_lookup_path_reports_invalid_paths(document: dict[str, object], path: str) -> None:
    result = lookup_path(document, path)

    assert result.status is LookupStatus.INVALID_PATH
    assert result.reason


def test_extract_candidates_follows_mapping_order() -> None:
    candidates = extract_candidates("title", make_bundle())

    assert [candidate.source for candidate in candidates] == [
        MetadataSource.COMICVINE,
        MetadataSource.METRON,
        MetadataSource.COMICINFO_XML,
    ]
    assert candidates[0].value == "Batman #1: Court of Owls"


def test_extract_candidates_copies_envelope_provenance() -> None:
    bundle = make_bundle(comicvine_document(confidence=0.75))

    (candidate,) = extract_candidates("issueNumber", bundle)

    assert candidate.value == "1"
    assert candidate.confidence == 0.75
    assert candidate.source_id == "4000-12345"
    assert candidate.fetched_at == FETCHED_AT
    assert candidate.user_override is False


def test_extract_candidates_uses_default_confidence() -> None:
    bundle = make_bundle(metron_document())

    (candidate,) = extract_candidates("pageCount", bundle, default_confidence=0.6)

    assert candidate.confidence == 0.6
    assert candidate.value == 32


def test_extract_candidates_skips_sources_without_value() -> None:
    bundle = make_bundle(comicvine_document(), comicinfo_document())

    candidates = extract_candidates("pageCount", bundle)

    assert [candidate.source for candidate in candidates] == [MetadataSource.COMICINFO_XML]


def test_extract_candidates_unknown_field_yields_nothing() -> None:
    assert extract_candidates("colourist", make_bundle()) == []


def test_extract_candidates_logs_schema_mismatch(caplog: pytest.LogCaptureFixture) -> None:
    bundle = make_bundle(
        make_document(MetadataSource.COMICVINE, {"volumeInformation": "Batman"}),
    )

    with caplog.at_level(logging.WARNING, logger="longbox.domain.resolution.extract"):
        candidates = extract_candidates("series", bundle)

    assert candidates == []
    assert "volumeInformation.name" in caplog.text


def test_extract_source_values_concatenates_comicinfo_credit_tags() -> None:
    bundle = make_bundle(comicinfo_document())

    (entry,) = extract_source_values("creators", bundle)

    assert entry.source is MetadataSource.COMICINFO_XML
    assert entry.values == (
        {"name": "Scott Snyder", "role": "writer"},
        {"name": "Greg Capullo", "role": "penciller"},
    )


def test_extract_source_values_normalises_provider_credits() -> None:
    bundle = make_bundle(comicvine_document(), metron_document())

    by_source = {entry.source: entry.values for entry in extract_source_values("creators", bundle)}

    assert by_source[MetadataSource.COMICVINE][0] == {"name": "Scott Snyder", "role": "writer"}
    assert by_source[MetadataSource.METRON][1] == {"name": "FCO Plascencia", "role": "colorist"}


def test_extract_source_values_splits_comma_separated_names() -> None:
    bundle = make_bundle(comicinfo_document())

    (entry,) = extract_source_values("genres", bundle)

    assert entry.values == ("Superhero", "Crime")
