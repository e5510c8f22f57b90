from __future__ import annotations

import pytest
from pydantic import ValidationError

from longbox.adapters.sources import (
    parse_source_bundle,
    parse_source_document,
    policy_from_document,
    policy_to_document,
)
from longbox.domain.model import MetadataSource, OverridePrecedence, ResolutionStrategy
from longbox.domain.resolution import default_policy


def test_parse_source_bundle_accepts_plain_list() -> None:
    bundle = parse_source_bundle(
        [
            {
                "source": "comicinfo_xml",
                "fetchedAt": "2024-05-01T12:00:00Z",
                "confidence": 0.7,
                "data": {"Title": "Batman #1"},
            },
            {"source": "manual", "fetchedAt": "2024-05-03T12:00:00Z", "data": {"title": "Bat"}},
        ]
    )

    assert bundle.sources == (MetadataSource.COMICINFO_XML, MetadataSource.MANUAL)
    comicinfo = bundle.get(MetadataSource.COMICINFO_XML)
    assert comicinfo is not None
    assert comicinfo.confidence == 0.7
    assert comicinfo.payload == {"Title": "Batman #1"}


def test_parse_source_document_requires_fetch_time() -> None:
    with pytest.raises(ValidationError):
        parse_source_document({"source": "metron", "data": {}})


def test_policy_document_translation() -> None:
    policy = policy_from_document(
        {
            "sourcePriorities": [
                {"source": "metron", "priority": 1, "fieldOverrides": {"genres": 2}},
                {"source": "comicvine", "priority": 2, "enabled": False},
            ],
            "conflictResolution": "confidence",
            "minConfidenceThreshold": 0.6,
            "preferRecent": False,
            "fieldPreferences": {"pageCount": "comicinfo_xml"},
            "autoMerge": {"enabled": True, "onImport": False, "onMetadataUpdate": True},
            "overridePrecedence": "most_recent",
        }
    )

    assert policy.strategy is ResolutionStrategy.CONFIDENCE
    assert policy.priority_for(MetadataSource.METRON, "genres") == 2
    assert not policy.is_source_enabled(MetadataSource.COMICVINE)
    assert policy.forced_source_for("pageCount") is MetadataSource.COMICINFO_XML
    assert not policy.auto_apply.applies_on_import
    assert policy.auto_apply.applies_on_update
    assert policy.override_precedence is OverridePrecedence.MOST_RECENT


def test_policy_round_trips_through_document() -> None:
    policy = default_policy(strategy=ResolutionStrategy.RECENCY)

    document = policy_to_document(policy)

    assert document["conflictResolution"] == "recency"
    assert document["autoMerge"] == {"enabled": True, "onImport": True, "onMetadataUpdate": True}
    assert policy_from_document(document) == policy
