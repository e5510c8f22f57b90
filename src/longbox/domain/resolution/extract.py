"""Candidate extraction from per-source documents.

Lookups never raise. A path that simply has no value yields
``LookupStatus.MISSING``; a path that runs into a scalar where a container
was expected yields ``LookupStatus.INVALID_PATH`` so schema drift in a
provider document shows up in the logs instead of silently looking empty.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from longbox.domain.model import Candidate

from .mappings import array_mappings_for, scalar_mappings_for
from .merge import SourceValues

if TYPE_CHECKING:
    from longbox.domain.model import MetadataSource, SourceBundle, SourceDocument

    from .mappings import FieldMapping

log = logging.getLogger(__name__)

DEFAULT_CANDIDATE_CONFIDENCE = 0.9


class LookupStatus(StrEnum):
    FOUND = "found"
    MISSING = "missing"
    INVALID_PATH = "invalid_path"


@dataclass(frozen=True, slots=True)
class LookupResult:
    status: LookupStatus
    value: object = None
    reason: str | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


_MISSING = LookupResult(LookupStatus.MISSING)


def lookup_path(document: object, path: str) -> LookupResult:
    """Resolve a dot-separated ``path`` inside ``document``."""

    if not path:
        return LookupResult(LookupStatus.INVALID_PATH, reason="empty path")

    current = document
    for segment in path.split("."):
        if current is None:
            return _MISSING
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.isdigit():
                return LookupResult(
                    LookupStatus.INVALID_PATH,
                    reason=f"segment {segment!r} used as key into a list",
                )
            index = int(segment)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return LookupResult(
                LookupStatus.INVALID_PATH,
                reason=f"segment {segment!r} traverses a {type(current).__name__}",
            )

    if current is None:
        return _MISSING
    return LookupResult(LookupStatus.FOUND, value=current)


def extract_candidates(
    field_name: str,
    bundle: SourceBundle,
    *,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> list[Candidate]:
    """Return one candidate per mapped source that has a value for ``field_name``.

    Candidates come out in mapping-table order. Unknown fields and absent
    source documents produce no candidates.
    """

    candidates: list[Candidate] = []
    for mapping in scalar_mappings_for(field_name):
        document = bundle.get(mapping.source)
        if document is None:
            continue
        result = _lookup(document, mapping, field_name)
        if not result.found:
            continue
        candidates.append(_candidate_from(document, result.value, default_confidence))
    return candidates


def extract_source_values(
    field_name: str,
    bundle: SourceBundle,
    *,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> list[SourceValues]:
    """Collect per-source value lists for a set-valued field.

    Several mappings of the same source (ComicInfo keeps one tag per credit
    role) are concatenated into that source's list, in table order.
    """

    collected: dict[MetadataSource, list[object]] = {}
    documents: dict[MetadataSource, SourceDocument] = {}
    for mapping in array_mappings_for(field_name):
        document = bundle.get(mapping.source)
        if document is None:
            continue
        result = _lookup(document, mapping, field_name)
        if not result.found:
            continue
        values = mapping.convert(result.value) if mapping.convert else [result.value]
        if not values:
            continue
        collected.setdefault(mapping.source, []).extend(values)
        documents[mapping.source] = document

    return [
        SourceValues(
            source=source,
            values=tuple(values),
            confidence=_confidence_of(documents[source], default_confidence),
            fetched_at=documents[source].fetched_at,
        )
        for source, values in collected.items()
    ]


def _lookup(document: SourceDocument, mapping: FieldMapping, field_name: str) -> LookupResult:
    result = lookup_path(document.payload, mapping.path)
    if result.status is LookupStatus.INVALID_PATH:
        log.warning(
            "Invalid lookup path %r for %s in %s document: %s",
            mapping.path,
            field_name,
            mapping.source,
            result.reason,
        )
    return result


def _confidence_of(document: SourceDocument, default_confidence: float) -> float:
    return document.confidence if document.confidence is not None else default_confidence


def _candidate_from(
    document: SourceDocument,
    value: object,
    default_confidence: float,
) -> Candidate:
    return Candidate(
        value=value,
        source=document.source,
        source_id=document.source_id,
        confidence=_confidence_of(document, default_confidence),
        fetched_at=document.fetched_at,
        url=document.url,
    )
