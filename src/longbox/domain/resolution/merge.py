"""Merging of set-valued fields across sources."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from longbox.domain.model import ArrayField, as_utc, clamp_confidence

from .policy import require_policy

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable
    from datetime import datetime

    from longbox.domain.model import MetadataSource

    from .policy import ResolutionPolicy

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceValues:
    """The list of values one source proposes for an array field."""

    source: MetadataSource
    values: tuple[object, ...]
    confidence: float
    fetched_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))
        object.__setattr__(self, "fetched_at", as_utc(self.fetched_at))


def dedupe_key(value: object) -> Hashable:
    """Text compares case-insensitively, composites structurally."""

    if isinstance(value, str):
        return ("text", value.casefold())
    return ("json", json.dumps(value, sort_keys=True, default=str))


def merge_array_field(
    field_name: str,
    per_source_values: Iterable[SourceValues],
    policy: ResolutionPolicy | None,
) -> ArrayField | None:
    """Union the sources' lists in priority order, keeping first occurrences.

    The merged list is attributed to the highest-priority contributing
    source as a whole; individual values do not keep their own provenance.
    """

    policy = require_policy(policy, operation="merge_array_field")
    ordered = sorted(
        per_source_values,
        key=lambda entry: policy.priority_for(entry.source, field_name),
    )

    merged: list[object] = []
    seen: set[Hashable] = set()
    contributors: list[SourceValues] = []
    for entry in ordered:
        contributed = False
        for value in entry.values:
            if value is None:
                continue
            key = dedupe_key(value)
            if key in seen:
                continue
            seen.add(key)
            merged.append(value)
            contributed = True
        if contributed:
            contributors.append(entry)

    if not merged:
        return None

    lead = contributors[0]
    log.debug(
        "%s merged %d values from %s",
        field_name,
        len(merged),
        ", ".join(entry.source for entry in contributors),
    )
    return ArrayField(
        values=tuple(merged),
        source=lead.source,
        confidence=lead.confidence,
        fetched_at=lead.fetched_at,
        contributors=tuple(entry.source for entry in contributors),
    )
