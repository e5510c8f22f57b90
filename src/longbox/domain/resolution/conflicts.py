"""Conflict analysis for curation and audit views."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from longbox.domain.model import SCALAR_FIELDS

from .extract import DEFAULT_CANDIDATE_CONFIDENCE, extract_candidates
from .policy import require_policy
from .resolve import resolve_field

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from longbox.domain.model import Candidate, CanonicalRecord, ResolvedField, SourceBundle

    from .policy import ResolutionPolicy

USER_OVERRIDE_REASON = "User override"
NO_VALID_CANDIDATES_REASON = "No valid candidates"


@dataclass(frozen=True, slots=True)
class FieldConflict:
    field: str
    candidates: tuple[Candidate, ...]
    resolved: ResolvedField | None
    resolution_reason: str

    def to_document(self) -> dict[str, object]:
        return {
            "field": self.field,
            "candidates": [candidate.to_document() for candidate in self.candidates],
            "resolved": self.resolved.to_document() if self.resolved else None,
            "resolutionReason": self.resolution_reason,
        }


def resolution_reason(
    field_name: str,
    resolved: ResolvedField | None,
    policy: ResolutionPolicy,
) -> str:
    if resolved is None:
        return NO_VALID_CANDIDATES_REASON
    if resolved.user_override:
        return USER_OVERRIDE_REASON

    priority = policy.priority_for(resolved.source, field_name)
    priority_label = "unranked" if math.isinf(priority) else str(int(priority))
    if policy.forced_source_for(field_name) is resolved.source:
        how = "field preference"
    else:
        how = policy.strategy.value
    return (
        f"Resolved using {resolved.source} (priority: {priority_label}, "
        f"confidence: {resolved.confidence:g}, strategy: {how})"
    )


def analyze_conflicts(
    field_names: Iterable[str] | None,
    bundle: SourceBundle,
    policy: ResolutionPolicy | None,
    *,
    record: CanonicalRecord | None = None,
    as_of: datetime | None = None,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> list[FieldConflict]:
    """Report every field that more than one source has an opinion on.

    Entries are emitted based on the raw candidate count, before confidence
    filtering, so a field whose second candidate falls below the threshold
    is still surfaced for review. A user override pinned in ``record`` is
    listed as one of the field's candidates.
    """

    policy = require_policy(policy, operation="analyze_conflicts")
    names = tuple(field_names) if field_names is not None else SCALAR_FIELDS

    conflicts: list[FieldConflict] = []
    for field_name in names:
        candidates = extract_candidates(
            field_name, bundle, default_confidence=default_confidence
        )
        pinned = record.get(field_name) if record is not None else None
        if pinned is not None and pinned.user_override:
            candidates.insert(0, pinned)
        if len(candidates) <= 1:
            continue
        resolved = resolve_field(field_name, candidates, policy, as_of=as_of)
        conflicts.append(
            FieldConflict(
                field=field_name,
                candidates=tuple(candidates),
                resolved=resolved,
                resolution_reason=resolution_reason(field_name, resolved, policy),
            )
        )
    return conflicts
