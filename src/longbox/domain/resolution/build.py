"""Canonical record assembly."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from longbox.domain.model import (
    ARRAY_FIELDS,
    SCALAR_FIELDS,
    CanonicalRecord,
    FieldState,
    completeness_of,
)

from .errors import UnknownFieldError
from .extract import DEFAULT_CANDIDATE_CONFIDENCE, extract_candidates, extract_source_values
from .merge import merge_array_field
from .overrides import FieldEvent, transition
from .policy import require_policy
from .resolve import resolve_field

if TYPE_CHECKING:
    from collections.abc import Iterable

    from longbox.domain.model import ArrayField, ResolvedField, SourceBundle

    from .policy import ResolutionPolicy

log = logging.getLogger(__name__)


def _pinned_value(previous: CanonicalRecord | None, field_name: str) -> ResolvedField | None:
    if previous is None:
        return None
    current = previous.get(field_name)
    if previous.state_of(field_name) is FieldState.USER_OVERRIDDEN or (
        current is not None and current.user_override
    ):
        return current
    return None


def build_canonical_metadata(
    bundle: SourceBundle,
    policy: ResolutionPolicy | None,
    *,
    previous: CanonicalRecord | None = None,
    recompute: Iterable[str] = (),
    built_at: datetime | None = None,
    as_of: datetime | None = None,
    default_confidence: float = DEFAULT_CANDIDATE_CONFIDENCE,
) -> CanonicalRecord:
    """Resolve every canonical field of ``bundle`` into a fresh record.

    Fields pinned by a user override in ``previous`` are carried over as-is
    unless listed in ``recompute``, which releases the pin and resolves the
    field like any other. Fields without a winner are left out of the record.
    """

    policy = require_policy(policy, operation="build_canonical_metadata")
    recompute_fields = set(recompute)
    for field_name in recompute_fields:
        if field_name not in SCALAR_FIELDS:
            raise UnknownFieldError(field_name, expected="scalar canonical field")

    fields: dict[str, ResolvedField] = {}
    states: dict[str, FieldState] = {}
    for field_name in SCALAR_FIELDS:
        pinned = _pinned_value(previous, field_name)
        if pinned is not None and field_name not in recompute_fields:
            fields[field_name] = pinned
            states[field_name] = FieldState.USER_OVERRIDDEN
            continue

        state = previous.state_of(field_name) if previous else FieldState.UNRESOLVED
        if state is FieldState.USER_OVERRIDDEN:
            state = transition(state, FieldEvent.OVERRIDE_CLEARED)

        candidates = extract_candidates(
            field_name, bundle, default_confidence=default_confidence
        )
        resolved = resolve_field(field_name, candidates, policy, as_of=as_of)
        if resolved is None:
            states[field_name] = transition(state, FieldEvent.UNRESOLVED)
            continue
        fields[field_name] = resolved
        states[field_name] = transition(state, FieldEvent.RESOLVED)

    arrays: dict[str, ArrayField] = {}
    for field_name in ARRAY_FIELDS:
        per_source = extract_source_values(
            field_name, bundle, default_confidence=default_confidence
        )
        merged = merge_array_field(field_name, per_source, policy)
        if merged is not None:
            arrays[field_name] = merged

    record = CanonicalRecord(
        fields=fields,
        arrays=arrays,
        states=states,
        completeness_score=completeness_of(fields, arrays),
        last_canonical_update=built_at or datetime.now(tz=UTC),
    )
    log.debug(
        "Built canonical record: %d/%d scalar fields, completeness %.2f",
        len(fields),
        len(SCALAR_FIELDS),
        record.completeness_score,
    )
    return record
