"""User overrides and the per-field resolution state machine.

States: ``UNRESOLVED`` (initial), ``AUTO_RESOLVED`` and ``USER_OVERRIDDEN``.
Any state moves to ``USER_OVERRIDDEN`` when an override is set. Only an
explicit clear leaves ``USER_OVERRIDDEN``; automatic resolution events on
a pinned field are rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from longbox.domain.model import (
    SCALAR_FIELDS,
    Candidate,
    FieldState,
    MetadataSource,
    completeness_of,
)

from .errors import IllegalTransitionError, UnknownFieldError
from .policy import require_policy
from .resolve import resolve_field

if TYPE_CHECKING:
    from collections.abc import Iterable

    from longbox.domain.model import CanonicalRecord, ResolvedField

    from .policy import ResolutionPolicy

log = logging.getLogger(__name__)

OVERRIDE_CONFIDENCE: Final[float] = 1.0


class FieldEvent(StrEnum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    OVERRIDE_SET = "override_set"
    OVERRIDE_CLEARED = "override_cleared"


_TRANSITIONS: Final[dict[tuple[FieldState, FieldEvent], FieldState]] = {
    (FieldState.UNRESOLVED, FieldEvent.RESOLVED): FieldState.AUTO_RESOLVED,
    (FieldState.UNRESOLVED, FieldEvent.UNRESOLVED): FieldState.UNRESOLVED,
    (FieldState.AUTO_RESOLVED, FieldEvent.RESOLVED): FieldState.AUTO_RESOLVED,
    (FieldState.AUTO_RESOLVED, FieldEvent.UNRESOLVED): FieldState.UNRESOLVED,
    (FieldState.UNRESOLVED, FieldEvent.OVERRIDE_SET): FieldState.USER_OVERRIDDEN,
    (FieldState.AUTO_RESOLVED, FieldEvent.OVERRIDE_SET): FieldState.USER_OVERRIDDEN,
    (FieldState.USER_OVERRIDDEN, FieldEvent.OVERRIDE_SET): FieldState.USER_OVERRIDDEN,
    (FieldState.USER_OVERRIDDEN, FieldEvent.OVERRIDE_CLEARED): FieldState.AUTO_RESOLVED,
    (FieldState.UNRESOLVED, FieldEvent.OVERRIDE_CLEARED): FieldState.UNRESOLVED,
    (FieldState.AUTO_RESOLVED, FieldEvent.OVERRIDE_CLEARED): FieldState.AUTO_RESOLVED,
}


def transition(state: FieldState, event: FieldEvent) -> FieldState:
    try:
        return _TRANSITIONS[state, event]
    except KeyError:
        raise IllegalTransitionError(
            f"Cannot apply {event} to a field in state {state}; clear the override first"
        ) from None


@dataclass(frozen=True, slots=True)
class OverrideOutcome:
    record: CanonicalRecord
    resolved: ResolvedField | None


def _require_scalar_field(field_name: str) -> None:
    if field_name not in SCALAR_FIELDS:
        raise UnknownFieldError(field_name, expected="scalar canonical field")


def _now() -> datetime:
    return datetime.now(tz=UTC)


def make_override(value: object, *, set_at: datetime | None = None) -> Candidate:
    """Build the pinned candidate for a user-supplied value."""

    if value is None:
        raise ValueError("Override value must not be None; clear the override instead")
    return Candidate(
        value=value,
        source=MetadataSource.MANUAL,
        confidence=OVERRIDE_CONFIDENCE,
        fetched_at=set_at or _now(),
        user_override=True,
    )


def with_field(
    record: CanonicalRecord,
    field_name: str,
    resolved: ResolvedField | None,
    state: FieldState,
    *,
    updated_at: datetime,
) -> CanonicalRecord:
    """Return ``record`` with one scalar field replaced (or removed when ``None``)."""

    fields = {name: value for name, value in record.fields.items() if name != field_name}
    if resolved is not None:
        fields[field_name] = resolved
    states = {**record.states, field_name: state}
    return replace(
        record,
        fields=fields,
        states=states,
        completeness_score=completeness_of(fields, record.arrays),
        last_canonical_update=updated_at,
    )


def set_override(
    record: CanonicalRecord,
    field_name: str,
    value: object,
    *,
    set_at: datetime | None = None,
) -> OverrideOutcome:
    """Pin ``field_name`` to ``value``, bypassing the resolver."""

    _require_scalar_field(field_name)
    candidate = make_override(value, set_at=set_at)
    state = transition(record.state_of(field_name), FieldEvent.OVERRIDE_SET)
    updated = with_field(record, field_name, candidate, state, updated_at=candidate.fetched_at)
    log.info("Override set for %s", field_name)
    return OverrideOutcome(record=updated, resolved=candidate)


def clear_override(
    record: CanonicalRecord,
    field_name: str,
    remaining_candidates: Iterable[Candidate],
    policy: ResolutionPolicy | None,
    *,
    cleared_at: datetime | None = None,
    as_of: datetime | None = None,
) -> OverrideOutcome:
    """Drop the override on ``field_name`` and re-resolve from the other candidates."""

    _require_scalar_field(field_name)
    policy = require_policy(policy, operation="clear_override")
    automatic = [candidate for candidate in remaining_candidates if not candidate.user_override]
    resolved = resolve_field(field_name, automatic, policy, as_of=as_of)

    state = transition(record.state_of(field_name), FieldEvent.OVERRIDE_CLEARED)
    state = transition(state, FieldEvent.RESOLVED if resolved is not None else FieldEvent.UNRESOLVED)
    updated = with_field(record, field_name, resolved, state, updated_at=cleared_at or _now())
    log.info(
        "Override cleared for %s; now %s",
        field_name,
        resolved.source if resolved is not None else "unresolved",
    )
    return OverrideOutcome(record=updated, resolved=resolved)
