from __future__ import annotations

from datetime import timedelta

import pytest

from longbox.domain.model import CanonicalRecord, FieldState, MetadataSource
from longbox.domain.resolution import (
    FieldEvent,
    IllegalTransitionError,
    UnknownFieldError,
    build_canonical_metadata,
    clear_override,
    extract_candidates,
    set_override,
    transition,
)
from tests.helpers.catalog import FETCHED_AT, make_bundle, make_candidate, make_policy

SET_AT = FETCHED_AT + timedelta(days=2)


def test_set_override_pins_manual_candidate() -> None:
    outcome = set_override(CanonicalRecord(), "title", "Custom Title", set_at=SET_AT)

    assert outcome.resolved is not None
    assert outcome.resolved.source is MetadataSource.MANUAL
    assert outcome.resolved.confidence == 1.0
    assert outcome.resolved.user_override is True
    assert outcome.record.fields["title"] == outcome.resolved
    assert outcome.record.state_of("title") is FieldState.USER_OVERRIDDEN
    assert outcome.record.last_canonical_update == SET_AT
    assert outcome.record.has_user_modifications


def test_set_override_rejects_array_and_unknown_fields() -> None:
    with pytest.raises(UnknownFieldError):
        set_override(CanonicalRecord(), "creators", ["Someone"])
    with pytest.raises(UnknownFieldError):
        set_override(CanonicalRecord(), "colourist", "Someone")


def test_set_override_rejects_none() -> None:
    with pytest.raises(ValueError, match="clear the override"):
        set_override(CanonicalRecord(), "title", None)


def test_clear_override_re_resolves_remaining_candidates() -> None:
    policy = make_policy()
    bundle = make_bundle()
    record = build_canonical_metadata(bundle, policy)
    pinned = set_override(record, "title", "Custom Title", set_at=SET_AT).record
    remaining = [*extract_candidates("title", bundle), pinned.fields["title"]]

    outcome = clear_override(pinned, "title", remaining, policy, cleared_at=SET_AT)

    assert outcome.resolved is not None
    assert outcome.resolved.value == "Batman #1: Court of Owls"
    assert outcome.record.state_of("title") is FieldState.AUTO_RESOLVED
    assert not outcome.record.has_user_modifications


def test_clear_override_without_candidates_leaves_field_unresolved() -> None:
    pinned = set_override(CanonicalRecord(), "series", "Batman", set_at=SET_AT).record

    outcome = clear_override(pinned, "series", [], make_policy(), cleared_at=SET_AT)

    assert outcome.resolved is None
    assert "series" not in outcome.record.fields
    assert outcome.record.state_of("series") is FieldState.UNRESOLVED
    assert outcome.record.completeness_score == 0.0


def test_clear_override_ignores_low_confidence_candidates() -> None:
    pinned = set_override(CanonicalRecord(), "series", "Batman", set_at=SET_AT).record

    outcome = clear_override(
        pinned,
        "series",
        [make_candidate("Batman", confidence=0.2)],
        make_policy(min_confidence_threshold=0.5),
    )

    assert outcome.resolved is None


@pytest.mark.parametrize(
    ("state", "event", "expected"),
    [
        (FieldState.UNRESOLVED, FieldEvent.RESOLVED, FieldState.AUTO_RESOLVED),
        (FieldState.AUTO_RESOLVED, FieldEvent.RESOLVED, FieldState.AUTO_RESOLVED),
        (FieldState.AUTO_RESOLVED, FieldEvent.UNRESOLVED, FieldState.UNRESOLVED),
        (FieldState.UNRESOLVED, FieldEvent.OVERRIDE_SET, FieldState.USER_OVERRIDDEN),
        (FieldState.AUTO_RESOLVED, FieldEvent.OVERRIDE_SET, FieldState.USER_OVERRIDDEN),
        (FieldState.USER_OVERRIDDEN, FieldEvent.OVERRIDE_SET, FieldState.USER_OVERRIDDEN),
        (FieldState.USER_OVERRIDDEN, FieldEvent.OVERRIDE_CLEARED, FieldState.AUTO_RESOLVED),
    ],
)
def test_transition_table(state: FieldState, event: FieldEvent, expected: FieldState) -> None:
    assert transition(state, event) is expected


@pytest.mark.parametrize("event", [FieldEvent.RESOLVED, FieldEvent.UNRESOLVED])
def test_automatic_events_cannot_replace_override(event: FieldEvent) -> None:
    with pytest.raises(IllegalTransitionError):
        transition(FieldState.USER_OVERRIDDEN, event)
