"""Field resolution: pick one winning candidate per field.

Order of precedence, applied to candidates that carry a value and meet the
policy's confidence threshold:

1. user overrides (see ``OverridePrecedence`` for several at once)
2. the policy's forced source for the field, when that source has a candidate
3. the policy's strategy

Every strategy breaks ties by input order, so resolution is a pure function
of ``(candidates, policy, as_of)``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Final, Protocol

from longbox.domain.model import OverridePrecedence, ResolutionStrategy, as_utc

from .policy import require_policy

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from longbox.domain.model import Candidate, ResolvedField

    from .policy import ResolutionPolicy

log = logging.getLogger(__name__)

PRIORITY_WEIGHT: Final[float] = 0.6
CONFIDENCE_WEIGHT: Final[float] = 0.4
RECENCY_BONUS_WEIGHT: Final[float] = 0.1
RECENCY_HORIZON: Final[timedelta] = timedelta(days=365)


class Strategy(Protocol):
    """Pick a winner from a non-empty list of valid, non-override candidates."""

    def __call__(
        self,
        field_name: str,
        candidates: Sequence[Candidate],
        policy: ResolutionPolicy,
        *,
        as_of: datetime,
    ) -> Candidate: ...


def valid_candidates(
    candidates: Iterable[Candidate],
    policy: ResolutionPolicy,
) -> list[Candidate]:
    """Drop candidates without a value or below the confidence threshold."""

    return [
        candidate
        for candidate in candidates
        if candidate.value is not None
        and candidate.confidence >= policy.min_confidence_threshold
    ]


def resolve_field(
    field_name: str,
    candidates: Iterable[Candidate],
    policy: ResolutionPolicy | None,
    *,
    as_of: datetime | None = None,
) -> ResolvedField | None:
    """Select the canonical value for ``field_name``, or ``None`` if nothing qualifies.

    ``as_of`` anchors the hybrid strategy's recency bonus. When omitted the
    newest ``fetched_at`` among the valid candidates is used, so no wall
    clock leaks into the decision.
    """

    policy = require_policy(policy, operation="resolve_field")
    valid = valid_candidates(candidates, policy)
    if not valid:
        log.debug("No valid candidates for %s", field_name)
        return None

    override = _pick_override(valid, policy)
    if override is not None:
        log.debug("%s pinned by user override", field_name)
        return override

    forced_source = policy.forced_source_for(field_name)
    if forced_source is not None:
        for candidate in valid:
            if candidate.source is forced_source:
                log.debug("%s forced to source %s", field_name, forced_source)
                return candidate

    if as_of is not None:
        reference_time = as_utc(as_of)
    else:
        reference_time = max(candidate.fetched_at for candidate in valid)
    strategy = STRATEGIES[policy.strategy]
    winner = strategy(field_name, valid, policy, as_of=reference_time)
    log.debug(
        "%s resolved to %s (confidence %.2f) via %s among %d candidates",
        field_name,
        winner.source,
        winner.confidence,
        policy.strategy,
        len(valid),
    )
    return winner


def _pick_override(
    candidates: Sequence[Candidate],
    policy: ResolutionPolicy,
) -> Candidate | None:
    overrides = [candidate for candidate in candidates if candidate.user_override]
    if not overrides:
        return None
    if policy.override_precedence is OverridePrecedence.MOST_RECENT:
        # stable: equal timestamps keep input order
        return sorted(overrides, key=lambda candidate: candidate.fetched_at, reverse=True)[0]
    return overrides[0]


def resolve_by_priority(
    field_name: str,
    candidates: Sequence[Candidate],
    policy: ResolutionPolicy,
    *,
    as_of: datetime,
) -> Candidate:
    _ = as_of
    return sorted(
        candidates,
        key=lambda candidate: policy.priority_for(candidate.source, field_name),
    )[0]


def resolve_by_confidence(
    field_name: str,
    candidates: Sequence[Candidate],
    policy: ResolutionPolicy,
    *,
    as_of: datetime,
) -> Candidate:
    _ = field_name, as_of
    if policy.prefer_recent:
        return sorted(
            candidates,
            key=lambda candidate: (candidate.confidence, candidate.fetched_at),
            reverse=True,
        )[0]
    return sorted(candidates, key=lambda candidate: candidate.confidence, reverse=True)[0]


def resolve_by_recency(
    field_name: str,
    candidates: Sequence[Candidate],
    policy: ResolutionPolicy,
    *,
    as_of: datetime,
) -> Candidate:
    _ = field_name, policy, as_of
    return sorted(candidates, key=lambda candidate: candidate.fetched_at, reverse=True)[0]


def hybrid_score(
    candidate: Candidate,
    field_name: str,
    policy: ResolutionPolicy,
    *,
    as_of: datetime,
) -> float:
    """Weighted score: 60% normalised priority, 40% confidence, plus recency bonus."""

    priority = policy.priority_for(candidate.source, field_name)
    max_priority = policy.max_configured_priority
    normalized_priority = 1 - (priority - 1) / max_priority if max_priority else 0.0
    score = PRIORITY_WEIGHT * normalized_priority + CONFIDENCE_WEIGHT * candidate.confidence
    if policy.prefer_recent:
        age = as_of - candidate.fetched_at
        freshness = 1 - age / RECENCY_HORIZON
        score += max(0.0, freshness) * RECENCY_BONUS_WEIGHT
    return score


def resolve_hybrid(
    field_name: str,
    candidates: Sequence[Candidate],
    policy: ResolutionPolicy,
    *,
    as_of: datetime,
) -> Candidate:
    best = candidates[0]
    best_score = hybrid_score(best, field_name, policy, as_of=as_of)
    for candidate in candidates[1:]:
        score = hybrid_score(candidate, field_name, policy, as_of=as_of)
        if score > best_score:
            best, best_score = candidate, score
    return best


STRATEGIES: Final[dict[ResolutionStrategy, Strategy]] = {
    ResolutionStrategy.PRIORITY: resolve_by_priority,
    ResolutionStrategy.CONFIDENCE: resolve_by_confidence,
    ResolutionStrategy.RECENCY: resolve_by_recency,
    # user overrides are handled before any strategy runs
    ResolutionStrategy.MANUAL: resolve_by_priority,
    ResolutionStrategy.HYBRID: resolve_hybrid,
}
