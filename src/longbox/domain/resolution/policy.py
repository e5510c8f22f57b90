"""Resolution policy: source priorities, strategy and auto-apply flags.

A policy is a plain value threaded into every engine call. There is no
module-level "current" policy; :func:`default_policy` only builds the
default document for callers that have nothing stored yet.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from longbox.domain.model import MetadataSource, OverridePrecedence, ResolutionStrategy

from .errors import InvalidPolicyError, MissingPolicyError

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_SOURCE_PRIORITIES: tuple[tuple[MetadataSource, int], ...] = (
    (MetadataSource.MANUAL, 1),
    (MetadataSource.COMICVINE, 2),
    (MetadataSource.METRON, 3),
    (MetadataSource.LOCG, 4),
    (MetadataSource.COMICINFO_XML, 5),
)
DEFAULT_MIN_CONFIDENCE = 0.5


def _check_priority(value: object, *, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidPolicyError(f"{label} must be a positive integer, got {value!r}")


@dataclass(frozen=True, slots=True, kw_only=True)
class SourcePriority:
    """Configured rank of one source; lower numbers win."""

    source: MetadataSource
    priority: int
    enabled: bool = True
    field_overrides: Mapping[str, int] = field(default_factory=dict["str", "int"])

    def __post_init__(self) -> None:
        _check_priority(self.priority, label=f"priority of {self.source}")
        for field_name, priority in self.field_overrides.items():
            _check_priority(priority, label=f"{self.source} override for {field_name}")


@dataclass(frozen=True, slots=True, kw_only=True)
class AutoApply:
    """When trigger events may rebuild the canonical record on their own."""

    enabled: bool = True
    on_import: bool = True
    on_update: bool = True

    @property
    def applies_on_import(self) -> bool:
        return self.enabled and self.on_import

    @property
    def applies_on_update(self) -> bool:
        return self.enabled and self.on_update


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionPolicy:
    source_priorities: tuple[SourcePriority, ...]
    strategy: ResolutionStrategy = ResolutionStrategy.HYBRID
    min_confidence_threshold: float = DEFAULT_MIN_CONFIDENCE
    prefer_recent: bool = True
    field_preferences: Mapping[str, MetadataSource] = field(
        default_factory=dict["str", "MetadataSource"]
    )
    auto_apply: AutoApply = field(default_factory=AutoApply)
    override_precedence: OverridePrecedence = OverridePrecedence.FIRST

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence_threshold <= 1.0:
            raise InvalidPolicyError(
                "min_confidence_threshold must be within [0, 1], "
                f"got {self.min_confidence_threshold!r}"
            )
        seen: set[MetadataSource] = set()
        for entry in self.source_priorities:
            if entry.source in seen:
                raise InvalidPolicyError(f"Duplicate priority entry for {entry.source}")
            seen.add(entry.source)

    def entry_for(self, source: MetadataSource) -> SourcePriority | None:
        for entry in self.source_priorities:
            if entry.source is source:
                return entry
        return None

    def is_source_enabled(self, source: MetadataSource) -> bool:
        entry = self.entry_for(source)
        return entry is not None and entry.enabled

    def priority_for(self, source: MetadataSource, field_name: str | None = None) -> float:
        """Effective priority of ``source`` for ``field_name``.

        Disabled or unlisted sources rank last (``math.inf``). A per-field
        override on the source entry beats its general priority.
        """

        entry = self.entry_for(source)
        if entry is None or not entry.enabled:
            return math.inf
        if field_name is not None and field_name in entry.field_overrides:
            return entry.field_overrides[field_name]
        return entry.priority

    @property
    def max_configured_priority(self) -> int:
        return max((entry.priority for entry in self.source_priorities), default=0)

    def forced_source_for(self, field_name: str) -> MetadataSource | None:
        return self.field_preferences.get(field_name)


def require_policy(policy: ResolutionPolicy | None, *, operation: str) -> ResolutionPolicy:
    if policy is None:
        raise MissingPolicyError(operation)
    return policy


def default_policy(
    *,
    strategy: ResolutionStrategy = ResolutionStrategy.HYBRID,
    priorities: Iterable[tuple[MetadataSource, int]] = DEFAULT_SOURCE_PRIORITIES,
) -> ResolutionPolicy:
    return ResolutionPolicy(
        source_priorities=tuple(
            SourcePriority(source=source, priority=priority) for source, priority in priorities
        ),
        strategy=strategy,
    )
