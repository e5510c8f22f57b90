"""Field candidates and their provenance."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .enums import MetadataSource


def clamp_confidence(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class Candidate:
    """One proposed value for one field from one source."""

    value: object
    source: MetadataSource
    confidence: float
    fetched_at: datetime
    source_id: str | None = None
    url: str | None = None
    user_override: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))
        object.__setattr__(self, "fetched_at", as_utc(self.fetched_at))

    def to_document(self) -> dict[str, object]:
        return {
            "value": self.value,
            "provenance": {
                "source": self.source.value,
                "sourceId": self.source_id,
                "confidence": self.confidence,
                "fetchedAt": self.fetched_at.isoformat(),
                "url": self.url,
            },
            "userOverride": self.user_override,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Candidate:
        provenance: Mapping[str, Any] = document["provenance"]
        return cls(
            value=document["value"],
            source=MetadataSource(provenance["source"]),
            source_id=provenance.get("sourceId"),
            confidence=float(provenance["confidence"]),
            fetched_at=datetime.fromisoformat(str(provenance["fetchedAt"])),
            url=provenance.get("url"),
            user_override=bool(document.get("userOverride", False)),
        )


# A candidate promoted to canonical status keeps the exact same shape.
type ResolvedField = Candidate


@dataclass(frozen=True, slots=True, kw_only=True)
class ArrayField:
    """Merged set-valued field with a single field-level attribution."""

    values: tuple[object, ...]
    source: MetadataSource
    confidence: float
    fetched_at: datetime
    contributors: tuple[MetadataSource, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))
        object.__setattr__(self, "fetched_at", as_utc(self.fetched_at))

    def to_document(self) -> dict[str, object]:
        return {
            "values": list(self.values),
            "provenance": {
                "source": self.source.value,
                "confidence": self.confidence,
                "fetchedAt": self.fetched_at.isoformat(),
            },
            "contributors": [source.value for source in self.contributors],
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> ArrayField:
        provenance: Mapping[str, Any] = document["provenance"]
        values: list[Any] = document.get("values") or []
        contributors: list[str] = document.get("contributors") or []
        return cls(
            values=tuple(values),
            source=MetadataSource(provenance["source"]),
            confidence=float(provenance["confidence"]),
            fetched_at=datetime.fromisoformat(str(provenance["fetchedAt"])),
            contributors=tuple(MetadataSource(item) for item in contributors),
        )
