"""Per-source metadata documents attached to a catalog item.

A bundle holds at most one document per :class:`MetadataSource`. Documents
are opaque nested mappings; the candidate extractor reads them through the
static field mapping tables in ``longbox.domain.resolution.mappings``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .candidate import as_utc, clamp_confidence
from .enums import MetadataSource


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceDocument:
    """Raw document from one source plus its envelope metadata."""

    source: MetadataSource
    payload: Mapping[str, Any]
    fetched_at: datetime
    confidence: float | None = None
    source_id: str | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fetched_at", as_utc(self.fetched_at))
        if self.confidence is not None:
            object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def to_document(self) -> dict[str, object]:
        return {
            "source": self.source.value,
            "data": dict(self.payload),
            "fetchedAt": self.fetched_at.isoformat(),
            "confidence": self.confidence,
            "sourceId": self.source_id,
            "url": self.url,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> SourceDocument:
        return cls(
            source=MetadataSource(document["source"]),
            payload=document.get("data") or {},
            fetched_at=datetime.fromisoformat(str(document["fetchedAt"])),
            confidence=document.get("confidence"),
            source_id=document.get("sourceId"),
            url=document.get("url"),
        )


@dataclass(frozen=True, slots=True)
class SourceBundle:
    """All per-source documents known for one catalog item."""

    documents: Mapping[MetadataSource, SourceDocument] = field(
        default_factory=dict["MetadataSource", "SourceDocument"]
    )

    def __post_init__(self) -> None:
        for source, document in self.documents.items():
            if document.source is not source:
                raise ValueError(
                    f"Document for {document.source} filed under source key {source}"
                )

    @classmethod
    def of(cls, *documents: SourceDocument) -> SourceBundle:
        return cls({document.source: document for document in documents})

    def get(self, source: MetadataSource) -> SourceDocument | None:
        return self.documents.get(source)

    def with_document(self, document: SourceDocument) -> SourceBundle:
        return replace(self, documents={**self.documents, document.source: document})

    @property
    def sources(self) -> tuple[MetadataSource, ...]:
        return tuple(self.documents)

    def to_document(self) -> list[dict[str, object]]:
        return [document.to_document() for document in self.documents.values()]

    @classmethod
    def from_document(cls, documents: list[Mapping[str, Any]]) -> SourceBundle:
        return cls.of(*(SourceDocument.from_document(document) for document in documents))
