"""Pydantic models for inbound source documents and policy documents.

Source envelopes arrive as JSON objects tagged by ``source``::

    {"source": "comicvine", "fetchedAt": "2024-05-01T10:00:00Z",
     "confidence": 0.8, "sourceId": "4000-12345", "data": {...}}

``data`` is kept as an opaque mapping; the candidate extractor reads it
through its own path tables. Policy documents use the camelCase layout of
the stored user preferences.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from longbox.domain.model import (
    ARRAY_FIELDS,
    SCALAR_FIELDS,
    MetadataSource,
    OverridePrecedence,
    ResolutionStrategy,
)
from longbox.domain.resolution.policy import DEFAULT_SOURCE_PRIORITIES

log = logging.getLogger(__name__)

KNOWN_FIELDS: frozenset[str] = frozenset(SCALAR_FIELDS + ARRAY_FIELDS)


class LongboxDocumentModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "%s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


def _check_field_names(names: dict[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(names).difference(KNOWN_FIELDS))
    if unknown:
        raise ValueError(f"unknown canonical field(s): {', '.join(unknown)}")
    return names


# Source envelopes ------------------------------------------------------------


class SourceEnvelopeBase(LongboxDocumentModel):
    data: dict[str, Any] = Field(default_factory=dict)
    fetched_at: datetime = Field(alias="fetchedAt")
    confidence: float | None = None
    source_id: str | None = Field(default=None, alias="sourceId")
    url: str | None = None

    @field_validator("source_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        # ComicVine and Metron hand out numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ManualEnvelope(SourceEnvelopeBase):
    source: Literal["manual"]


class ComicVineEnvelope(SourceEnvelopeBase):
    source: Literal["comicvine"]


class MetronEnvelope(SourceEnvelopeBase):
    source: Literal["metron"]


class LocgEnvelope(SourceEnvelopeBase):
    source: Literal["locg"]


class ComicInfoEnvelope(SourceEnvelopeBase):
    source: Literal["comicinfo_xml"]


SourceEnvelope = Annotated[
    ManualEnvelope | ComicVineEnvelope | MetronEnvelope | LocgEnvelope | ComicInfoEnvelope,
    Field(discriminator="source"),
]


class BundleDocument(LongboxDocumentModel):
    documents: list[SourceEnvelope] = Field(default_factory=list)

    @model_validator(mode="after")
    def _one_document_per_source(self) -> BundleDocument:
        seen: set[str] = set()
        for envelope in self.documents:
            if envelope.source in seen:
                raise ValueError(f"duplicate document for source {envelope.source!r}")
            seen.add(envelope.source)
        return self


# Policy documents ------------------------------------------------------------


class SourcePriorityModel(LongboxDocumentModel):
    source: MetadataSource
    priority: int = Field(ge=1)
    enabled: bool = True
    field_overrides: dict[str, Annotated[int, Field(ge=1)]] = Field(
        default_factory=dict, alias="fieldOverrides"
    )

    _known_override_fields = field_validator("field_overrides")(_check_field_names)


class AutoMergeModel(LongboxDocumentModel):
    enabled: bool = True
    on_import: bool = Field(default=True, alias="onImport")
    on_metadata_update: bool = Field(default=True, alias="onMetadataUpdate")


def _default_priorities() -> list[SourcePriorityModel]:
    return [
        SourcePriorityModel(source=source, priority=priority)
        for source, priority in DEFAULT_SOURCE_PRIORITIES
    ]


class PolicyDocument(LongboxDocumentModel):
    source_priorities: list[SourcePriorityModel] = Field(
        default_factory=_default_priorities, alias="sourcePriorities"
    )
    conflict_resolution: ResolutionStrategy = Field(
        default=ResolutionStrategy.HYBRID, alias="conflictResolution"
    )
    min_confidence_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, alias="minConfidenceThreshold"
    )
    prefer_recent: bool = Field(default=True, alias="preferRecent")
    field_preferences: dict[str, MetadataSource] = Field(
        default_factory=dict, alias="fieldPreferences"
    )
    auto_merge: AutoMergeModel = Field(default_factory=AutoMergeModel, alias="autoMerge")
    override_precedence: OverridePrecedence = Field(
        default=OverridePrecedence.FIRST, alias="overridePrecedence"
    )

    _known_preference_fields = field_validator("field_preferences")(_check_field_names)

    @field_validator("source_priorities")
    @classmethod
    def _unique_sources(cls, value: list[SourcePriorityModel]) -> list[SourcePriorityModel]:
        sources = [entry.source for entry in value]
        if len(sources) != len(set(sources)):
            raise ValueError("each source may be listed only once")
        return value
