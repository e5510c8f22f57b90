"""Translate validated documents into domain values and back."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from longbox.domain.model import MetadataSource, SourceBundle, SourceDocument
from longbox.domain.resolution import AutoApply, ResolutionPolicy, SourcePriority

from .schema import (
    AutoMergeModel,
    BundleDocument,
    PolicyDocument,
    SourceEnvelope,
    SourcePriorityModel,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

_ENVELOPE_ADAPTER: TypeAdapter[SourceEnvelope] = TypeAdapter(SourceEnvelope)


def source_document_from_envelope(envelope: SourceEnvelope) -> SourceDocument:
    return SourceDocument(
        source=MetadataSource(envelope.source),
        payload=envelope.data,
        fetched_at=envelope.fetched_at,
        confidence=envelope.confidence,
        source_id=envelope.source_id,
        url=envelope.url,
    )


def parse_source_document(raw: Mapping[str, Any]) -> SourceDocument:
    """Validate one tagged source envelope; raises ``pydantic.ValidationError``."""

    return source_document_from_envelope(_ENVELOPE_ADAPTER.validate_python(raw))


def parse_source_bundle(raw: object) -> SourceBundle:
    """Validate a bundle given either as a list of envelopes or ``{"documents": [...]}``."""

    if isinstance(raw, list):
        raw = {"documents": raw}
    document = BundleDocument.model_validate(raw)
    bundle = SourceBundle.of(
        *(source_document_from_envelope(envelope) for envelope in document.documents)
    )
    log.debug("Parsed source bundle with %d document(s)", len(bundle.documents))
    return bundle


def policy_from_document(raw: Mapping[str, Any]) -> ResolutionPolicy:
    """Validate a stored or user-supplied policy document."""

    return policy_from_model(PolicyDocument.model_validate(raw))


def policy_from_model(document: PolicyDocument) -> ResolutionPolicy:
    return ResolutionPolicy(
        source_priorities=tuple(
            SourcePriority(
                source=entry.source,
                priority=entry.priority,
                enabled=entry.enabled,
                field_overrides=dict(entry.field_overrides),
            )
            for entry in document.source_priorities
        ),
        strategy=document.conflict_resolution,
        min_confidence_threshold=document.min_confidence_threshold,
        prefer_recent=document.prefer_recent,
        field_preferences=dict(document.field_preferences),
        auto_apply=AutoApply(
            enabled=document.auto_merge.enabled,
            on_import=document.auto_merge.on_import,
            on_update=document.auto_merge.on_metadata_update,
        ),
        override_precedence=document.override_precedence,
    )


def policy_to_document(policy: ResolutionPolicy) -> dict[str, Any]:
    document = PolicyDocument(
        source_priorities=[
            SourcePriorityModel(
                source=entry.source,
                priority=entry.priority,
                enabled=entry.enabled,
                field_overrides=dict(entry.field_overrides),
            )
            for entry in policy.source_priorities
        ],
        conflict_resolution=policy.strategy,
        min_confidence_threshold=policy.min_confidence_threshold,
        prefer_recent=policy.prefer_recent,
        field_preferences=dict(policy.field_preferences),
        auto_merge=AutoMergeModel(
            enabled=policy.auto_apply.enabled,
            on_import=policy.auto_apply.on_import,
            on_metadata_update=policy.auto_apply.on_update,
        ),
        override_precedence=policy.override_precedence,
    )
    return document.model_dump(mode="json", by_alias=True)
