"""Validation and translation of inbound source and policy documents."""

from __future__ import annotations

from .schema import (
    BundleDocument,
    ComicInfoEnvelope,
    ComicVineEnvelope,
    LocgEnvelope,
    ManualEnvelope,
    MetronEnvelope,
    PolicyDocument,
    SourceEnvelope,
)
from .translator import (
    parse_source_bundle,
    parse_source_document,
    policy_from_document,
    policy_from_model,
    policy_to_document,
    source_document_from_envelope,
)

__all__ = [
    "BundleDocument",
    "ComicInfoEnvelope",
    "ComicVineEnvelope",
    "LocgEnvelope",
    "ManualEnvelope",
    "MetronEnvelope",
    "PolicyDocument",
    "SourceEnvelope",
    "parse_source_bundle",
    "parse_source_document",
    "policy_from_document",
    "policy_from_model",
    "policy_to_document",
    "source_document_from_envelope",
]
