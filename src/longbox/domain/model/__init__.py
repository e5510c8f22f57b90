"""Domain model for canonical metadata resolution."""

from __future__ import annotations

from .candidate import ArrayField, Candidate, ResolvedField, as_utc, clamp_confidence
from .catalog import CatalogItem, ItemPage, ItemQuery
from .enums import (
    ARRAY_FIELDS,
    SCALAR_FIELDS,
    ArrayFieldName,
    FieldState,
    MetadataSource,
    OverridePrecedence,
    ResolutionStrategy,
    ScalarField,
)
from .record import EXPECTED_FIELD_COUNT, CanonicalRecord, completeness_of
from .sources import SourceBundle, SourceDocument

__all__ = [
    "ARRAY_FIELDS",
    "EXPECTED_FIELD_COUNT",
    "SCALAR_FIELDS",
    "ArrayField",
    "ArrayFieldName",
    "Candidate",
    "CanonicalRecord",
    "CatalogItem",
    "FieldState",
    "ItemPage",
    "ItemQuery",
    "MetadataSource",
    "OverridePrecedence",
    "ResolutionStrategy",
    "ResolvedField",
    "ScalarField",
    "SourceBundle",
    "SourceDocument",
    "as_utc",
    "clamp_confidence",
    "completeness_of",
]
