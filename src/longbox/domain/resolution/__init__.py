"""Canonical metadata resolution engine.

Flow for one catalog item:
1) extract candidates per field from the item's source bundle
2) resolve one winner per scalar field, merge array fields
3) assemble the canonical record, carrying user overrides forward
4) on the read path, analyse conflicts; on the write path, set/clear overrides

Everything here is pure, synchronous and policy-driven: callers pass a
``ResolutionPolicy`` into each call and persist the results themselves.
"""

from __future__ import annotations

from .build import build_canonical_metadata
from .conflicts import FieldConflict, analyze_conflicts, resolution_reason
from .errors import (
    IllegalTransitionError,
    InvalidPolicyError,
    MissingPolicyError,
    ResolutionError,
    UnknownFieldError,
)
from .extract import (
    DEFAULT_CANDIDATE_CONFIDENCE,
    LookupResult,
    LookupStatus,
    extract_candidates,
    extract_source_values,
    lookup_path,
)
from .mappings import ARRAY_FIELD_MAPPINGS, SCALAR_FIELD_MAPPINGS, FieldMapping
from .merge import SourceValues, merge_array_field
from .overrides import FieldEvent, OverrideOutcome, clear_override, set_override, transition
from .policy import (
    AutoApply,
    ResolutionPolicy,
    SourcePriority,
    default_policy,
    require_policy,
)
from .resolve import resolve_field, valid_candidates

__all__ = [
    "ARRAY_FIELD_MAPPINGS",
    "DEFAULT_CANDIDATE_CONFIDENCE",
    "SCALAR_FIELD_MAPPINGS",
    "AutoApply",
    "FieldConflict",
    "FieldEvent",
    "FieldMapping",
    "IllegalTransitionError",
    "InvalidPolicyError",
    "LookupResult",
    "LookupStatus",
    "MissingPolicyError",
    "OverrideOutcome",
    "ResolutionError",
    "ResolutionPolicy",
    "SourcePriority",
    "SourceValues",
    "UnknownFieldError",
    "analyze_conflicts",
    "build_canonical_metadata",
    "clear_override",
    "default_policy",
    "extract_candidates",
    "extract_source_values",
    "lookup_path",
    "merge_array_field",
    "require_policy",
    "resolution_reason",
    "resolve_field",
    "set_override",
    "transition",
    "valid_candidates",
]
