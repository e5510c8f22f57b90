"""The canonical record assembled from resolved fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .candidate import ArrayField, Candidate, ResolvedField
from .enums import ARRAY_FIELDS, SCALAR_FIELDS, FieldState

EXPECTED_FIELD_COUNT = len(SCALAR_FIELDS) + len(ARRAY_FIELDS)


def completeness_of(
    fields: Mapping[str, ResolvedField],
    arrays: Mapping[str, ArrayField],
) -> float:
    """Fraction of expected canonical fields that currently hold a value."""

    defined = sum(1 for name in SCALAR_FIELDS if name in fields)
    defined += sum(1 for name in ARRAY_FIELDS if name in arrays and arrays[name].values)
    return defined / EXPECTED_FIELD_COUNT


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalRecord:
    """One winning value per canonical field, with provenance.

    Absent keys mean "no canonical value yet"; the record never stores null
    placeholders. ``states`` tracks the override state machine for scalar
    fields, a missing key meaning :attr:`FieldState.UNRESOLVED`.
    """

    fields: Mapping[str, ResolvedField] = field(default_factory=dict["str", "Candidate"])
    arrays: Mapping[str, ArrayField] = field(default_factory=dict["str", "ArrayField"])
    states: Mapping[str, FieldState] = field(default_factory=dict["str", "FieldState"])
    completeness_score: float = 0.0
    last_canonical_update: datetime | None = None

    @property
    def has_user_modifications(self) -> bool:
        return any(candidate.user_override for candidate in self.fields.values())

    def get(self, field_name: str) -> ResolvedField | None:
        return self.fields.get(field_name)

    def state_of(self, field_name: str) -> FieldState:
        return self.states.get(field_name, FieldState.UNRESOLVED)

    def to_document(self) -> dict[str, object]:
        document: dict[str, object] = {}
        for name in SCALAR_FIELDS:
            if name in self.fields:
                document[name] = self.fields[name].to_document()
        for name in ARRAY_FIELDS:
            if name in self.arrays:
                document[name] = self.arrays[name].to_document()
        document["fieldStates"] = {name: state.value for name, state in self.states.items()}
        document["completenessScore"] = self.completeness_score
        document["lastCanonicalUpdate"] = (
            self.last_canonical_update.isoformat() if self.last_canonical_update else None
        )
        document["hasUserModifications"] = self.has_user_modifications
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> CanonicalRecord:
        last_update = document.get("lastCanonicalUpdate")
        states: Mapping[str, str] = document.get("fieldStates") or {}
        return cls(
            fields={
                name: Candidate.from_document(document[name])
                for name in SCALAR_FIELDS
                if document.get(name) is not None
            },
            arrays={
                name: ArrayField.from_document(document[name])
                for name in ARRAY_FIELDS
                if document.get(name) is not None
            },
            states={name: FieldState(state) for name, state in states.items()},
            completeness_score=float(document.get("completenessScore", 0.0)),
            last_canonical_update=datetime.fromisoformat(last_update) if last_update else None,
        )
