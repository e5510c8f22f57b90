"""Static field -> (source, path) mapping tables.

Each canonical field lists, in order, where every source keeps its value.
Paths are dot-separated keys into the source document; integer segments
index into lists. Array fields may attach a converter that normalises the
raw value found at the path into a list of canonical items.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from longbox.domain.model import ArrayFieldName, MetadataSource, ScalarField

type ArrayConverter = Callable[[object], list[object]]


@dataclass(frozen=True, slots=True)
class FieldMapping:
    source: MetadataSource
    path: str
    convert: ArrayConverter | None = None


def split_names(raw: object) -> list[object]:
    """Split a ComicInfo-style comma separated list into stripped names."""

    if isinstance(raw, str):
        return [name.strip() for name in raw.split(",") if name.strip()]
    return _as_list(raw)


def names_of(raw: object) -> list[object]:
    """Pull ``name`` out of each entry of a provider credit list."""

    names: list[object] = []
    for entry in _as_list(raw):
        if isinstance(entry, Mapping):
            name = entry.get("name")
            if name:
                names.append(name)
        elif isinstance(entry, str) and entry.strip():
            names.append(entry.strip())
    return names


def comicvine_credits(raw: object) -> list[object]:
    credits: list[object] = []
    for entry in _as_list(raw):
        if isinstance(entry, Mapping) and entry.get("name"):
            credits.append(_credit(entry["name"], entry.get("role")))
    return credits


def metron_credits(raw: object) -> list[object]:
    credits: list[object] = []
    for entry in _as_list(raw):
        if not isinstance(entry, Mapping) or not entry.get("creator"):
            continue
        roles = names_of(entry.get("role"))
        credits.append(_credit(entry["creator"], roles[0] if roles else None))
    return credits


def credits_from_names(role: str) -> ArrayConverter:
    """Build a converter turning a comma separated name list into credits."""

    def convert(raw: object) -> list[object]:
        return [_credit(name, role) for name in split_names(raw)]

    return convert


def manual_values(raw: object) -> list[object]:
    return _as_list(raw)


def _credit(name: object, role: object) -> dict[str, Any]:
    return {"name": str(name).strip(), "role": str(role).strip().lower() if role else None}


def _as_list(raw: object) -> list[object]:
    if raw is None:
        return []
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        return list(raw)
    return [raw]


_CV = MetadataSource.COMICVINE
_METRON = MetadataSource.METRON
_LOCG = MetadataSource.LOCG
_CIX = MetadataSource.COMICINFO_XML
_MANUAL = MetadataSource.MANUAL

SCALAR_FIELD_MAPPINGS: Final[Mapping[str, tuple[FieldMapping, ...]]] = {
    ScalarField.TITLE: (
        FieldMapping(_CV, "name"),
        FieldMapping(_METRON, "name"),
        FieldMapping(_CIX, "Title"),
        FieldMapping(_LOCG, "name"),
        FieldMapping(_MANUAL, "title"),
    ),
    ScalarField.SERIES: (
        FieldMapping(_CV, "volumeInformation.name"),
        FieldMapping(_METRON, "series.name"),
        FieldMapping(_CIX, "Series"),
        FieldMapping(_MANUAL, "series"),
    ),
    ScalarField.ISSUE_NUMBER: (
        FieldMapping(_CV, "issue_number"),
        FieldMapping(_METRON, "number"),
        FieldMapping(_CIX, "Number"),
        FieldMapping(_MANUAL, "issueNumber"),
    ),
    ScalarField.PUBLISHER: (
        FieldMapping(_CV, "volumeInformation.publisher.name"),
        FieldMapping(_METRON, "publisher.name"),
        FieldMapping(_LOCG, "publisher"),
        FieldMapping(_CIX, "Publisher"),
        FieldMapping(_MANUAL, "publisher"),
    ),
    ScalarField.DESCRIPTION: (
        FieldMapping(_CV, "description"),
        FieldMapping(_METRON, "desc"),
        FieldMapping(_LOCG, "description"),
        FieldMapping(_CIX, "Summary"),
        FieldMapping(_MANUAL, "description"),
    ),
    ScalarField.COVER_DATE: (
        FieldMapping(_CV, "cover_date"),
        FieldMapping(_METRON, "cover_date"),
        FieldMapping(_CIX, "CoverDate"),
        FieldMapping(_MANUAL, "coverDate"),
    ),
    ScalarField.PAGE_COUNT: (
        FieldMapping(_CIX, "PageCount"),
        FieldMapping(_METRON, "page"),
        FieldMapping(_MANUAL, "pageCount"),
    ),
}

_COMICINFO_CREDIT_TAGS: Final[tuple[tuple[str, str], ...]] = (
    ("Writer", "writer"),
    ("Penciller", "penciller"),
    ("Inker", "inker"),
    ("Colorist", "colorist"),
    ("Letterer", "letterer"),
    ("CoverArtist", "cover"),
    ("Editor", "editor"),
)

ARRAY_FIELD_MAPPINGS: Final[Mapping[str, tuple[FieldMapping, ...]]] = {
    ArrayFieldName.CREATORS: (
        FieldMapping(_CV, "person_credits", comicvine_credits),
        FieldMapping(_METRON, "credits", metron_credits),
        *(
            FieldMapping(_CIX, tag, credits_from_names(role))
            for tag, role in _COMICINFO_CREDIT_TAGS
        ),
        FieldMapping(_MANUAL, "creators", manual_values),
    ),
    ArrayFieldName.CHARACTERS: (
        FieldMapping(_CV, "character_credits", names_of),
        FieldMapping(_METRON, "characters", names_of),
        FieldMapping(_CIX, "Characters", split_names),
        FieldMapping(_MANUAL, "characters", manual_values),
    ),
    ArrayFieldName.GENRES: (
        FieldMapping(_METRON, "series.genres", names_of),
        FieldMapping(_CIX, "Genre", split_names),
        FieldMapping(_MANUAL, "genres", manual_values),
    ),
}


def scalar_mappings_for(field_name: str) -> tuple[FieldMapping, ...]:
    return SCALAR_FIELD_MAPPINGS.get(field_name, ())


def array_mappings_for(field_name: str) -> tuple[FieldMapping, ...]:
    return ARRAY_FIELD_MAPPINGS.get(field_name, ())
