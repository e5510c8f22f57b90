"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MetadataSource(StrEnum):
    """Where a metadata value came from."""

    MANUAL = "manual"
    COMICVINE = "comicvine"
    METRON = "metron"
    LOCG = "locg"
    COMICINFO_XML = "comicinfo_xml"


class ScalarField(StrEnum):
    TITLE = "title"
    SERIES = "series"
    ISSUE_NUMBER = "issueNumber"
    PUBLISHER = "publisher"
    DESCRIPTION = "description"
    COVER_DATE = "coverDate"
    PAGE_COUNT = "pageCount"


class ArrayFieldName(StrEnum):
    CREATORS = "creators"
    CHARACTERS = "characters"
    GENRES = "genres"


class ResolutionStrategy(StrEnum):
    """How the resolver picks a winner among conflicting candidates."""

    PRIORITY = "priority"
    CONFIDENCE = "confidence"
    RECENCY = "recency"
    MANUAL = "manual"
    HYBRID = "hybrid"


class OverridePrecedence(StrEnum):
    """Tie-break when several candidates carry a user override."""

    FIRST = "first"
    MOST_RECENT = "most_recent"


class FieldState(StrEnum):
    UNRESOLVED = "unresolved"
    AUTO_RESOLVED = "auto_resolved"
    USER_OVERRIDDEN = "user_overridden"


SCALAR_FIELDS: tuple[str, ...] = tuple(field.value for field in ScalarField)
ARRAY_FIELDS: tuple[str, ...] = tuple(field.value for field in ArrayFieldName)
