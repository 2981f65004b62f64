# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts edition, works, and author payloads into BookMetadata fields.

import re
from dataclasses import dataclass, field
from typing import Any

from tome.metadata.types import BookMetadata

_YEAR_RE = re.compile(r"\b(\d{4})\b")

# Open Library subjects can run to hundreds of entries; keep the first few.
_MAX_SUBJECTS = 12


def _first(values: list[Any] | None) -> Any | None:
    return values[0] if values else None


def parse_year(date_text: str | None) -> int | None:
    """Pull a four-digit year out of free-form OL dates like 'April 10, 2004'."""
    if not date_text:
        return None
    m = _YEAR_RE.search(date_text)
    return int(m.group(1)) if m else None


def parse_language(languages: list[dict[str, str]] | None) -> str | None:
    """Turn [{"key": "/languages/eng"}] into "eng"."""
    first = _first(languages)
    if not first:
        return None
    key = first.get("key", "")
    return key.rsplit("/", 1)[-1] if "/" in key else key or None


def parse_description(data: dict[str, Any]) -> str | None:
    """Extract a description, which OL returns as a string or {"value": ...}."""
    desc = data.get("description")
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict):
        return desc.get("value")
    return None


@dataclass
class EditionData:
    """Fields read from the ISBN (edition) endpoint plus keys to follow up on."""

    metadata: BookMetadata
    work_key: str | None = None
    author_keys: list[str] = field(default_factory=list)


def parse_edition(data: dict[str, Any]) -> EditionData:
    """Parse an ``/isbn/{isbn}.json`` edition response."""
    identifiers: dict[str, str] = {}
    edition_key = data.get("key")
    if edition_key:
        identifiers["openlibrary_edition"] = edition_key

    work = _first(data.get("works"))
    work_key = work.get("key") if work else None
    if work_key:
        identifiers["openlibrary_work"] = work_key

    metadata = BookMetadata(
        title=data.get("title") or "Unknown",
        isbn10=_first(data.get("isbn_10")),
        isbn13=_first(data.get("isbn_13")),
        subjects=list(data.get("subjects", []))[:_MAX_SUBJECTS],
        publishers=list(data.get("publishers", [])),
        first_publish_year=parse_year(data.get("publish_date")),
        description=parse_description(data),
        language=parse_language(data.get("languages")),
        identifiers=identifiers,
    )
    author_keys = [a["key"] for a in data.get("authors", []) if a.get("key")]
    return EditionData(metadata=metadata, work_key=work_key, author_keys=author_keys)


def parse_work_author_keys(data: dict[str, Any]) -> list[str]:
    """Works store authors as [{"author": {"key": "/authors/..."}}]."""
    keys = []
    for entry in data.get("authors", []):
        author = entry.get("author")
        if isinstance(author, dict) and author.get("key"):
            keys.append(author["key"])
    return keys


def parse_work_subjects(data: dict[str, Any]) -> list[str]:
    return list(data.get("subjects", []))[:_MAX_SUBJECTS]


def parse_author_name(data: dict[str, Any]) -> str | None:
    """Return the display name from an ``/authors/{key}.json`` response."""
    return data.get("name") or data.get("personal_name")
