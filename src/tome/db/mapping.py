# ABOUTME: Converts between BookMetadata/BookRecord and SQLite row dictionaries.
# ABOUTME: Handles JSON serialization for list/dict fields and ISO-8601 timestamps.

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from tome.metadata.types import BookMetadata


@dataclass
class BookRecord:
    """A cataloged book: BookMetadata plus identity and timestamps."""

    id: UUID
    metadata: BookMetadata
    date_added: datetime
    date_modified: datetime

    @property
    def title(self) -> str:
        return self.metadata.title


def metadata_to_row(metadata: BookMetadata) -> dict[str, Any]:
    """Convert a BookMetadata instance to column values for INSERT/UPDATE.

    List and dict fields are stored as JSON text.
    """
    return {
        "title": metadata.title,
        "authors": json.dumps(metadata.authors),
        "isbn10": metadata.isbn10,
        "isbn13": metadata.isbn13,
        "subjects": json.dumps(metadata.subjects),
        "publishers": json.dumps(metadata.publishers),
        "first_publish_year": metadata.first_publish_year,
        "description": metadata.description,
        "language": metadata.language,
        "personal_notes": metadata.personal_notes,
        "reading_status": metadata.reading_status,
        "identifiers": json.dumps(metadata.identifiers),
    }


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC, reading a naive timestamp as UTC wall time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _json_or(value: str | None, default: Any) -> Any:
    return json.loads(value) if value else default


def row_to_metadata(row: Any) -> BookMetadata:
    """Convert a database row (dict-like) back to a BookMetadata instance."""
    return BookMetadata(
        title=row["title"],
        authors=_json_or(row["authors"], []),
        isbn10=row["isbn10"],
        isbn13=row["isbn13"],
        subjects=_json_or(row["subjects"], []),
        publishers=_json_or(row["publishers"], []),
        first_publish_year=row["first_publish_year"],
        description=row["description"],
        language=row["language"],
        personal_notes=row["personal_notes"] or "",
        reading_status=row["reading_status"],
        identifiers=_json_or(row["identifiers"], {}),
    )


def row_to_record(row: Any) -> BookRecord:
    """Convert a full database row to a BookRecord."""
    return BookRecord(
        id=UUID(row["id"]),
        metadata=row_to_metadata(row),
        date_added=as_utc(datetime.fromisoformat(row["date_added"])),
        date_modified=as_utc(datetime.fromisoformat(row["date_modified"])),
    )
