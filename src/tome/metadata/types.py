# ABOUTME: Core metadata data structures for book records in the collection.
# ABOUTME: BookMetadata is the interchange format between lookup, catalog, and search.

from dataclasses import dataclass, field

READING_STATUSES = ("to_read", "reading", "read")


def next_reading_status(status: str) -> str:
    """The status after ``status`` in the to_read, reading, read cycle."""
    position = READING_STATUSES.index(status)
    return READING_STATUSES[(position + 1) % len(READING_STATUSES)]


@dataclass
class BookMetadata:
    """Descriptive metadata for a book in the collection.

    Everything the user can edit about a book lives here; identity and
    timestamps are owned by the catalog. All fields are optional except
    title, since a book with no title can't be shown anywhere.
    """

    title: str
    authors: list[str] = field(default_factory=list)
    isbn10: str | None = None
    isbn13: str | None = None
    subjects: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    first_publish_year: int | None = None
    description: str | None = None
    language: str | None = None
    personal_notes: str = ""
    reading_status: str = "to_read"
    identifiers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.reading_status not in READING_STATUSES:
            msg = (
                f"reading_status must be one of {', '.join(READING_STATUSES)}, "
                f"got {self.reading_status!r}"
            )
            raise ValueError(msg)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    @property
    def isbn(self) -> str | None:
        """Preferred ISBN for display: ISBN-13 when present, else ISBN-10."""
        return self.isbn13 or self.isbn10
