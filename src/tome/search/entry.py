# ABOUTME: Value types for the search index: indexed entries, match kinds, and results.
# ABOUTME: SearchableEntry is an immutable, pre-normalized snapshot of one catalog record.

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from tome.db.mapping import as_utc
from tome.search.normalizer import normalize_for_search

if TYPE_CHECKING:
    from tome.db.mapping import BookRecord


def normalize_isbn(isbn: str | None) -> str:
    """Normalize an ISBN for exact lookup: "0-13-235088-X" -> "013235088x"."""
    return "".join(normalize_for_search(isbn).split())


class MatchKind(enum.Enum):
    """Field class that earned a search hit, highest priority first."""

    ISBN = "isbn"
    TITLE = "title"
    AUTHOR = "author"
    SUBJECT = "subject"

    @property
    def priority(self) -> int:
        return _PRIORITY[self]

    @property
    def display_name(self) -> str:
        return "ISBN" if self is MatchKind.ISBN else self.value.capitalize()

    @classmethod
    def strongest(cls, kinds: set[MatchKind]) -> MatchKind:
        """Return the highest-priority kind among those that contributed."""
        return max(kinds, key=lambda kind: kind.priority)


_PRIORITY = {
    MatchKind.ISBN: 4,
    MatchKind.TITLE: 3,
    MatchKind.AUTHOR: 2,
    MatchKind.SUBJECT: 1,
}


@dataclass(frozen=True)
class SearchableEntry:
    """Pre-processed search fields for one book.

    Never mutated: when the underlying record changes, the index drops this
    entry and builds a new one.
    """

    id: UUID
    title: str
    normalized_title: str
    authors: tuple[str, ...]
    normalized_authors: tuple[str, ...]
    isbn10: str | None
    isbn13: str | None
    normalized_isbns: tuple[str, ...]
    subjects: frozenset[str]
    normalized_subjects: frozenset[str]
    date_added: datetime

    @classmethod
    def from_record(cls, record: BookRecord) -> SearchableEntry:
        meta = record.metadata
        isbns = (normalize_isbn(meta.isbn10), normalize_isbn(meta.isbn13))
        return cls(
            id=record.id,
            title=meta.title,
            normalized_title=normalize_for_search(meta.title),
            authors=tuple(meta.authors),
            normalized_authors=tuple(normalize_for_search(a) for a in meta.authors),
            isbn10=meta.isbn10,
            isbn13=meta.isbn13,
            normalized_isbns=tuple(dict.fromkeys(i for i in isbns if i)),
            subjects=frozenset(meta.subjects),
            normalized_subjects=frozenset(normalize_for_search(s) for s in meta.subjects),
            date_added=as_utc(record.date_added),
        )

    def title_tokens(self) -> set[str]:
        return set(self.normalized_title.split())

    def author_tokens(self) -> set[str]:
        return {token for author in self.normalized_authors for token in author.split()}

    def subject_tokens(self) -> set[str]:
        return {token for subject in self.normalized_subjects for token in subject.split()}


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit: the matched entry, its total score, and how it matched."""

    entry: SearchableEntry
    score: float
    match_kind: MatchKind

    @property
    def book_id(self) -> UUID:
        return self.entry.id
