# ABOUTME: In-memory multi-field inverted index with fuzzy search over book records.
# ABOUTME: Indexes title, author, and subject tokens plus exact ISBN lookup.

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING
from uuid import UUID

from tome.search.entry import MatchKind, SearchableEntry, SearchResult, normalize_isbn
from tome.search.matcher import fuzzy_match
from tome.search.normalizer import tokenize

if TYPE_CHECKING:
    from tome.db.mapping import BookRecord

logger = logging.getLogger(__name__)

# Score reported for an exact ISBN hit. The ISBN result short-circuits the
# fuzzy pass and is returned alone, so it is never ranked against fuzzy scores.
ISBN_MATCH_SCORE = 1000.0

# Multipliers applied to raw fuzzy scores, per field.
FIELD_WEIGHTS: dict[MatchKind, float] = {
    MatchKind.TITLE: 10.0,
    MatchKind.AUTHOR: 8.0,
    MatchKind.SUBJECT: 3.0,
}

TokenIndex = dict[str, set[UUID]]


def _add_tokens(index: TokenIndex, tokens: set[str], book_id: UUID) -> None:
    for token in tokens:
        index.setdefault(token, set()).add(book_id)


def _discard_tokens(index: TokenIndex, tokens: set[str], book_id: UUID) -> None:
    for token in tokens:
        ids = index.get(token)
        if ids is None:
            continue
        ids.discard(book_id)
        if not ids:
            del index[token]


class SearchIndex:
    """Inverted index over title, author, and subject tokens, plus ISBN lookup.

    Not thread-safe: callers serialize access through SearchCoordinator.

    Invariants:
        - every token key maps to a non-empty set of ids
        - every id in any structure has an entry in ``entries``
        - remove_book(id) undoes index_book(id) exactly
    """

    def __init__(self) -> None:
        self._entries: dict[UUID, SearchableEntry] = {}
        self._title_index: TokenIndex = {}
        self._author_index: TokenIndex = {}
        self._subject_index: TokenIndex = {}
        self._isbn_index: dict[str, UUID] = {}

    def _token_indices(self) -> tuple[tuple[MatchKind, TokenIndex], ...]:
        return (
            (MatchKind.TITLE, self._title_index),
            (MatchKind.AUTHOR, self._author_index),
            (MatchKind.SUBJECT, self._subject_index),
        )

    @staticmethod
    def _tokens_for(kind: MatchKind, entry: SearchableEntry) -> set[str]:
        if kind is MatchKind.TITLE:
            return entry.title_tokens()
        if kind is MatchKind.AUTHOR:
            return entry.author_tokens()
        return entry.subject_tokens()

    # --- Mutation ---

    def index_book(self, record: BookRecord) -> None:
        """Add a record to the index, replacing any previous entry with the same id."""
        entry = SearchableEntry.from_record(record)
        if entry.id in self._entries:
            self.remove_book(entry.id)

        self._entries[entry.id] = entry
        for kind, index in self._token_indices():
            _add_tokens(index, self._tokens_for(kind, entry), entry.id)
        for isbn in entry.normalized_isbns:
            self._isbn_index[isbn] = entry.id

    def remove_book(self, book_id: UUID) -> None:
        """Remove a record from every index structure. No-op if it isn't indexed."""
        entry = self._entries.pop(book_id, None)
        if entry is None:
            return

        for kind, index in self._token_indices():
            _discard_tokens(index, self._tokens_for(kind, entry), book_id)
        for isbn in entry.normalized_isbns:
            if self._isbn_index.get(isbn) == book_id:
                del self._isbn_index[isbn]

    def clear_index(self) -> None:
        """Drop every entry and token."""
        self._entries.clear()
        self._title_index.clear()
        self._author_index.clear()
        self._subject_index.clear()
        self._isbn_index.clear()

    # --- Queries ---

    @property
    def count(self) -> int:
        """Number of indexed records."""
        return len(self._entries)

    @property
    def indexed_book_ids(self) -> frozenset[UUID]:
        return frozenset(self._entries)

    def entry(self, book_id: UUID) -> SearchableEntry | None:
        return self._entries.get(book_id)

    def snapshot(self) -> dict[str, dict]:
        """Copy of every index structure, for inspection and diagnostics."""
        return {
            "entries": dict(self._entries),
            "title": {token: frozenset(ids) for token, ids in self._title_index.items()},
            "author": {token: frozenset(ids) for token, ids in self._author_index.items()},
            "subject": {token: frozenset(ids) for token, ids in self._subject_index.items()},
            "isbn": dict(self._isbn_index),
        }

    def search(self, query: str) -> list[SearchResult]:
        """Rank indexed records against a free-text query.

        An exact ISBN hit short-circuits everything else and is returned alone
        with ISBN_MATCH_SCORE. Otherwise every query token is fuzzy-matched
        against every stored token of each field; matches add
        ``score * FIELD_WEIGHTS[field]`` to the record's total.

        Returns:
            Results ordered by score (highest first), ties broken by most
            recently added. Empty when the query is blank or nothing matches.
        """
        query_tokens = tokenize(query)
        if not query_tokens:
            return []

        isbn_id = self._isbn_index.get(normalize_isbn(query))
        if isbn_id is not None:
            return [SearchResult(self._entries[isbn_id], ISBN_MATCH_SCORE, MatchKind.ISBN)]

        totals: dict[UUID, float] = defaultdict(float)
        contributions: dict[UUID, set[MatchKind]] = defaultdict(set)
        token_scores: dict[tuple[str, str], float | None] = {}

        for kind, index in self._token_indices():
            weight = FIELD_WEIGHTS[kind]
            for token, book_ids in index.items():
                for query_token in query_tokens:
                    key = (query_token, token)
                    if key not in token_scores:
                        token_scores[key] = fuzzy_match(query_token, token)
                    score = token_scores[key]
                    if score is None:
                        continue
                    for book_id in book_ids:
                        totals[book_id] += score * weight
                        contributions[book_id].add(kind)

        results = [
            SearchResult(
                entry=self._entries[book_id],
                score=total,
                match_kind=MatchKind.strongest(contributions[book_id]),
            )
            for book_id, total in totals.items()
        ]
        results.sort(key=lambda r: (r.score, r.entry.date_added), reverse=True)
        logger.debug("Query %r matched %d of %d records", query, len(results), self.count)
        return results
