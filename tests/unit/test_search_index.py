# ABOUTME: Unit tests for the in-memory SearchIndex.
# ABOUTME: Covers index/remove symmetry, ISBN lookup, weighted ranking, and tie-breaking.

from datetime import datetime

import pytest

from tome.db.mapping import BookRecord
from tome.search.entry import MatchKind
from tome.search.index import ISBN_MATCH_SCORE, SearchIndex
from tests.fixtures.books import gatsby, make_record


@pytest.fixture()
def index() -> SearchIndex:
    return SearchIndex()


class TestIndexMutation:
    """Tests for index_book, remove_book, and clear_index."""

    def test_remove_restores_previous_state(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """Indexing then removing a record leaves the index exactly as before."""
        index.index_book(make_record("The Hobbit", authors=["J. R. R. Tolkien"]))
        before = index.snapshot()

        index.index_book(gatsby_record)
        index.remove_book(gatsby_record.id)

        assert index.snapshot() == before

    def test_remove_from_empty_leaves_no_tokens(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """Removing the only record leaves no empty token keys behind."""
        index.index_book(gatsby_record)
        index.remove_book(gatsby_record.id)

        snap = index.snapshot()
        assert snap == {"entries": {}, "title": {}, "author": {}, "subject": {}, "isbn": {}}

    def test_double_index_is_idempotent(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """Indexing the same record twice equals indexing it once."""
        index.index_book(gatsby_record)
        once = index.snapshot()
        index.index_book(gatsby_record)

        assert index.snapshot() == once
        assert index.count == 1

    def test_reindex_replaces_old_tokens(self, index: SearchIndex) -> None:
        """Re-indexing an edited record drops tokens from the old version."""
        original = make_record("Frankenstein", authors=["Mary Shelley"])
        index.index_book(original)
        edited = BookRecord(
            id=original.id,
            metadata=make_record("Dracula", authors=["Bram Stoker"]).metadata,
            date_added=original.date_added,
            date_modified=original.date_modified,
        )
        index.index_book(edited)

        assert index.search("frankenstein") == []
        assert [r.book_id for r in index.search("dracula")] == [original.id]

    def test_remove_unknown_is_noop(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """Removing an id that was never indexed changes nothing."""
        index.index_book(gatsby_record)
        before = index.snapshot()
        index.remove_book(make_record("Other").id)
        assert index.snapshot() == before

    def test_clear(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """clear_index empties every structure."""
        index.index_book(gatsby_record)
        index.clear_index()
        assert index.count == 0
        assert index.indexed_book_ids == frozenset()
        assert index.search("gatsby") == []

    def test_shared_isbn_removal_keeps_other_owner(self, index: SearchIndex) -> None:
        """Removing a record doesn't drop an ISBN key now owned by another record."""
        first = make_record("Copy One", isbn13="9780000000002")
        second = make_record("Copy Two", isbn13="9780000000002")
        index.index_book(first)
        index.index_book(second)
        index.remove_book(first.id)

        results = index.search("9780000000002")
        assert [r.book_id for r in results] == [second.id]


class TestIndexSearch:
    """Tests for SearchIndex.search."""

    def test_title_match(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """A title word finds the book as a title match."""
        index.index_book(gatsby_record)
        results = index.search("gatsby")

        assert len(results) == 1
        assert results[0].book_id == gatsby_record.id
        assert results[0].match_kind is MatchKind.TITLE
        assert results[0].score > 0

    def test_isbn_match_wins_alone(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """An exact ISBN hit returns only that record with the ISBN score."""
        index.index_book(gatsby_record)
        # a title that would also fuzzy-match the digits
        index.index_book(make_record("9780743273565"))

        results = index.search("9780743273565")
        assert len(results) == 1
        assert results[0].book_id == gatsby_record.id
        assert results[0].match_kind is MatchKind.ISBN
        assert results[0].score == ISBN_MATCH_SCORE

    def test_isbn_match_ignores_hyphens(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """Hyphenated ISBN queries still hit the exact lookup."""
        index.index_book(gatsby_record)
        results = index.search("978-0-7432-7356-5")
        assert [r.match_kind for r in results] == [MatchKind.ISBN]

    def test_isbn10_with_check_digit_x(self, index: SearchIndex) -> None:
        """ISBN-10s ending in X match exactly, with or without hyphens and in any case."""
        record = make_record("Clean Code", isbn10="013235088X")
        index.index_book(record)

        for query in ("0-13-235088-X", "013235088x"):
            results = index.search(query)
            assert [r.book_id for r in results] == [record.id]
            assert results[0].match_kind is MatchKind.ISBN

    def test_author_typo_uses_edit_distance(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """A misspelled author still matches, below the correctly spelled score."""
        index.index_book(gatsby_record)

        typo = index.search("fitzgerld")
        exact = index.search("fitzgerald")

        assert len(typo) == 1
        assert typo[0].match_kind is MatchKind.AUTHOR
        assert 0 < typo[0].score < exact[0].score

    def test_blank_query(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """Empty and whitespace-only queries return nothing."""
        index.index_book(gatsby_record)
        assert index.search("") == []
        assert index.search("   ") == []
        assert index.search("?!") == []

    def test_removed_record_not_found(
        self, index: SearchIndex, gatsby_record: BookRecord
    ) -> None:
        """Once removed, a record no longer appears in results."""
        index.index_book(gatsby_record)
        index.remove_book(gatsby_record.id)
        assert index.search("gatsby") == []

    def test_no_match(self, index: SearchIndex, gatsby_record: BookRecord) -> None:
        """Unrelated queries return nothing."""
        index.index_book(gatsby_record)
        assert index.search("xylophone") == []

    def test_title_outweighs_subject(self, index: SearchIndex) -> None:
        """The same word scores higher in a title than in a subject."""
        in_title = make_record("Dragons", subjects=["Zoology"])
        in_subject = make_record("Bestiary", subjects=["Dragons"])
        index.index_book(in_title)
        index.index_book(in_subject)

        results = index.search("dragons")
        assert [r.book_id for r in results] == [in_title.id, in_subject.id]
        assert results[0].match_kind is MatchKind.TITLE
        assert results[1].match_kind is MatchKind.SUBJECT

    def test_match_kind_is_strongest_contributor(self, index: SearchIndex) -> None:
        """A record hit in author and subject reports the author kind."""
        record = make_record("Collected Works", authors=["Homer"], subjects=["Homer"])
        index.index_book(record)

        results = index.search("homer")
        assert results[0].match_kind is MatchKind.AUTHOR

    def test_scores_accumulate_across_tokens(self, index: SearchIndex) -> None:
        """Matching more query words raises the score."""
        index.index_book(gatsby())
        one = index.search("great")[0].score
        two = index.search("great gatsby")[0].score
        assert two > one

    def test_ties_break_newest_first(self, index: SearchIndex) -> None:
        """Equal scores are ordered by most recently added."""
        older = make_record("Dune", added_offset_days=0)
        newer = make_record("Dune", added_offset_days=5)
        middle = make_record("Dune", added_offset_days=2)
        for record in (older, newer, middle):
            index.index_book(record)

        results = index.search("dune")
        assert [r.book_id for r in results] == [newer.id, middle.id, older.id]
        assert len({r.score for r in results}) == 1

    def test_tie_break_with_naive_date_added(self, index: SearchIndex) -> None:
        """Records carrying a naive date_added still rank against UTC ones."""
        aware = make_record("Dune", added_offset_days=1)
        naive = make_record("Dune")
        naive.date_added = datetime(2024, 6, 1)
        index.index_book(aware)
        index.index_book(naive)

        results = index.search("dune")
        assert [r.book_id for r in results] == [naive.id, aware.id]
        assert results[0].entry.date_added.tzinfo is not None

    def test_results_sorted_by_score(self, index: SearchIndex) -> None:
        """Higher scores come first regardless of insertion order."""
        partial = make_record("Duneland", added_offset_days=9)
        exact = make_record("Dune", added_offset_days=0)
        index.index_book(partial)
        index.index_book(exact)

        results = index.search("dune")
        assert [r.book_id for r in results] == [exact.id, partial.id]
        assert results[0].score > results[1].score
