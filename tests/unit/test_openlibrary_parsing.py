# ABOUTME: Unit tests for Open Library response parsing helpers.
# ABOUTME: Covers years, languages, descriptions, and edition/work/author payloads.

from tome.metadata.openlibrary_parser import (
    parse_author_name,
    parse_description,
    parse_edition,
    parse_language,
    parse_work_author_keys,
    parse_work_subjects,
    parse_year,
)
from tests.fixtures.openlibrary_responses import AUTHOR_RESPONSE, ISBN_RESPONSE, WORKS_RESPONSE


class TestFieldParsers:
    """Tests for small field parsers."""

    def test_parse_year(self) -> None:
        """Years are pulled from free-form dates."""
        assert parse_year("September 1994") == 1994
        assert parse_year("1980") == 1980
        assert parse_year("n.d.") is None
        assert parse_year(None) is None

    def test_parse_language(self) -> None:
        """Language keys reduce to their code."""
        assert parse_language([{"key": "/languages/eng"}]) == "eng"
        assert parse_language([]) is None
        assert parse_language(None) is None

    def test_parse_description(self) -> None:
        """Descriptions may be strings or typed-text objects."""
        assert parse_description({"description": "Plain"}) == "Plain"
        assert parse_description({"description": {"value": "Typed"}}) == "Typed"
        assert parse_description({}) is None


class TestPayloadParsers:
    """Tests for edition, work, and author payload parsing."""

    def test_parse_edition(self) -> None:
        """Edition payloads yield metadata plus follow-up keys."""
        edition = parse_edition(ISBN_RESPONSE)

        assert edition.metadata.title == "The Name of the Rose"
        assert edition.metadata.isbn13 == "9780156001311"
        assert edition.metadata.first_publish_year == 1994
        assert edition.work_key == "/works/OL456W"
        assert edition.author_keys == ["/authors/OL123A"]
        assert edition.metadata.identifiers == {
            "openlibrary_edition": "/books/OL7353617M",
            "openlibrary_work": "/works/OL456W",
        }

    def test_parse_edition_without_title(self) -> None:
        """Editions without a title get a placeholder."""
        assert parse_edition({}).metadata.title == "Unknown"

    def test_work_fields(self) -> None:
        """Works payloads yield author keys and subjects."""
        assert parse_work_author_keys(WORKS_RESPONSE) == ["/authors/OL123A"]
        assert parse_work_subjects(WORKS_RESPONSE) == [
            "Mystery",
            "Historical fiction",
            "Monasteries",
        ]

    def test_subjects_are_capped(self) -> None:
        """Long subject lists are truncated."""
        many = {"subjects": [f"Subject {n}" for n in range(40)]}
        assert len(parse_work_subjects(many)) == 12

    def test_parse_author_name(self) -> None:
        """Author names fall back to personal_name."""
        assert parse_author_name(AUTHOR_RESPONSE) == "Umberto Eco"
        assert parse_author_name({"personal_name": "U. Eco"}) == "U. Eco"
        assert parse_author_name({}) is None
