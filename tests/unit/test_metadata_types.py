# ABOUTME: Unit tests for BookMetadata.
# ABOUTME: Validates defaults, reading-status validation and cycling, and display helpers.

import pytest

from tome.metadata.types import READING_STATUSES, BookMetadata, next_reading_status


class TestBookMetadata:
    """Tests for the BookMetadata dataclass."""

    def test_defaults(self) -> None:
        """Only the title is required."""
        meta = BookMetadata(title="Dune")
        assert meta.authors == []
        assert meta.subjects == []
        assert meta.reading_status == "to_read"
        assert meta.isbn is None

    def test_invalid_status(self) -> None:
        """Unknown reading statuses are rejected."""
        with pytest.raises(ValueError, match="reading_status"):
            BookMetadata(title="Dune", reading_status="shelved")

    @pytest.mark.parametrize("status", READING_STATUSES)
    def test_valid_statuses(self, status: str) -> None:
        """Every known reading status is accepted."""
        assert BookMetadata(title="Dune", reading_status=status).reading_status == status

    def test_author_joins_names(self) -> None:
        """author joins multiple names for display."""
        meta = BookMetadata(title="Good Omens", authors=["Terry Pratchett", "Neil Gaiman"])
        assert meta.author == "Terry Pratchett, Neil Gaiman"

    def test_isbn_prefers_13(self) -> None:
        """isbn prefers ISBN-13 and falls back to ISBN-10."""
        assert BookMetadata(title="A", isbn10="1", isbn13="2").isbn == "2"
        assert BookMetadata(title="A", isbn10="1").isbn == "1"

    def test_personal_notes_default_empty(self) -> None:
        """Notes start out as an empty string."""
        assert BookMetadata(title="Dune").personal_notes == ""

    @pytest.mark.parametrize(
        ("current", "expected"),
        [("to_read", "reading"), ("reading", "read"), ("read", "to_read")],
    )
    def test_next_reading_status_cycles(self, current: str, expected: str) -> None:
        """Statuses advance to_read, reading, read, and wrap around."""
        assert next_reading_status(current) == expected
