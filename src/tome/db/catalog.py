# ABOUTME: CRUD operations for the Tome collection catalog.
# ABOUTME: The canonical record store for books and their tags in SQLite.

import json
import re
import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID, uuid4

from tome.db.mapping import BookRecord, as_utc, metadata_to_row, row_to_record
from tome.metadata.types import READING_STATUSES, BookMetadata

_JSON_FIELDS = frozenset({"authors", "subjects", "publishers", "identifiers"})
_UPDATABLE_FIELDS = frozenset(metadata_to_row(BookMetadata(title="")).keys())
_ISBN_STRIP_RE = re.compile(r"[\s-]")
_COLOR_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

# Stay well under SQLite's bound-parameter limit for IN (...) lookups.
_FETCH_CHUNK_SIZE = 500


class DuplicateBookError(Exception):
    """Raised when a book with the same ISBN-13 is already in the catalog."""


def _now() -> datetime:
    return datetime.now(UTC)


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the books table.

    Also implements the RecordStore protocol consumed by the search
    coordinator (fetch_all, fetch_count, fetch_by_ids).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add_book(
        self,
        metadata: BookMetadata,
        *,
        book_id: UUID | None = None,
        date_added: datetime | None = None,
    ) -> BookRecord:
        """Add a book to the catalog.

        Args:
            metadata: The book's metadata.
            book_id: Identifier to use; a fresh UUID4 when omitted.
            date_added: Timestamp to record; now when omitted. Stored in UTC,
                with naive values read as UTC.

        Returns:
            The stored BookRecord.

        Raises:
            DuplicateBookError: If a book with this ISBN-13 already exists.
        """
        book_id = book_id or uuid4()
        added = as_utc(date_added) if date_added else _now()
        row = metadata_to_row(metadata)
        row["id"] = str(book_id)
        row["date_added"] = added.isoformat()
        row["date_modified"] = added.isoformat()

        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        try:
            self._conn.execute(
                f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
            self._conn.commit()
        except sqlite3.IntegrityError as exc:
            if "books.isbn13" in str(exc):
                raise DuplicateBookError(
                    f"Book with ISBN {metadata.isbn13} already exists"
                ) from exc
            raise

        return BookRecord(
            id=book_id, metadata=metadata, date_added=added, date_modified=added
        )

    def get_by_id(self, book_id: UUID) -> BookRecord | None:
        """Retrieve a book by its identifier."""
        cursor = self._conn.execute("SELECT * FROM books WHERE id = ?", (str(book_id),))
        row = cursor.fetchone()
        return row_to_record(row) if row else None

    def find_by_id_prefix(self, prefix: str) -> list[BookRecord]:
        """Return books whose id starts with ``prefix`` (as shown by `tome ls`)."""
        clean = prefix.strip().lower()
        if not clean or not all(ch in "0123456789abcdef-" for ch in clean):
            return []
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE id LIKE ? ORDER BY date_added DESC", (f"{clean}%",)
        )
        return [row_to_record(row) for row in cursor.fetchall()]

    def get_by_isbn(self, isbn: str) -> BookRecord | None:
        """Retrieve a book by ISBN-10 or ISBN-13, ignoring hyphens and spaces."""
        clean = _ISBN_STRIP_RE.sub("", isbn)
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE isbn13 = ? OR isbn10 = ?", (clean, clean)
        )
        row = cursor.fetchone()
        return row_to_record(row) if row else None

    def list_all(self) -> list[BookRecord]:
        """Return all books in the catalog, ordered by title."""
        cursor = self._conn.execute("SELECT * FROM books ORDER BY title COLLATE NOCASE")
        return [row_to_record(row) for row in cursor.fetchall()]

    # --- RecordStore protocol ---

    def fetch_all(self) -> list[BookRecord]:
        """Return all books, most recently added first."""
        cursor = self._conn.execute("SELECT * FROM books ORDER BY date_added DESC")
        return [row_to_record(row) for row in cursor.fetchall()]

    def fetch_count(self) -> int:
        """Return the number of books in the catalog."""
        cursor = self._conn.execute("SELECT COUNT(*) FROM books")
        return cursor.fetchone()[0]

    def fetch_by_ids(self, book_ids: Iterable[UUID]) -> list[BookRecord]:
        """Return the books whose ids are given, in no particular order.

        Unknown ids are ignored.
        """
        keys = [str(book_id) for book_id in set(book_ids)]
        records: list[BookRecord] = []
        for start in range(0, len(keys), _FETCH_CHUNK_SIZE):
            chunk = keys[start : start + _FETCH_CHUNK_SIZE]
            placeholders = ", ".join("?" for _ in chunk)
            cursor = self._conn.execute(
                f"SELECT * FROM books WHERE id IN ({placeholders})", chunk
            )
            records.extend(row_to_record(row) for row in cursor.fetchall())
        return records

    # --- Mutations ---

    def update_book(
        self, book_id: UUID, **fields: str | list[str] | dict[str, str] | int | None
    ) -> BookRecord:
        """Update one or more metadata fields on a cataloged book.

        Accepts keyword arguments named after BookMetadata fields. List and
        dict values are JSON-serialized automatically.

        Returns:
            The updated BookRecord.

        Raises:
            ValueError: If the book_id does not exist, a field name is
                unknown, or reading_status is invalid.
            DuplicateBookError: If the new ISBN-13 belongs to another book.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown book field(s): {', '.join(sorted(unknown))}")
        if "reading_status" in fields and fields["reading_status"] not in READING_STATUSES:
            raise ValueError(f"Invalid reading status: {fields['reading_status']!r}")

        values: dict[str, object] = {}
        for name, value in fields.items():
            values[name] = json.dumps(value) if name in _JSON_FIELDS else value
        values["date_modified"] = _now().isoformat()

        set_clause = ", ".join(f"{k} = ?" for k in values)
        try:
            cursor = self._conn.execute(
                f"UPDATE books SET {set_clause} WHERE id = ?",
                [*values.values(), str(book_id)],
            )
            self._conn.commit()
        except sqlite3.IntegrityError as exc:
            if "books.isbn13" in str(exc):
                raise DuplicateBookError(
                    f"Book with ISBN {fields.get('isbn13')} already exists"
                ) from exc
            raise

        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

        record = self.get_by_id(book_id)
        if record is None:
            raise ValueError(f"Book with id {book_id} not found")
        return record

    def delete_book(self, book_id: UUID) -> None:
        """Delete a book from the catalog.

        Raises:
            ValueError: If the book_id does not exist.
        """
        cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (str(book_id),))
        self._conn.commit()

        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    # --- Tag operations ---

    def add_tag(self, book_id: UUID, tag_name: str, *, color_hex: str | None = None) -> None:
        """Tag a book, creating the tag on first use. Idempotent.

        Tag names are case-insensitive. ``color_hex`` sets the colour of a
        new tag, or recolours an existing one.

        Raises:
            ValueError: If the book does not exist, the tag name is blank, or
                ``color_hex`` is not a #RRGGBB colour.
        """
        name = tag_name.strip()
        if not name:
            raise ValueError("Tag name must not be empty")
        if color_hex is not None and not _COLOR_HEX_RE.match(color_hex):
            raise ValueError(f"Tag colour must look like #RRGGBB, got {color_hex!r}")
        if self.get_by_id(book_id) is None:
            raise ValueError(f"Book with id {book_id} not found")

        if color_hex is None:
            self._conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (name,))
        else:
            self._conn.execute(
                "INSERT INTO tags (name, color_hex) VALUES (?, ?) "
                "ON CONFLICT(name) DO UPDATE SET color_hex = excluded.color_hex",
                (name, color_hex),
            )
        self._conn.execute(
            "INSERT OR IGNORE INTO book_tags (book_id, tag_id) "
            "SELECT ?, id FROM tags WHERE name = ?",
            (str(book_id), name),
        )
        self._conn.commit()

    def remove_tag(self, book_id: UUID, tag_name: str) -> None:
        """Remove a tag from a book. Tags left with no books are deleted.

        Raises:
            ValueError: If the tag doesn't exist or the book isn't tagged with it.
        """
        tag_row = self._conn.execute(
            "SELECT id FROM tags WHERE name = ?", (tag_name.strip(),)
        ).fetchone()
        if tag_row is None:
            raise ValueError(f"Tag '{tag_name}' not found")

        cursor = self._conn.execute(
            "DELETE FROM book_tags WHERE book_id = ? AND tag_id = ?",
            (str(book_id), tag_row["id"]),
        )
        if cursor.rowcount == 0:
            self._conn.rollback()
            raise ValueError(f"Book {book_id} is not tagged with '{tag_name}'")
        self._conn.execute(
            "DELETE FROM tags WHERE id = ? AND NOT EXISTS "
            "(SELECT 1 FROM book_tags WHERE tag_id = ?)",
            (tag_row["id"], tag_row["id"]),
        )
        self._conn.commit()

    def get_tags_for_book(self, book_id: UUID) -> list[str]:
        """Tag names on a book, alphabetically."""
        cursor = self._conn.execute(
            "SELECT t.name FROM tags t "
            "JOIN book_tags bt ON t.id = bt.tag_id "
            "WHERE bt.book_id = ? "
            "ORDER BY t.name COLLATE NOCASE",
            (str(book_id),),
        )
        return [row["name"] for row in cursor.fetchall()]

    def list_tags(self) -> list[tuple[str, str, int]]:
        """Every tag as (name, color_hex, book count), alphabetically."""
        cursor = self._conn.execute(
            "SELECT t.name, t.color_hex, COUNT(bt.book_id) AS book_count "
            "FROM tags t "
            "LEFT JOIN book_tags bt ON t.id = bt.tag_id "
            "GROUP BY t.id "
            "ORDER BY t.name COLLATE NOCASE"
        )
        return [(row["name"], row["color_hex"], row["book_count"]) for row in cursor.fetchall()]

    def get_books_by_tag(self, tag_name: str) -> list[BookRecord]:
        """Books carrying a tag, ordered by title.

        Raises:
            ValueError: If the tag doesn't exist.
        """
        name = tag_name.strip()
        if self._conn.execute("SELECT 1 FROM tags WHERE name = ?", (name,)).fetchone() is None:
            raise ValueError(f"Tag '{tag_name}' not found")

        cursor = self._conn.execute(
            "SELECT b.* FROM books b "
            "JOIN book_tags bt ON b.id = bt.book_id "
            "JOIN tags t ON bt.tag_id = t.id "
            "WHERE t.name = ? "
            "ORDER BY b.title COLLATE NOCASE",
            (name,),
        )
        return [row_to_record(row) for row in cursor.fetchall()]
