# ABOUTME: Unit tests for database creation and schema setup.
# ABOUTME: Verifies tables, pragmas, schema versioning, and reopening an existing file.

from pathlib import Path

import pytest

from tome.db.connection import UnsupportedSchemaError, get_schema_version, open_library
from tome.db.schema import SCHEMA_VERSION


class TestOpenLibrary:
    """Tests for open_library."""

    def test_creates_file_and_parents(self, tmp_path: Path) -> None:
        """The database file and missing directories are created."""
        path = tmp_path / "a" / "b" / "library.db"
        conn = open_library(path)
        assert path.exists()
        conn.close()

    def test_books_table_exists(self, tmp_path: Path) -> None:
        """The books table is created on first open."""
        conn = open_library(tmp_path / "library.db")
        tables = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"books", "tags", "book_tags", "schema_version"} <= tables
        conn.close()

    def test_wal_mode(self, tmp_path: Path) -> None:
        """Connections use WAL journaling."""
        conn = open_library(tmp_path / "library.db")
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        conn.close()

    def test_foreign_keys_enforced(self, tmp_path: Path) -> None:
        """Foreign keys are on, so tag links follow deleted books."""
        conn = open_library(tmp_path / "library.db")
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        conn.close()

    def test_schema_version(self, tmp_path: Path) -> None:
        """The current schema version is recorded."""
        conn = open_library(tmp_path / "library.db")
        assert get_schema_version(conn) == SCHEMA_VERSION
        conn.close()

    def test_reopen_keeps_data(self, tmp_path: Path) -> None:
        """Opening an existing database doesn't reapply the schema."""
        path = tmp_path / "library.db"
        conn = open_library(path)
        conn.execute(
            "INSERT INTO books (id, title, date_added, date_modified) VALUES (?, ?, ?, ?)",
            ("x", "Dune", "2024-01-01T00:00:00+00:00", "2024-01-01T00:00:00+00:00"),
        )
        conn.commit()
        conn.close()

        conn = open_library(path)
        assert conn.execute("SELECT COUNT(*) FROM books").fetchone()[0] == 1
        assert get_schema_version(conn) == SCHEMA_VERSION
        conn.close()

    def test_newer_schema_refused(self, tmp_path: Path) -> None:
        """A database from a newer schema version is not opened."""
        path = tmp_path / "library.db"
        conn = open_library(path)
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION + 1,))
        conn.commit()
        conn.close()

        with pytest.raises(UnsupportedSchemaError, match="schema version"):
            open_library(path)
