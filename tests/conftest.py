# ABOUTME: Shared pytest fixtures for Tome tests.
# ABOUTME: Provides a temporary data directory, an open catalog, and sample records.

from collections.abc import Iterator
from pathlib import Path

import pytest

from tome.db.catalog import LibraryCatalog
from tome.db.connection import open_library
from tome.db.mapping import BookRecord
from tests.fixtures.books import gatsby


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """An empty Tome data directory."""
    path = tmp_path / "tome-data"
    path.mkdir()
    return path


@pytest.fixture
def catalog(tmp_path: Path) -> Iterator[LibraryCatalog]:
    """A LibraryCatalog backed by a temporary database."""
    conn = open_library(tmp_path / "catalog.db")
    yield LibraryCatalog(conn)
    conn.close()


@pytest.fixture
def gatsby_record() -> BookRecord:
    """'The Great Gatsby' by F. Scott Fitzgerald, ISBN-13 9780743273565."""
    return gatsby()
