# ABOUTME: Library facade that pairs the catalog with its search coordinator.
# ABOUTME: Every add, update, and delete goes to the catalog first, then to the index.

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import UUID

from tome.db.catalog import LibraryCatalog
from tome.db.connection import DB_FILENAME, open_library
from tome.metadata.types import next_reading_status
from tome.search.coordinator import ProgressCallback, SearchCoordinator
from tome.search.metadata_store import IndexMetadataStore

if TYPE_CHECKING:
    from datetime import datetime

    from tome.db.mapping import BookRecord
    from tome.metadata.types import BookMetadata
    from tome.search.entry import SearchResult

logger = logging.getLogger(__name__)


class Library:
    """A book collection with search kept in step with its catalog.

    Owns one LibraryCatalog and one SearchCoordinator; nothing else should
    mutate the coordinator's index. Call ``prepare()`` once before searching
    and ``close()`` when done so background metadata saves complete.
    """

    def __init__(
        self,
        catalog: LibraryCatalog,
        coordinator: SearchCoordinator,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        self.catalog = catalog
        self.coordinator = coordinator
        self._conn = conn

    @classmethod
    def open(cls, data_dir: Path, db_path: Path | None = None) -> Library:
        """Open the collection stored under ``data_dir``.

        The database defaults to ``data_dir/library.db`` and the index
        metadata always lives in ``data_dir``.
        """
        conn = open_library(db_path or data_dir / DB_FILENAME)
        coordinator = SearchCoordinator(IndexMetadataStore.in_directory(data_dir))
        return cls(LibraryCatalog(conn), coordinator, conn=conn)

    async def prepare(self, on_progress: ProgressCallback | None = None) -> bool:
        """Load persisted index metadata and rebuild the index if it is stale.

        Returns:
            True if a rebuild ran.
        """
        await self.coordinator.load_persisted()
        if not self.coordinator.needs_reindexing(self.catalog):
            return False
        await self.coordinator.rebuild_index(self.catalog, on_progress=on_progress)
        return True

    async def close(self) -> None:
        await self.coordinator.flush()
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # --- Mutations with search upkeep ---

    def add_book(
        self,
        metadata: BookMetadata,
        *,
        book_id: UUID | None = None,
        date_added: datetime | None = None,
    ) -> BookRecord:
        record = self.catalog.add_book(metadata, book_id=book_id, date_added=date_added)
        self.coordinator.index_book(record)
        logger.info("Added %s (%s)", record.title, record.id)
        return record

    def update_book(
        self, book_id: UUID, **fields: str | list[str] | dict[str, str] | int | None
    ) -> BookRecord:
        """Update catalog fields and re-index the record as a whole."""
        record = self.catalog.update_book(book_id, **fields)
        self.coordinator.index_book(record)
        return record

    def toggle_reading_status(self, book_id: UUID) -> BookRecord:
        """Advance a book to its next reading status: to_read, reading, read, then to_read."""
        record = self.catalog.get_by_id(book_id)
        if record is None:
            raise ValueError(f"Book with id {book_id} not found")
        status = next_reading_status(record.metadata.reading_status)
        logger.debug(
            "Reading status of %s: %s -> %s", book_id, record.metadata.reading_status, status
        )
        return self.update_book(book_id, reading_status=status)

    def delete_book(self, book_id: UUID) -> None:
        self.catalog.delete_book(book_id)
        self.coordinator.remove_book(book_id)
        logger.info("Deleted %s", book_id)

    # --- Search ---

    def search(self, query: str) -> list[BookRecord]:
        return self.coordinator.search(query, self.catalog)

    def search_with_scores(self, query: str) -> list[tuple[BookRecord, SearchResult]]:
        """Ranked (record, result) pairs; hits missing from the catalog are dropped."""
        results = self.coordinator.search_results(query)
        if not results:
            return []
        by_id = {r.id: r for r in self.catalog.fetch_by_ids(res.book_id for res in results)}
        return [(by_id[res.book_id], res) for res in results if res.book_id in by_id]
