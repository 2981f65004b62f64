# ABOUTME: SearchCoordinator keeps the in-memory search index in sync with the catalog.
# ABOUTME: Rebuilds progressively, applies incremental updates, and persists freshness metadata.

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from tome.db.mapping import as_utc
from tome.search.index import SearchIndex
from tome.search.metadata_store import IndexMetadata, IndexMetadataStore

if TYPE_CHECKING:
    from tome.db.mapping import BookRecord
    from tome.search.entry import SearchResult
    from tome.search.store import RecordStore

logger = logging.getLogger(__name__)

# Records indexed between voluntary yields to the event loop during a rebuild.
REBUILD_YIELD_INTERVAL = 10

ProgressCallback = Callable[[float], None]


class CoordinatorState(enum.Enum):
    IDLE = "idle"
    INDEXING = "indexing"
    READY = "ready"


def _describe_age(then: datetime, now: datetime) -> str:
    seconds = int((now - then).total_seconds())
    if seconds < 60:
        return "just now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            amount = seconds // size
            return f"{amount} {unit}{'s' if amount != 1 else ''} ago"
    return "just now"


@dataclass(frozen=True)
class IndexStats:
    """Snapshot of index size and freshness for status displays."""

    count: int
    last_indexed_at: datetime | None

    @property
    def formatted_last_indexed(self) -> str:
        if self.last_indexed_at is None:
            return "Never indexed"
        return f"Indexed {_describe_age(as_utc(self.last_indexed_at), datetime.now(UTC))}"


class SearchCoordinator:
    """Sole owner of a SearchIndex and its metadata store.

    Designed for a single writer on one event loop: all calls are expected to
    come from the same logical task, so there is no locking around the index.
    A search issued while a rebuild is in progress sees a partial index.

    Args:
        metadata_store: Where freshness metadata is persisted. None disables
            persistence entirely.
        yield_every: Records indexed between yields to the event loop during
            a rebuild.
    """

    def __init__(
        self,
        metadata_store: IndexMetadataStore | None = None,
        *,
        yield_every: int = REBUILD_YIELD_INTERVAL,
    ) -> None:
        self._index = SearchIndex()
        self._metadata_store = metadata_store
        self._yield_every = max(1, yield_every)
        self._state = CoordinatorState.IDLE
        self._pending_saves: set[asyncio.Task[None]] = set()
        self._save_lock: asyncio.Lock | None = None
        self._save_lock_loop: asyncio.AbstractEventLoop | None = None
        self.progress = 0.0
        self.last_indexed_at: datetime | None = None
        self.persisted_metadata: IndexMetadata | None = None

    # --- State ---

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def is_indexing(self) -> bool:
        return self._state is CoordinatorState.INDEXING

    @property
    def count(self) -> int:
        return self._index.count

    @property
    def indexed_book_ids(self) -> frozenset[UUID]:
        return self._index.indexed_book_ids

    @property
    def index_stats(self) -> IndexStats:
        return IndexStats(count=self._index.count, last_indexed_at=self.last_indexed_at)

    def needs_reindexing(self, store: RecordStore) -> bool:
        """Whether the index size differs from the store's record count.

        Deliberately coarse: an edited record with unchanged count goes
        unnoticed; index_book/remove_book keep content in step.
        """
        return self._index.count != store.fetch_count()

    # --- Queries ---

    def search_results(self, query: str) -> list[SearchResult]:
        """Scored results straight from the index, best first."""
        return self._index.search(query)

    def search(self, query: str, store: RecordStore) -> list[BookRecord]:
        """Search the index and resolve hits to full records in rank order.

        Hits whose records are gone from the store are dropped.
        """
        ranked_ids = [result.book_id for result in self._index.search(query)]
        if not ranked_ids:
            return []

        by_id = {record.id: record for record in store.fetch_by_ids(ranked_ids)}
        records = [by_id[book_id] for book_id in ranked_ids if book_id in by_id]
        if len(records) < len(ranked_ids):
            logger.debug(
                "Dropped %d search hit(s) no longer in the store", len(ranked_ids) - len(records)
            )
        return records

    # --- Maintenance ---

    async def rebuild_index(
        self, store: RecordStore, on_progress: ProgressCallback | None = None
    ) -> None:
        """Re-index every record in the store, yielding to the event loop periodically.

        Progress runs from 0.0 to 1.0 and is reported through ``on_progress``
        after every record. Store errors propagate; the coordinator is left
        usable either way, with a possibly partial index.
        """
        self._state = CoordinatorState.INDEXING
        self._set_progress(0.0, on_progress)
        try:
            records = store.fetch_all()
            self._index.clear_index()
            total = len(records)
            logger.info("Rebuilding search index from %d record(s)", total)

            for position, record in enumerate(records, start=1):
                self._index.index_book(record)
                self._set_progress(position / total, on_progress)
                if position % self._yield_every == 0:
                    await asyncio.sleep(0)

            self.last_indexed_at = datetime.now(UTC)
            self._set_progress(1.0, on_progress)
            await self._save(self._current_metadata())
            logger.info("Search index ready with %d record(s)", self._index.count)
        except Exception as exc:
            logger.warning("Search index rebuild failed: %s", exc)
            raise
        finally:
            self._state = CoordinatorState.READY

    def index_book(self, record: BookRecord) -> None:
        """Add or refresh one record, then persist metadata in the background."""
        self._index.index_book(record)
        self._schedule_save()

    def remove_book(self, book_id: UUID) -> None:
        """Drop one record from the index, then persist metadata in the background."""
        self._index.remove_book(book_id)
        self._schedule_save()

    # --- Persistence ---

    async def load_persisted(self) -> IndexMetadata | None:
        """Load persisted metadata once at startup and adopt its timestamp."""
        if self._metadata_store is None:
            return None
        metadata = await asyncio.to_thread(self._metadata_store.load)
        self.persisted_metadata = metadata
        if metadata is not None:
            self.last_indexed_at = metadata.last_updated
        return metadata

    async def clear_persisted_data(self) -> None:
        """Delete persisted metadata and empty the index."""
        await self.flush()
        if self._metadata_store is not None:
            await asyncio.to_thread(self._metadata_store.clear)
        self._index.clear_index()
        self.last_indexed_at = None
        self.persisted_metadata = None
        self.progress = 0.0
        self._state = CoordinatorState.IDLE

    async def flush(self) -> None:
        """Wait for background metadata saves to finish."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves))

    def _current_metadata(self) -> IndexMetadata:
        return IndexMetadata(
            book_ids=self._index.indexed_book_ids, last_updated=datetime.now(UTC)
        )

    def _schedule_save(self) -> None:
        """Fire-and-forget save; inline when no event loop is running."""
        if self._metadata_store is None:
            return
        metadata = self._current_metadata()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._metadata_store.save(metadata)
            return
        task = loop.create_task(self._save(metadata))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def _save(self, metadata: IndexMetadata) -> None:
        if self._metadata_store is None:
            return
        # Saves run in worker threads; the lock keeps them in submission order.
        loop = asyncio.get_running_loop()
        if self._save_lock is None or self._save_lock_loop is not loop:
            self._save_lock = asyncio.Lock()
            self._save_lock_loop = loop
        async with self._save_lock:
            if await asyncio.to_thread(self._metadata_store.save, metadata):
                self.persisted_metadata = metadata

    def _set_progress(self, value: float, on_progress: ProgressCallback | None) -> None:
        self.progress = value
        if on_progress is not None:
            on_progress(value)
