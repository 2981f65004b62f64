# ABOUTME: RecordStore protocol: the canonical book store the search coordinator reads from.
# ABOUTME: LibraryCatalog implements it; tests use small in-memory fakes.

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from tome.db.mapping import BookRecord


@runtime_checkable
class RecordStore(Protocol):
    """Read-only view of the canonical record store.

    The search subsystem never writes through this interface.
    """

    def fetch_all(self) -> list[BookRecord]:
        """All records, most recently added first."""
        ...

    def fetch_count(self) -> int: ...

    def fetch_by_ids(self, book_ids: Iterable[UUID]) -> list[BookRecord]:
        """Records for the given ids, any order; unknown ids are skipped."""
        ...
