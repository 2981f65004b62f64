# ABOUTME: MetadataProvider protocol defining the contract for remote book lookups.
# ABOUTME: Open Library implements it; tests substitute small fakes.

from typing import Protocol, runtime_checkable

from tome.metadata.types import BookMetadata


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for remote metadata services used to pre-fill new books.

    Implementations return ``None`` when the ISBN is unknown or the service
    cannot be reached; lookups are a convenience, never a requirement.
    """

    @property
    def name(self) -> str: ...

    def lookup_isbn(self, isbn: str) -> BookMetadata | None: ...
