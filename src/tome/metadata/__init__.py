# ABOUTME: Metadata package for book descriptions and remote ISBN lookups.
# ABOUTME: Exports the core BookMetadata dataclass used throughout Tome.

from tome.metadata.http import MetadataFetchError, TomeHttpClient
from tome.metadata.openlibrary import OpenLibraryProvider
from tome.metadata.provider import MetadataProvider
from tome.metadata.types import READING_STATUSES, BookMetadata

__all__ = [
    "READING_STATUSES",
    "BookMetadata",
    "MetadataFetchError",
    "MetadataProvider",
    "OpenLibraryProvider",
    "TomeHttpClient",
]
