# ABOUTME: Local fuzzy search over the book collection.
# ABOUTME: Exports the index, coordinator, metadata persistence, and result types.

from tome.search.coordinator import CoordinatorState, IndexStats, SearchCoordinator
from tome.search.entry import MatchKind, SearchableEntry, SearchResult
from tome.search.index import ISBN_MATCH_SCORE, SearchIndex
from tome.search.matcher import fuzzy_match, levenshtein_distance
from tome.search.metadata_store import IndexMetadata, IndexMetadataStore
from tome.search.normalizer import normalize_for_search, tokenize
from tome.search.store import RecordStore

__all__ = [
    "ISBN_MATCH_SCORE",
    "CoordinatorState",
    "IndexMetadata",
    "IndexMetadataStore",
    "IndexStats",
    "MatchKind",
    "RecordStore",
    "SearchCoordinator",
    "SearchIndex",
    "SearchResult",
    "SearchableEntry",
    "fuzzy_match",
    "levenshtein_distance",
    "normalize_for_search",
    "tokenize",
]
