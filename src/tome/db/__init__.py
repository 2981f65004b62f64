# ABOUTME: Public API for the Tome collection database layer.
# ABOUTME: Exports connection management, catalog operations, and record types.

from tome.db.catalog import DuplicateBookError, LibraryCatalog
from tome.db.connection import (
    DEFAULT_DATA_DIR,
    DEFAULT_DB_PATH,
    UnsupportedSchemaError,
    open_library,
)
from tome.db.mapping import BookRecord

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
    "BookRecord",
    "DuplicateBookError",
    "LibraryCatalog",
    "UnsupportedSchemaError",
    "open_library",
]
