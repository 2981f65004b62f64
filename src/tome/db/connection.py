# ABOUTME: SQLite database connection management for the Tome collection.
# ABOUTME: Opens or creates library.db, applies the schema, and refuses newer databases.

import sqlite3
from pathlib import Path

from tome.db.schema import SCHEMA_V1, SCHEMA_VERSION

DB_FILENAME = "library.db"
DEFAULT_DATA_DIR = Path.home() / ".tome"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / DB_FILENAME

# Milliseconds a writer waits on a locked database before giving up.
_BUSY_TIMEOUT_MS = 5000


class UnsupportedSchemaError(Exception):
    """Raised when a database was written by a newer Tome schema."""


def _has_schema(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    return row is not None


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied schema version, or 0 for an empty database."""
    if not _has_schema(conn):
        return 0
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Tome collection database.

    Missing parent directories are created and the schema is applied to a
    fresh file. Connections use WAL journaling and the sqlite3.Row factory.

    Args:
        path: Database file. Defaults to ~/.tome/library.db.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        UnsupportedSchemaError: If the file's schema is newer than this code.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(f"PRAGMA busy_timeout={_BUSY_TIMEOUT_MS}")

    version = get_schema_version(conn)
    if version == 0:
        conn.executescript(SCHEMA_V1)
    elif version > SCHEMA_VERSION:
        conn.close()
        raise UnsupportedSchemaError(
            f"{db_path} uses schema version {version}; this Tome supports {SCHEMA_VERSION}"
        )

    return conn
