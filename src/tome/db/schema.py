# ABOUTME: SQL DDL statements for the Tome collection database schema.
# ABOUTME: Defines the books and tags tables, lookup indexes, and schema versioning.

SCHEMA_VERSION = 1

SCHEMA_V1 = """
-- Canonical book records. id is a UUID string assigned by the application.
CREATE TABLE books (
    id                 TEXT PRIMARY KEY,
    title              TEXT NOT NULL,
    authors            TEXT NOT NULL DEFAULT '[]',
    isbn10             TEXT,
    isbn13             TEXT,
    subjects           TEXT NOT NULL DEFAULT '[]',
    publishers         TEXT NOT NULL DEFAULT '[]',
    first_publish_year INTEGER,
    description        TEXT,
    language           TEXT,
    personal_notes     TEXT NOT NULL DEFAULT '',
    reading_status     TEXT NOT NULL DEFAULT 'to_read',
    identifiers        TEXT NOT NULL DEFAULT '{}',
    date_added         TEXT NOT NULL,
    date_modified      TEXT NOT NULL
);

CREATE UNIQUE INDEX idx_books_isbn13 ON books(isbn13) WHERE isbn13 IS NOT NULL;
CREATE INDEX idx_books_isbn10 ON books(isbn10) WHERE isbn10 IS NOT NULL;
CREATE INDEX idx_books_date_added ON books(date_added);

-- User-defined tags. color_hex is a display hint such as "#007AFF".
CREATE TABLE tags (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL UNIQUE COLLATE NOCASE,
    color_hex TEXT NOT NULL DEFAULT '#007AFF'
);

CREATE TABLE book_tags (
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    tag_id  INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (book_id, tag_id)
);

CREATE INDEX idx_book_tags_tag ON book_tags(tag_id);

CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""
