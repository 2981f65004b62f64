# ABOUTME: Unit tests for search index metadata persistence.
# ABOUTME: Covers JSON shape, atomic save, tolerant load, and clear.

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import pytest

from tome.search.metadata_store import (
    INDEX_METADATA_FILENAME,
    IndexMetadata,
    IndexMetadataStore,
)


@pytest.fixture()
def store(tmp_path: Path) -> IndexMetadataStore:
    return IndexMetadataStore.in_directory(tmp_path)


@pytest.fixture()
def metadata() -> IndexMetadata:
    return IndexMetadata(
        book_ids=frozenset({uuid4(), uuid4()}),
        last_updated=datetime(2024, 3, 1, 9, 30, tzinfo=UTC),
    )


class TestIndexMetadata:
    """Tests for the IndexMetadata JSON document."""

    def test_to_json_shape(self, metadata: IndexMetadata) -> None:
        """Serialized keys are bookIds, lastUpdated, and version."""
        doc = metadata.to_json()
        assert set(doc) == {"bookIds", "lastUpdated", "version"}
        assert doc["version"] == 1
        assert doc["bookIds"] == sorted(str(i) for i in metadata.book_ids)
        assert doc["lastUpdated"] == "2024-03-01T09:30:00+00:00"

    def test_from_json_rejects_wrong_version(self, metadata: IndexMetadata) -> None:
        """Documents with another version are refused."""
        doc = metadata.to_json() | {"version": 2}
        with pytest.raises(ValueError, match="version"):
            IndexMetadata.from_json(doc)

    def test_from_json_rejects_bad_shape(self) -> None:
        """Non-object documents and missing keys are refused."""
        with pytest.raises(ValueError):
            IndexMetadata.from_json([1, 2, 3])
        with pytest.raises(ValueError):
            IndexMetadata.from_json({"version": 1, "bookIds": []})

    def test_from_json_rejects_naive_timestamp(self) -> None:
        """A lastUpdated without a UTC offset is refused."""
        doc = {"bookIds": [], "lastUpdated": "2024-01-01T00:00:00", "version": 1}
        with pytest.raises(ValueError, match="no timezone"):
            IndexMetadata.from_json(doc)


class TestIndexMetadataStore:
    """Tests for IndexMetadataStore save, load, and clear."""

    def test_uses_fixed_filename(self, tmp_path: Path, store: IndexMetadataStore) -> None:
        """The store writes search_index.json inside the data directory."""
        assert store.path == tmp_path / INDEX_METADATA_FILENAME

    def test_save_then_load(self, store: IndexMetadataStore, metadata: IndexMetadata) -> None:
        """A saved document loads back equal."""
        assert store.save(metadata) is True
        assert store.load() == metadata

    def test_save_writes_readable_json(
        self, store: IndexMetadataStore, metadata: IndexMetadata
    ) -> None:
        """The file on disk is plain JSON with camelCase keys."""
        store.save(metadata)
        on_disk = json.loads(store.path.read_text(encoding="utf-8"))
        assert on_disk == metadata.to_json()

    def test_save_overwrites_and_leaves_no_temp_files(
        self, tmp_path: Path, store: IndexMetadataStore, metadata: IndexMetadata
    ) -> None:
        """Saving twice replaces the file and cleans up temporaries."""
        store.save(metadata)
        newer = IndexMetadata(book_ids=frozenset(), last_updated=datetime.now(UTC))
        store.save(newer)

        assert store.load() == newer
        assert [p.name for p in tmp_path.iterdir()] == [INDEX_METADATA_FILENAME]

    def test_save_creates_directory(self, tmp_path: Path, metadata: IndexMetadata) -> None:
        """Missing parent directories are created."""
        store = IndexMetadataStore.in_directory(tmp_path / "nested" / "dir")
        assert store.save(metadata) is True
        assert store.path.exists()

    def test_save_failure_returns_false(
        self, tmp_path: Path, metadata: IndexMetadata, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unwritable location is logged and reported, never raised."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        store = IndexMetadataStore.in_directory(blocker)

        with caplog.at_level(logging.WARNING):
            assert store.save(metadata) is False
        assert "Failed to save" in caplog.text

    def test_load_missing_is_none(self, store: IndexMetadataStore) -> None:
        """No file means no metadata."""
        assert store.load() is None

    def test_load_corrupt_is_none(
        self, store: IndexMetadataStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Unparseable content is ignored with a warning."""
        store.path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert store.load() is None
        assert "invalid" in caplog.text

    def test_load_wrong_version_is_none(
        self, store: IndexMetadataStore, metadata: IndexMetadata
    ) -> None:
        """A document from another format version is ignored."""
        store.path.write_text(json.dumps(metadata.to_json() | {"version": 99}))
        assert store.load() is None

    def test_load_bad_uuid_is_none(self, store: IndexMetadataStore) -> None:
        """Malformed ids invalidate the whole document."""
        doc = {"bookIds": ["nope"], "lastUpdated": "2024-01-01T00:00:00+00:00", "version": 1}
        store.path.write_text(json.dumps(doc))
        assert store.load() is None

    def test_load_naive_timestamp_is_none(self, store: IndexMetadataStore) -> None:
        """A timestamp without a timezone invalidates the document."""
        doc = {"bookIds": [str(uuid4())], "lastUpdated": "2024-01-01T00:00:00", "version": 1}
        store.path.write_text(json.dumps(doc))
        assert store.load() is None

    def test_load_unreadable_is_none(self, tmp_path: Path) -> None:
        """A path that can't be read as a file yields None."""
        (tmp_path / INDEX_METADATA_FILENAME).mkdir()
        assert IndexMetadataStore.in_directory(tmp_path).load() is None

    def test_clear(self, store: IndexMetadataStore, metadata: IndexMetadata) -> None:
        """clear removes the file; clearing again is harmless."""
        store.save(metadata)
        store.clear()
        assert not store.path.exists()
        store.clear()
        assert store.load() is None
