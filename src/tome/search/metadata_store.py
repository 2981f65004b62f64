# ABOUTME: Durable persistence of small search-index freshness metadata as JSON.
# ABOUTME: Atomic writes; read and write failures are logged and treated as "no state".

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)

INDEX_METADATA_FILENAME = "search_index.json"
INDEX_METADATA_VERSION = 1


@dataclass(frozen=True)
class IndexMetadata:
    """What was indexed and when. Enough to decide whether to rebuild, nothing more."""

    book_ids: frozenset[UUID]
    last_updated: datetime
    version: int = INDEX_METADATA_VERSION

    def to_json(self) -> dict[str, Any]:
        return {
            "bookIds": sorted(str(book_id) for book_id in self.book_ids),
            "lastUpdated": self.last_updated.isoformat(),
            "version": self.version,
        }

    @classmethod
    def from_json(cls, data: Any) -> IndexMetadata:
        """Build from a decoded JSON document.

        Raises:
            ValueError: If the document has the wrong shape or version, or its
                timestamp carries no timezone.
        """
        if not isinstance(data, dict):
            raise ValueError("metadata document is not a JSON object")
        version = data.get("version")
        if version != INDEX_METADATA_VERSION:
            raise ValueError(f"unsupported metadata version: {version!r}")
        raw_ids = data.get("bookIds")
        raw_updated = data.get("lastUpdated")
        if not isinstance(raw_ids, list) or not isinstance(raw_updated, str):
            raise ValueError("metadata document is missing bookIds or lastUpdated")
        last_updated = datetime.fromisoformat(raw_updated)
        if last_updated.tzinfo is None:
            raise ValueError(f"lastUpdated has no timezone: {raw_updated!r}")
        return cls(
            book_ids=frozenset(UUID(str(raw)) for raw in raw_ids),
            last_updated=last_updated,
            version=version,
        )


class IndexMetadataStore:
    """Reads and writes IndexMetadata at a fixed path.

    Persistence is an optimization: the index can always be rebuilt from the
    catalog, so nothing here raises.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def in_directory(cls, data_dir: Path) -> IndexMetadataStore:
        return cls(data_dir / INDEX_METADATA_FILENAME)

    def save(self, metadata: IndexMetadata) -> bool:
        """Write metadata atomically (temp file in the same directory, then replace).

        Returns:
            True if the file was written, False if the write failed.
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(metadata.to_json(), indent=2)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to save search index metadata to %s: %s", self.path, exc)
            return False
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        logger.debug(
            "Saved search index metadata (%d ids) to %s", len(metadata.book_ids), self.path
        )
        return True

    def load(self) -> IndexMetadata | None:
        """Read persisted metadata. Missing, unreadable, or invalid files yield None."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Failed to read search index metadata at %s: %s", self.path, exc)
            return None

        try:
            return IndexMetadata.from_json(json.loads(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("Ignoring invalid search index metadata at %s: %s", self.path, exc)
            return None

    def clear(self) -> None:
        """Delete the metadata file if present."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to remove search index metadata at %s: %s", self.path, exc)
