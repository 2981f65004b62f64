# ABOUTME: Open Library metadata provider used to pre-fill books added by ISBN.
# ABOUTME: Reads the edition, then enriches from the works and author endpoints.

import logging
import re
from dataclasses import replace

from tome.metadata.http import HttpClient, MetadataFetchError
from tome.metadata.openlibrary_parser import (
    parse_author_name,
    parse_description,
    parse_edition,
    parse_work_author_keys,
    parse_work_subjects,
    parse_year,
)
from tome.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
_ISBN_STRIP_RE = re.compile(r"[\s-]")


class OpenLibraryProvider:
    """Metadata provider backed by the Open Library API.

    Uses a dependency-injected HttpClient for testability. Enrichment calls
    are best-effort: a failed works or author request keeps what the edition
    already gave us.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "openlibrary"

    def lookup_isbn(self, isbn: str) -> BookMetadata | None:
        """Look up a book by ISBN-10 or ISBN-13. Returns None if unknown or unreachable."""
        clean_isbn = _ISBN_STRIP_RE.sub("", isbn)
        if not clean_isbn:
            return None

        try:
            data = self._http.get(f"{_OL_BASE}/isbn/{clean_isbn}.json")
        except MetadataFetchError as exc:
            if exc.not_found:
                logger.info("ISBN %s not found on Open Library", clean_isbn)
            else:
                logger.warning("ISBN lookup failed for %s: %s", clean_isbn, exc)
            return None

        edition = parse_edition(data)
        metadata = edition.metadata
        author_keys = edition.author_keys

        if edition.work_key:
            metadata, work_author_keys = self._enrich_from_work(metadata, edition.work_key)
            author_keys = author_keys or work_author_keys

        authors = self._resolve_authors(author_keys)
        if authors:
            metadata = replace(metadata, authors=authors)

        # The edition endpoint sometimes lists only the other ISBN form.
        if len(clean_isbn) == 13 and not metadata.isbn13:
            metadata = replace(metadata, isbn13=clean_isbn)
        elif len(clean_isbn) == 10 and not metadata.isbn10:
            metadata = replace(metadata, isbn10=clean_isbn)

        return metadata

    def _enrich_from_work(
        self, metadata: BookMetadata, work_key: str
    ) -> tuple[BookMetadata, list[str]]:
        """Fill description, subjects, and first publish year from the works record."""
        try:
            data = self._http.get(f"{_OL_BASE}{work_key}.json")
        except MetadataFetchError as exc:
            logger.warning("Works lookup failed for %s: %s", work_key, exc)
            return metadata, []

        updates: dict = {}
        if not metadata.description:
            description = parse_description(data)
            if description:
                updates["description"] = description
        if not metadata.subjects:
            subjects = parse_work_subjects(data)
            if subjects:
                updates["subjects"] = subjects
        first_year = parse_year(data.get("first_publish_date"))
        if first_year is not None:
            updates["first_publish_year"] = first_year

        enriched = replace(metadata, **updates) if updates else metadata
        return enriched, parse_work_author_keys(data)

    def _resolve_authors(self, author_keys: list[str]) -> list[str]:
        names = []
        for key in author_keys:
            try:
                data = self._http.get(f"{_OL_BASE}{key}.json")
            except MetadataFetchError as exc:
                logger.warning("Author lookup failed for %s: %s", key, exc)
                continue
            name = parse_author_name(data)
            if name:
                names.append(name)
        return names
