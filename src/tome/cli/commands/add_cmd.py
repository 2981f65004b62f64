# ABOUTME: The `tome add` command for adding a book to the collection.
# ABOUTME: Takes fields from options, optionally pre-filled from Open Library by ISBN.

import re
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console

from tome.cli.options import data_dir_option
from tome.cli.session import rebuild_with_progress, run_with_library, short_id
from tome.core.library import Library
from tome.db.catalog import DuplicateBookError
from tome.metadata.provider import MetadataProvider
from tome.metadata.types import READING_STATUSES, BookMetadata

console = Console()

_ISBN_STRIP_RE = re.compile(r"[\s-]")


def _lookup_metadata(isbn: str) -> BookMetadata | None:
    """Look an ISBN up on Open Library, closing the HTTP client afterwards."""
    from tome.metadata.http import TomeHttpClient
    from tome.metadata.openlibrary import OpenLibraryProvider

    with TomeHttpClient() as http_client:
        provider: MetadataProvider = OpenLibraryProvider(http_client=http_client)
        return provider.lookup_isbn(isbn)


def split_isbn(isbn: str) -> tuple[str | None, str | None]:
    """Return (isbn10, isbn13) for a user-typed ISBN, or raise click.BadParameter."""
    clean = _ISBN_STRIP_RE.sub("", isbn).upper()
    if len(clean) == 13 and clean.isdigit():
        return None, clean
    if len(clean) == 10 and clean[:9].isdigit() and (clean[9].isdigit() or clean[9] == "X"):
        return clean, None
    raise click.BadParameter(f"'{isbn}' is not a 10- or 13-digit ISBN", param_hint="--isbn")


@click.command("add")
@click.argument("title", required=False)
@click.option("--author", "-a", "authors", multiple=True, help="Author name (repeatable).")
@click.option("--isbn", default=None, help="ISBN-10 or ISBN-13.")
@click.option("--subject", "-s", "subjects", multiple=True, help="Subject (repeatable).")
@click.option("--year", type=int, default=None, help="First publication year.")
@click.option("--notes", default=None, help="Personal notes.")
@click.option(
    "--status",
    type=click.Choice(READING_STATUSES),
    default="to_read",
    show_default=True,
    help="Reading status.",
)
@click.option(
    "--lookup",
    is_flag=True,
    default=False,
    help="Fetch missing details from Open Library using --isbn.",
)
@data_dir_option
def add(
    title: str | None,
    authors: tuple[str, ...],
    isbn: str | None,
    subjects: tuple[str, ...],
    year: int | None,
    notes: str | None,
    status: str,
    lookup: bool,
    data_dir: Path,
) -> None:
    """Add a book to the collection."""
    isbn10, isbn13 = split_isbn(isbn) if isbn else (None, None)

    looked_up: BookMetadata | None = None
    if lookup:
        if not isbn:
            raise click.UsageError("--lookup requires --isbn.")
        looked_up = _lookup_metadata(isbn10 or isbn13 or "")
        if looked_up is None:
            console.print("[yellow]No Open Library match; using the details given.[/yellow]")

    if looked_up is None and not title:
        raise click.UsageError("A title is required unless --lookup finds the book.")

    metadata = looked_up or BookMetadata(title=title or "")
    overrides: dict = {"reading_status": status}
    if title:
        overrides["title"] = title
    if authors:
        overrides["authors"] = list(authors)
    if subjects:
        overrides["subjects"] = list(subjects)
    if year is not None:
        overrides["first_publish_year"] = year
    if notes is not None:
        overrides["personal_notes"] = notes
    if isbn10:
        overrides["isbn10"] = isbn10
    if isbn13:
        overrides["isbn13"] = isbn13
    metadata = replace(metadata, **overrides)

    async def _add(library: Library) -> None:
        await rebuild_with_progress(library, console, force=False)
        try:
            record = library.add_book(metadata)
        except DuplicateBookError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(
            f"Added [bold]{record.title}[/bold] [dim]({short_id(record.id)})[/dim]."
        )

    run_with_library(data_dir, _add)
