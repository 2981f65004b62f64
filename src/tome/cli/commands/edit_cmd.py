# ABOUTME: The `tome edit` and `tome status` commands for changing a book in place.
# ABOUTME: Both go through Library.update_book so the search index follows the catalog.

from pathlib import Path

import click
from rich.console import Console

from tome.cli.commands.add_cmd import split_isbn
from tome.cli.options import data_dir_option
from tome.cli.session import rebuild_with_progress, resolve_book, run_with_library
from tome.core.library import Library
from tome.db.catalog import DuplicateBookError
from tome.metadata.types import READING_STATUSES

console = Console()


@click.command("edit")
@click.argument("book_ref")
@click.option("--title", default=None, help="New title.")
@click.option(
    "--author", "-a", "authors", multiple=True, help="Author name (repeatable; replaces all)."
)
@click.option("--isbn", default=None, help="ISBN-10 or ISBN-13.")
@click.option(
    "--subject", "-s", "subjects", multiple=True, help="Subject (repeatable; replaces all)."
)
@click.option("--year", type=int, default=None, help="First publication year.")
@click.option("--notes", default=None, help="Personal notes (an empty string clears them).")
@click.option("--status", type=click.Choice(READING_STATUSES), default=None, help="Reading status.")
@data_dir_option
def edit(
    book_ref: str,
    title: str | None,
    authors: tuple[str, ...],
    isbn: str | None,
    subjects: tuple[str, ...],
    year: int | None,
    notes: str | None,
    status: str | None,
    data_dir: Path,
) -> None:
    """Change fields of a book by id (or the short id from `tome ls`)."""
    fields: dict = {}
    if title is not None:
        if not title.strip():
            raise click.BadParameter("title must not be empty", param_hint="--title")
        fields["title"] = title
    if authors:
        fields["authors"] = list(authors)
    if isbn is not None:
        isbn10, isbn13 = split_isbn(isbn)
        if isbn10:
            fields["isbn10"] = isbn10
        if isbn13:
            fields["isbn13"] = isbn13
    if subjects:
        fields["subjects"] = list(subjects)
    if year is not None:
        fields["first_publish_year"] = year
    if notes is not None:
        fields["personal_notes"] = notes
    if status is not None:
        fields["reading_status"] = status

    if not fields:
        console.print("[yellow]No changes given.[/yellow]")
        return

    async def _edit(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        await rebuild_with_progress(library, console, force=False)
        try:
            updated = library.update_book(record.id, **fields)
        except (DuplicateBookError, ValueError) as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        changed = ", ".join(sorted(fields))
        console.print(f"Updated [bold]{updated.title}[/bold] ({changed}).")

    run_with_library(data_dir, _edit)


@click.command("status")
@click.argument("book_ref")
@click.argument("new_status", required=False, type=click.Choice(READING_STATUSES))
@data_dir_option
def status(book_ref: str, new_status: str | None, data_dir: Path) -> None:
    """Set a book's reading status, or advance it to the next one if none is given."""

    async def _status(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        await rebuild_with_progress(library, console, force=False)
        if new_status is None:
            updated = library.toggle_reading_status(record.id)
        else:
            updated = library.update_book(record.id, reading_status=new_status)
        console.print(
            f"[bold]{updated.title}[/bold] is now [cyan]{updated.metadata.reading_status}[/cyan]."
        )

    run_with_library(data_dir, _status)
