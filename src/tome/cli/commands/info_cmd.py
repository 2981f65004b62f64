# ABOUTME: The `tome info` command for displaying detailed book metadata.
# ABOUTME: Shows all fields for a single book by id or id prefix.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tome.cli.options import data_dir_option
from tome.cli.session import resolve_book, run_with_library
from tome.core.library import Library

console = Console()


@click.command("info")
@click.argument("book_ref")
@data_dir_option
def info(book_ref: str, data_dir: Path) -> None:
    """Show detailed metadata for a book by id (or the short id from `tome ls`)."""

    async def _info(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        meta = record.metadata

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")

        table.add_row("ID", str(record.id))
        table.add_row("Title", meta.title)
        table.add_row("Author", meta.author or "unknown")
        if meta.isbn13:
            table.add_row("ISBN-13", meta.isbn13)
        if meta.isbn10:
            table.add_row("ISBN-10", meta.isbn10)
        if meta.first_publish_year:
            table.add_row("First Published", str(meta.first_publish_year))
        if meta.publishers:
            table.add_row("Publishers", ", ".join(meta.publishers))
        if meta.language:
            table.add_row("Language", meta.language)
        if meta.subjects:
            table.add_row("Subjects", ", ".join(meta.subjects))
        if meta.description:
            table.add_row("Description", meta.description)
        table.add_row("Status", meta.reading_status)
        tags = library.catalog.get_tags_for_book(record.id)
        if tags:
            table.add_row("Tags", ", ".join(tags))
        if meta.personal_notes:
            table.add_row("Notes", meta.personal_notes)
        table.add_row("Added", record.date_added.isoformat(timespec="seconds"))
        table.add_row("Modified", record.date_modified.isoformat(timespec="seconds"))

        console.print(table)

    run_with_library(data_dir, _info)
