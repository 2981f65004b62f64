# ABOUTME: The `tome rm` command for removing a book from the collection.
# ABOUTME: Deletes the catalog record and drops it from the search index.

from pathlib import Path

import click
from rich.console import Console

from tome.cli.options import data_dir_option
from tome.cli.session import rebuild_with_progress, resolve_book, run_with_library
from tome.core.library import Library

console = Console()


@click.command("rm")
@click.argument("book_ref")
@data_dir_option
def rm(book_ref: str, data_dir: Path) -> None:
    """Remove a book by id (or the short id from `tome ls`)."""

    async def _remove(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        await rebuild_with_progress(library, console, force=False)
        library.delete_book(record.id)
        console.print(f"Removed [bold]{record.title}[/bold].")

    run_with_library(data_dir, _remove)
