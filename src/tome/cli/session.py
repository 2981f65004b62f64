# ABOUTME: Helpers for running CLI commands against an open, search-ready Library.
# ABOUTME: Opens the collection, rebuilds the index with a progress bar, and closes cleanly.

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar
from uuid import UUID

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from tome.core.library import Library
from tome.db.connection import UnsupportedSchemaError
from tome.db.mapping import BookRecord

T = TypeVar("T")

_console = Console()


def make_progress(console: Console) -> Progress:
    """Create a transient Rich progress bar for index rebuilds."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    )


async def rebuild_with_progress(library: Library, console: Console, *, force: bool) -> bool:
    """Prepare the library's index, drawing a progress bar if a rebuild runs.

    With ``force`` the index is rebuilt even when it looks fresh.
    """
    with make_progress(console) as progress:
        task_id = progress.add_task("Building search index", total=1.0)

        def on_progress(value: float) -> None:
            progress.update(task_id, completed=value)

        if force:
            await library.coordinator.load_persisted()
            await library.coordinator.rebuild_index(library.catalog, on_progress=on_progress)
            return True
        return await library.prepare(on_progress=on_progress)


def run_with_library(
    data_dir: Path,
    action: Callable[[Library], Awaitable[T]],
) -> T:
    """Open the library under ``data_dir``, run ``action``, and always close it."""

    async def _run() -> T:
        try:
            library = Library.open(data_dir)
        except UnsupportedSchemaError as exc:
            _console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        try:
            return await action(library)
        finally:
            await library.close()

    return asyncio.run(_run())


def resolve_book(library: Library, book_ref: str, console: Console) -> BookRecord:
    """Find a book by full UUID or unique id prefix, or exit with an error."""
    try:
        record = library.catalog.get_by_id(UUID(book_ref))
    except ValueError:
        matches = library.catalog.find_by_id_prefix(book_ref)
        if len(matches) > 1:
            console.print(f"[red]Book id '{book_ref}' is ambiguous ({len(matches)} matches).[/red]")
            raise SystemExit(1) from None
        record = matches[0] if matches else None

    if record is None:
        console.print(f"[red]Book {book_ref} not found.[/red]")
        raise SystemExit(1)
    return record


def short_id(book_id: UUID) -> str:
    return str(book_id)[:8]
