# ABOUTME: The `tome index` command group for inspecting and maintaining the search index.
# ABOUTME: Provides status, rebuild, and clear subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tome.cli.options import data_dir_option
from tome.cli.session import rebuild_with_progress, run_with_library
from tome.core.library import Library
from tome.search.coordinator import IndexStats

console = Console()


@click.group("index")
def index() -> None:
    """Inspect and maintain the search index."""


@index.command("status")
@data_dir_option
def index_status(data_dir: Path) -> None:
    """Show what the persisted index metadata says about freshness."""

    async def _status(library: Library) -> None:
        metadata = await library.coordinator.load_persisted()
        book_count = library.catalog.fetch_count()
        indexed = len(metadata.book_ids) if metadata else 0
        stats = IndexStats(
            count=indexed, last_indexed_at=metadata.last_updated if metadata else None
        )

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=16)
        table.add_column("Value")
        table.add_row("Books", str(book_count))
        table.add_row("Indexed", str(indexed))
        table.add_row("Last indexed", stats.formatted_last_indexed)
        stale = metadata is None or indexed != book_count
        table.add_row("Needs rebuild", "[yellow]yes[/yellow]" if stale else "no")
        console.print(table)

    run_with_library(data_dir, _status)


@index.command("rebuild")
@data_dir_option
def index_rebuild(data_dir: Path) -> None:
    """Rebuild the search index from the catalog."""

    async def _rebuild(library: Library) -> None:
        await rebuild_with_progress(library, console, force=True)
        console.print(f"Indexed {library.coordinator.count} book(s).")

    run_with_library(data_dir, _rebuild)


@index.command("clear")
@data_dir_option
def index_clear(data_dir: Path) -> None:
    """Delete the persisted index metadata."""

    async def _clear(library: Library) -> None:
        await library.coordinator.clear_persisted_data()
        console.print("Cleared search index metadata.")

    run_with_library(data_dir, _clear)
