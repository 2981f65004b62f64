# ABOUTME: The `tome ls` command for listing books in the collection.
# ABOUTME: Displays a Rich table of books, filtered by status or tag and sorted on request.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tome.cli.options import data_dir_option
from tome.cli.session import run_with_library, short_id
from tome.core.library import Library
from tome.core.listing import DEFAULT_SORT, SORT_KEYS, sort_records
from tome.metadata.types import READING_STATUSES

console = Console()


@click.command("ls")
@click.option(
    "--status",
    "status_filter",
    type=click.Choice(READING_STATUSES),
    default=None,
    help="Only show books with this reading status.",
)
@click.option("--tag", "tag_filter", default=None, help="Only show books with this tag.")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(list(SORT_KEYS)),
    default=DEFAULT_SORT,
    show_default=True,
    help="Sort order.",
)
@click.option(
    "--asc/--desc",
    "ascending",
    default=False,
    help="Sort ascending instead of descending (the default).",
)
@data_dir_option
def ls(
    status_filter: str | None,
    tag_filter: str | None,
    sort_by: str,
    ascending: bool,
    data_dir: Path,
) -> None:
    """List all books in the collection."""

    async def _list(library: Library) -> None:
        if tag_filter:
            try:
                records = library.catalog.get_books_by_tag(tag_filter)
            except ValueError as exc:
                console.print(f"[red]{exc}[/red]")
                raise SystemExit(1) from exc
        else:
            records = library.catalog.list_all()
        if status_filter:
            records = [r for r in records if r.metadata.reading_status == status_filter]

        if not records:
            console.print("[yellow]No books in the library.[/yellow]")
            return

        records = sort_records(records, sort_by, descending=not ascending)

        table = Table()
        table.add_column("ID", style="dim", width=8)
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Year", width=5)
        table.add_column("Status")

        for record in records:
            meta = record.metadata
            table.add_row(
                short_id(record.id),
                meta.title,
                meta.author or "[dim]unknown[/dim]",
                str(meta.first_publish_year or ""),
                meta.reading_status,
            )

        console.print(table)
        console.print(f"\n[dim]{len(records)} book(s)[/dim]")

    run_with_library(data_dir, _list)
