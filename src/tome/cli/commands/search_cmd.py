# ABOUTME: The `tome search` command for fuzzy search of the collection.
# ABOUTME: Matches typo-tolerant queries against title, author, subject, and ISBN.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tome.cli.options import data_dir_option
from tome.cli.session import rebuild_with_progress, run_with_library, short_id
from tome.core.library import Library

console = Console()


@click.command("search")
@click.argument("query")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.option("--scores", is_flag=True, default=False, help="Show match kind and score.")
@data_dir_option
def search(query: str, limit: int, scores: bool, data_dir: Path) -> None:
    """Search the collection by title, author, subject, or ISBN."""

    async def _search(library: Library) -> None:
        await rebuild_with_progress(library, console, force=False)
        hits = library.search_with_scores(query)

        if not hits:
            console.print("[yellow]No results found.[/yellow]")
            return

        table = Table()
        table.add_column("ID", style="dim", width=8)
        table.add_column("Title", style="bold")
        table.add_column("Author")
        if scores:
            table.add_column("Match")
            table.add_column("Score", justify="right")

        for record, result in hits[:limit]:
            row = [
                short_id(record.id),
                record.metadata.title,
                record.metadata.author or "[dim]unknown[/dim]",
            ]
            if scores:
                row += [result.match_kind.display_name, f"{result.score:.1f}"]
            table.add_row(*row)

        console.print(table)
        shown = min(len(hits), limit)
        suffix = f" of {len(hits)}" if shown < len(hits) else ""
        console.print(f"\n[dim]{shown}{suffix} result(s)[/dim]")

    run_with_library(data_dir, _search)
