# ABOUTME: The `tome tag` command group for managing book tags.
# ABOUTME: Provides add, rm, and ls subcommands for tagging operations.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tome.cli.options import data_dir_option
from tome.cli.session import resolve_book, run_with_library
from tome.core.library import Library

console = Console()


@click.group("tag")
def tag() -> None:
    """Manage book tags."""


@tag.command("add")
@click.argument("book_ref")
@click.argument("tag_name")
@click.option("--color", "color_hex", default=None, help="Tag colour as #RRGGBB.")
@data_dir_option
def tag_add(book_ref: str, tag_name: str, color_hex: str | None, data_dir: Path) -> None:
    """Add a tag to a book."""

    async def _add(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        try:
            library.catalog.add_tag(record.id, tag_name, color_hex=color_hex)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(f"Tagged [bold]{record.title}[/bold] with [cyan]{tag_name}[/cyan].")

    run_with_library(data_dir, _add)


@tag.command("rm")
@click.argument("book_ref")
@click.argument("tag_name")
@data_dir_option
def tag_rm(book_ref: str, tag_name: str, data_dir: Path) -> None:
    """Remove a tag from a book."""

    async def _remove(library: Library) -> None:
        record = resolve_book(library, book_ref, console)
        try:
            library.catalog.remove_tag(record.id, tag_name)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(f"Removed tag [cyan]{tag_name}[/cyan] from [bold]{record.title}[/bold].")

    run_with_library(data_dir, _remove)


@tag.command("ls")
@data_dir_option
def tag_ls(data_dir: Path) -> None:
    """List all tags with book counts."""

    async def _list(library: Library) -> None:
        tags = library.catalog.list_tags()
        if not tags:
            console.print("[yellow]No tags in the library.[/yellow]")
            return

        table = Table()
        table.add_column("Tag", style="cyan")
        table.add_column("Colour")
        table.add_column("Books", style="dim", justify="right")

        for name, color_hex, count in tags:
            table.add_row(name, f"[{color_hex}]{color_hex}[/]", str(count))

        console.print(table)

    run_with_library(data_dir, _list)
