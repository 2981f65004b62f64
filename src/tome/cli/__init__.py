# ABOUTME: CLI package for Tome, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click

from tome.cli.commands import (
    add_cmd,
    edit_cmd,
    index_cmd,
    info_cmd,
    ls_cmd,
    rm_cmd,
    search_cmd,
    tag_cmd,
)


@click.group()
@click.version_option(package_name="tome")
@click.option("-v", "--verbose", count=True, help="Log progress (-v) or debug detail (-vv).")
def cli(verbose: int) -> None:
    """Tome - a personal book collection with fast local search."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(edit_cmd.edit)
cli.add_command(edit_cmd.status)
cli.add_command(rm_cmd.rm)
cli.add_command(search_cmd.search)
cli.add_command(tag_cmd.tag)
cli.add_command(index_cmd.index)
