# ABOUTME: Shared Click options for Tome CLI commands.
# ABOUTME: Provides reusable decorators for common flags like --data-dir.

from pathlib import Path

import click

from tome.db.connection import DEFAULT_DATA_DIR

data_dir_option = click.option(
    "--data-dir",
    "data_dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="TOME_DATA_DIR",
    default=DEFAULT_DATA_DIR,
    show_default=True,
    help="Directory holding the library database and search index metadata.",
)
