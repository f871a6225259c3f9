# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from markban import configuration
from markban.repository.configuration import CONFIGURATION_REPO
from markban.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    __config_table(Table())


@app.command("set, s")
def set(
    author: Annotated[
        Optional[str],
        typer.Option("--author", help="Default author for comments"),
    ] = None,
    remove_author: Annotated[
        bool,
        typer.Option("--remove-author", help="Fall back to the login name for comments"),
    ] = False,
    columns: Annotated[
        Optional[list[str]],
        typer.Option("--column", help="Default columns for new boards (accepts multiple)"),
    ] = None,
    show_due: Annotated[
        Optional[bool],
        typer.Option("--show-due/--no-show-due", help="Show due status on the board"),
    ] = None,
    date_format: Annotated[
        Optional[str],
        typer.Option("--date-format", help="Display format for dates (Pendulum format)"),
    ] = None,
) -> None:
    """
    Update configuration settings.
    """
    CONFIGURATION_REPO.update_config(
        author=author,
        remove_author=remove_author,
        columns=columns,
        show_due=show_due,
        date_format=date_format,
    )

    Console().print("[green]Configuration updated successfully![/green]\n")
    __config_table(Table(title="Updated Configuration", show_header=True))


def __config_table(table: Table) -> None:
    config = CONFIGURATION_REPO.get_config()

    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("author", config["author"] or "None")
    table.add_row("columns", ", ".join(config["columns"]))
    table.add_row("show_due", "✓ Enabled" if config["show_due"] else "✗ Disabled")
    table.add_row("date_format", config.get("date_format", "YYYY-MM-DD HH:mm"))
    table.add_row("config_path", str(configuration.APP_CONFIG_PATH))

    Console().print(table)
