# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from markban import state as app_state
from markban.terminal import board, configuration, task
from markban.terminal.custom_typer import AliasedTyperGroup
from markban.view import state as view_state

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="markban - Kanban boards kept as markdown files",
    no_args_is_help=True,
)
app.add_typer(configuration.app, name="config, c")
app.command(name="init, i")(board.init)
app.command(name="board, b")(board.board)
app.command(name="add, a", no_args_is_help=True)(task.add)
app.command(name="show", no_args_is_help=True)(task.show)
app.command(name="edit, e", no_args_is_help=True)(task.edit)
app.command(name="move, mv", no_args_is_help=True)(task.move)
app.command(name="rename, rn", no_args_is_help=True)(task.rename)
app.command(name="comment, cm", no_args_is_help=True)(task.comment)
app.command(name="remove, rm", no_args_is_help=True)(task.remove)
app.command(name="track")(task.track)
app.command(name="find, f")(task.find)
app.command(name="sort", no_args_is_help=True)(board.sort)
app.command(name="sprint")(board.sprint)
app.command(name="status, s")(board.status)
app.command(name="burndown, bd")(board.burndown)
app.command(name="validate")(board.validate)
app.command(name="archive", no_args_is_help=True)(task.archive)
app.command(name="restore", no_args_is_help=True)(task.restore)
app.command(name="archived")(task.archived)


@app.callback()
def main_callback(
    root: Annotated[
        Path,
        typer.Option(
            "--root",
            "-C",
            help="Folder holding the board",
            file_okay=False,
        ),
    ] = Path("."),
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log file reads, writes and changes"),
    ] = False,
) -> None:
    """
    markban - Kanban boards kept as markdown files

    Global options that apply to all commands.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    app_state.set_root(root)
    if no_header:
        view_state.set_show_header(False)


def run() -> None:
    app()
