# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console

from markban.model.options import resolve_options
from markban.model.sorter import Sorter
from markban.repository.configuration import CONFIGURATION_REPO
from markban.state import get_project_repository
from markban.terminal.parse import parse_datetime, parse_sorter, parse_sprint
from markban.time import Resolution, datetime_to_display_local_datetime_str
from markban.view.board import board_view, validation_view
from markban.view.burndown import burndown_view
from markban.view.status import status_view, untracked_view

DATE_HELP = "valid inputs: YYYY-MM-DD, YYYY-MM-DD HH:mm, now, today, yesterday, tomorrow, or day offset like 1, -1"


def init(
    name: Annotated[Optional[str], typer.Option("--name", "-n")] = None,
    description: Annotated[str, typer.Option("--description", "-d")] = "",
    columns: Annotated[
        Optional[list[str]],
        typer.Option("--column", "-c", help="accepts multiple column options"),
    ] = None,
) -> None:
    """Create a board in the current folder, or update an existing one."""
    repository = get_project_repository()
    config = CONFIGURATION_REPO.get_config()

    board_name = name
    if board_name is None:
        board_name = (
            repository.load_index()["name"]
            if repository.initialised()
            else repository.root.resolve().name
        )

    index = repository.initialise(
        board_name,
        description,
        columns if columns else config["columns"],
    )
    Console().print(
        f"[green]Initialised board '{index['name']}' in {repository.main_folder}[/green]"
    )


def board() -> None:
    """Show the board."""
    repository = get_project_repository()
    config = CONFIGURATION_REPO.get_config()

    index = repository.load_index()
    board_view(
        index,
        repository.load_all_tracked_tasks(index),
        resolve_options(index["options"]),
        show_due=config["show_due"],
    )


def sort(
    column: str,
    sorters: Annotated[
        list[str],
        typer.Argument(help="'[asc|desc] field[:regex]', most significant first"),
    ],
    save: Annotated[
        bool,
        typer.Option("--save", "-s", help="keep the column sorted from now on"),
    ] = False,
) -> None:
    """Sort a column."""
    parsed: list[Sorter] = [parse_sorter(sorter) for sorter in sorters]
    repository = get_project_repository()
    repository.sort(column, parsed, save=save)
    Console().print(f"[green]Sorted '{column}'[/green]")


def sprint(
    name: Annotated[Optional[str], typer.Option("--name", "-n")] = None,
    description: Annotated[str, typer.Option("--description", "-d")] = "",
    start: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--start", "-s", parser=parse_datetime, help=DATE_HELP),
    ] = None,
) -> None:
    """Start a new sprint."""
    repository = get_project_repository()
    new_sprint = repository.sprint(name, description, start)
    Console().print(
        f"[green]Started sprint {new_sprint['number']} '{new_sprint['name']}' at "
        f"{datetime_to_display_local_datetime_str(new_sprint['start'])}[/green]"
    )


def status(
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="only show task counts")
    ] = False,
    untracked: Annotated[
        bool, typer.Option("--untracked", "-u", help="list untracked task files")
    ] = False,
    due: Annotated[bool, typer.Option("--due", help="show due tasks")] = False,
    sprint: Annotated[
        Optional[str],
        typer.Option("--sprint", "-s", help="sprint number or name"),
    ] = None,
    dates: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--date", "-d", parser=parse_datetime, help=DATE_HELP),
    ] = None,
) -> None:
    """Show board statistics."""
    repository = get_project_repository()
    report = repository.status(
        quiet=quiet,
        untracked=untracked,
        due=due,
        sprint=parse_sprint(sprint) if sprint is not None else None,
        dates=dates,
    )
    if quiet and untracked:
        untracked_view(report["untracked_tasks"] or [])
        return
    status_view(report)


def burndown(
    sprints: Annotated[
        Optional[list[str]],
        typer.Option("--sprint", "-s", help="sprint number or name, repeatable"),
    ] = None,
    dates: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--date", "-d", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    assigned: Annotated[Optional[str], typer.Option("--assigned", "-a")] = None,
    columns: Annotated[
        Optional[list[str]], typer.Option("--column", "-c", help="repeatable")
    ] = None,
    normalise: Annotated[
        Optional[Resolution],
        typer.Option("--normalise", "-n", help="truncate dates to this resolution"),
    ] = None,
) -> None:
    """Show burndown samples for the current sprint, chosen sprints or dates."""
    repository = get_project_repository()
    report = repository.burndown(
        sprints=[parse_sprint(s) for s in sprints] if sprints else None,
        dates=dates,
        assigned=assigned,
        columns=columns,
        normalise=normalise,
    )
    burndown_view(repository.load_index()["name"], report)


def validate(
    save: Annotated[
        bool, typer.Option("--save", help="re-write every file that is valid")
    ] = False,
) -> None:
    """Check that the index and every task file can be read."""
    repository = get_project_repository()
    result = repository.validate(save=save)

    board_name = repository.root.resolve().name
    if result is True:
        board_name = repository.load_index()["name"]
    validation_view(board_name, result)
    if result is not True:
        raise typer.Exit(1)
