# SPDX-License-Identifier: MIT

from itertools import zip_longest
from typing import Optional

import pendulum
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from markban.model.index import Index
from markban.model.options import BoardOptions
from markban.model.task import Task
from markban.model.validation import ValidationError
from markban.service.due import due_data
from markban.service.workload import task_completed
from markban.view.header import header

COMPLETED_TASK_COLOR = "grey50"
OVERDUE_TASK_COLOR = "red"


def board_view(
    index: Index,
    tasks: list[Task],
    options: BoardOptions,
    show_due: bool = True,
    now: Optional[pendulum.DateTime] = None,
) -> None:
    """Print the board with one table column per board column."""
    header(index["name"], "board")

    tasks_by_id = {task["id"]: task for task in tasks}

    board_table = Table(box=box.SIMPLE_HEAD, expand=True)
    for column_name, task_ids in index["columns"].items():
        board_table.add_column(f"{column_name} ({len(task_ids)})")

    cells = [
        [
            __task_cell(task_id, tasks_by_id.get(task_id), column_name, options, show_due, now)
            for task_id in task_ids
        ]
        for column_name, task_ids in index["columns"].items()
    ]
    for row in zip_longest(*cells, fillvalue=""):
        board_table.add_row(*row)

    console = Console()
    console.print(board_table)


def validation_view(board_name: str, result: list[ValidationError] | bool) -> None:
    header(board_name, "validate")

    console = Console()
    if result is True:
        console.print("[green]Everything OK[/green]")
        return

    errors_table = Table(box=box.SIMPLE)
    errors_table.add_column("task")
    errors_table.add_column("error", style="red")
    for error in result if isinstance(result, list) else []:
        errors_table.add_row(error["task"] or "index", error["errors"])
    console.print(errors_table)


def __task_cell(
    task_id: str,
    task: Optional[Task],
    column_name: str,
    options: BoardOptions,
    show_due: bool,
    now: Optional[pendulum.DateTime],
) -> str:
    if task is None:
        return f"[{OVERDUE_TASK_COLOR}]{task_id} (missing)[/{OVERDUE_TASK_COLOR}]"

    lines = [f"[bold]{escape(task['name'])}[/bold]", f"[dim]{task_id}[/dim]"]
    if task["metadata"]["tags"]:
        lines.append(escape(" ".join(f"#{tag}" for tag in task["metadata"]["tags"])))
    if task["metadata"]["assigned"]:
        lines.append(escape(f"@{task['metadata']['assigned']}"))
    if task["sub_tasks"]:
        done = sum(1 for sub_task in task["sub_tasks"] if sub_task["completed"])
        lines.append(f"{done}/{len(task['sub_tasks'])} sub-tasks")

    if show_due:
        data = due_data(task, column_name, options, now)
        if data is not None:
            if data["overdue"]:
                lines.append(
                    f"[{OVERDUE_TASK_COLOR}]{data['due_message']}[/{OVERDUE_TASK_COLOR}]"
                )
            else:
                lines.append(data["due_message"])

    cell = "\n".join(lines)
    if task_completed(task, column_name, options):
        cell = f"[{COMPLETED_TASK_COLOR}]{cell}[/{COMPLETED_TASK_COLOR}]"
    return cell + "\n"
