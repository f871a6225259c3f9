# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from markban.model.index import Index
from markban.model.options import BoardOptions
from markban.model.task import Task
from markban.service.board import find_task_column
from markban.service.due import due_data
from markban.service.workload import remaining_workload, task_progress, task_workload
from markban.time import (
    datetime_to_display_local_datetime_str,
    datetime_to_display_local_datetime_str_optional,
)
from markban.view.header import header

DATE_FIELDS = ("created", "updated", "started", "completed", "due")


def tasks_view(
    board_name: str,
    report_name: str,
    tasks: list[Task],
    index: Index,
    options: BoardOptions,
) -> None:
    header(board_name, report_name)

    tasks_table = Table(box=box.SIMPLE)
    tasks_table.add_column("id")
    tasks_table.add_column("name")
    tasks_table.add_column("column")
    tasks_table.add_column("assigned")
    tasks_table.add_column("tags")
    tasks_table.add_column("workload", justify="right")
    tasks_table.add_column("due")

    for task in tasks:
        column_name = find_task_column(index, task["id"])
        data = due_data(task, column_name, options)
        tasks_table.add_row(
            task["id"],
            task["name"],
            column_name or "",
            task["metadata"]["assigned"] or "",
            ", ".join(task["metadata"]["tags"]),
            __number(task_workload(task, options)),
            data["due_message"] if data is not None else "",
        )

    console = Console()
    console.print(tasks_table)


def ids_view(task_ids: list[str]) -> None:
    console = Console()
    for task_id in task_ids:
        console.print(task_id, highlight=False)


def single_task_view(
    board_name: str,
    task: Task,
    column_name: Optional[str],
    options: BoardOptions,
) -> None:
    header(board_name, "task")

    task_table = Table(box=box.SIMPLE)
    task_table.add_column("property")
    task_table.add_column("value")

    task_table.add_row("id", task["id"])
    task_table.add_row("name", task["name"])
    if column_name is not None:
        task_table.add_row("column", column_name)
    if task["description"]:
        task_table.add_row("description", task["description"])

    metadata = task["metadata"]
    for field in DATE_FIELDS:
        value = datetime_to_display_local_datetime_str_optional(
            metadata[field]  # type: ignore[literal-required]
        )
        if value is not None:
            task_table.add_row(field, value)
    if metadata["assigned"]:
        task_table.add_row("assigned", metadata["assigned"])
    if metadata["tags"]:
        task_table.add_row("tags", ", ".join(metadata["tags"]))

    workload = task_workload(task, options)
    progress = task_progress(task, column_name, options)
    task_table.add_row("workload", __number(workload))
    task_table.add_row("progress", f"{progress:.0%}")
    task_table.add_row("remaining", __number(remaining_workload(workload, progress)))

    data = due_data(task, column_name, options)
    if data is not None:
        task_table.add_row("due status", data["due_message"])

    for name, value in metadata["custom_fields"].items():
        task_table.add_row(name, __custom_value(value))

    if task["sub_tasks"]:
        task_table.add_row(
            "sub-tasks",
            "\n".join(
                escape(f"[{'x' if sub_task['completed'] else ' '}] {sub_task['text']}")
                for sub_task in task["sub_tasks"]
            ),
        )
    if task["relations"]:
        task_table.add_row(
            "relations",
            "\n".join(f"{r['type']} {r['task']}".strip() for r in task["relations"]),
        )

    console = Console()
    console.print(task_table)

    if task["comments"]:
        comments_table = Table(box=box.SIMPLE, title="comments")
        comments_table.add_column("author")
        comments_table.add_column("date")
        comments_table.add_column("text")
        for comment in task["comments"]:
            comments_table.add_row(
                comment["author"],
                datetime_to_display_local_datetime_str_optional(comment["date"]) or "",
                comment["text"],
            )
        console.print(comments_table)


def __number(value: float) -> str:
    return f"{value:g}"


def __custom_value(value: object) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, pendulum.DateTime):
        return datetime_to_display_local_datetime_str(value)
    return str(value)
