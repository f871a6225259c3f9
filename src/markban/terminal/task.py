# SPDX-License-Identifier: MIT

import getpass
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console

from markban.codec.task import coerce_custom_field_value
from markban.exceptions import ColumnNotFoundError, ProjectError
from markban.model.custom_field import CustomFieldType
from markban.model.filter import FilterScalar, FilterValue, TaskFilter
from markban.model.options import BoardOptions, get_custom_field, resolve_options
from markban.model.task import Relation, Task, get_task_template
from markban.query.field import resolve_field
from markban.repository.configuration import CONFIGURATION_REPO
from markban.state import get_project_repository
from markban.terminal.parse import (
    parse_datetime,
    parse_field_assignment,
    parse_field_value,
)
from markban.view.task import ids_view, single_task_view, tasks_view

DATE_HELP = "valid inputs: YYYY-MM-DD, YYYY-MM-DD HH:mm, now, today, yesterday, tomorrow, or day offset like 1, -1"

console = Console()


def add(
    name: str,
    column: Annotated[
        Optional[str],
        typer.Option("--column", "-c", help="defaults to the first column"),
    ] = None,
    description: Annotated[str, typer.Option("--description", "-d")] = "",
    tags: Annotated[
        Optional[list[str]],
        typer.Option("--tag", "-t", help="accepts multiple tag options"),
    ] = None,
    assigned: Annotated[Optional[str], typer.Option("--assigned", "-a")] = None,
    due: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--due", "-u", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    progress: Annotated[
        Optional[float], typer.Option("--progress", "-p", min=0, max=1)
    ] = None,
    sub_tasks: Annotated[
        Optional[list[str]],
        typer.Option("--sub-task", "-st", help="accepts multiple sub-task options"),
    ] = None,
    relations: Annotated[
        Optional[list[str]],
        typer.Option("--relation", "-r", help="'[type] task-id', repeatable"),
    ] = None,
    fields: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="custom field as name=value, repeatable"),
    ] = None,
) -> None:
    """Create a task."""
    repository = get_project_repository()
    index = repository.load_index()
    options = resolve_options(index["options"])

    column_name = column
    if column_name is None:
        if not index["columns"]:
            raise ProjectError("No columns defined in the index")
        column_name = next(iter(index["columns"]))

    task = get_task_template(name, description)
    task["metadata"]["tags"] = tags or []
    task["metadata"]["assigned"] = assigned
    task["metadata"]["due"] = due
    task["metadata"]["progress"] = progress
    task["sub_tasks"] = [{"text": text, "completed": False} for text in sub_tasks or []]
    task["relations"] = [__relation(relation) for relation in relations or []]
    __apply_fields(task, fields or [], options)

    task_id = repository.create_task(task, column_name)
    index = repository.load_index()
    single_task_view(
        index["name"],
        repository.load_task(task_id, index),
        column_name,
        resolve_options(index["options"]),
    )


def show(task_id: str) -> None:
    """Show a task."""
    repository = get_project_repository()
    index = repository.load_index()
    column_name = repository.find_task_column(task_id)
    single_task_view(
        index["name"],
        repository.load_task(task_id, index),
        column_name,
        resolve_options(index["options"]),
    )


def edit(
    task_id: str,
    name: Annotated[Optional[str], typer.Option("--name", "-n")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    column: Annotated[Optional[str], typer.Option("--column", "-c")] = None,
    add_tags: Annotated[
        Optional[list[str]], typer.Option("--add-tag", "-at", help="repeatable")
    ] = None,
    remove_tags: Annotated[
        Optional[list[str]], typer.Option("--remove-tag", "-rt", help="repeatable")
    ] = None,
    assigned: Annotated[Optional[str], typer.Option("--assigned", "-a")] = None,
    remove_assigned: Annotated[
        bool, typer.Option("--remove-assigned", help="clear the assignee")
    ] = False,
    due: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--due", "-u", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    remove_due: Annotated[bool, typer.Option("--remove-due")] = False,
    progress: Annotated[
        Optional[float], typer.Option("--progress", "-p", min=0, max=1)
    ] = None,
    add_sub_tasks: Annotated[
        Optional[list[str]], typer.Option("--add-sub-task", "-ast", help="repeatable")
    ] = None,
    complete_sub_tasks: Annotated[
        Optional[list[str]],
        typer.Option("--complete-sub-task", "-cst", help="sub-task text, repeatable"),
    ] = None,
    add_relations: Annotated[
        Optional[list[str]],
        typer.Option("--add-relation", "-ar", help="'[type] task-id', repeatable"),
    ] = None,
    fields: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="custom field as name=value, repeatable"),
    ] = None,
) -> None:
    """Change a task."""
    repository = get_project_repository()
    index = repository.load_index()
    options = resolve_options(index["options"])
    task = repository.load_task(task_id, index)

    if name is not None:
        task["name"] = name
    if description is not None:
        task["description"] = description

    metadata = task["metadata"]
    if add_tags:
        metadata["tags"] += [tag for tag in add_tags if tag not in metadata["tags"]]
    if remove_tags:
        metadata["tags"] = [tag for tag in metadata["tags"] if tag not in remove_tags]
    if assigned is not None:
        metadata["assigned"] = assigned
    if remove_assigned:
        metadata["assigned"] = None
    if due is not None:
        metadata["due"] = due
    if remove_due:
        metadata["due"] = None
    if progress is not None:
        metadata["progress"] = progress

    for text in add_sub_tasks or []:
        task["sub_tasks"].append({"text": text, "completed": False})
    for text in complete_sub_tasks or []:
        for sub_task in task["sub_tasks"]:
            if sub_task["text"] == text:
                sub_task["completed"] = True
    for relation in add_relations or []:
        task["relations"].append(__relation(relation))
    __apply_fields(task, fields or [], options)

    new_task_id = repository.update_task(task_id, task, column)
    index = repository.load_index()
    single_task_view(
        index["name"],
        repository.load_task(new_task_id, index),
        repository.find_task_column(new_task_id),
        resolve_options(index["options"]),
    )


def move(
    task_id: str,
    column: str,
    position: Annotated[
        Optional[int],
        typer.Option("--position", "-p", help="zero-based position in the column"),
    ] = None,
    relative: Annotated[
        bool,
        typer.Option("--relative", "-r", help="position is an offset from the current one"),
    ] = False,
) -> None:
    """Move a task to a column."""
    repository = get_project_repository()
    repository.move_task(task_id, column, position, relative)
    console.print(f"[green]Moved '{task_id}' to '{column}'[/green]")


def rename(task_id: str, name: str) -> None:
    """Rename a task, which also changes its id."""
    repository = get_project_repository()
    new_task_id = repository.rename_task(task_id, name)
    console.print(f"[green]Renamed '{task_id}' to '{new_task_id}'[/green]")


def comment(
    task_id: str,
    text: str,
    author: Annotated[
        Optional[str],
        typer.Option("--author", "-a", help="defaults to the configured author"),
    ] = None,
) -> None:
    """Add a comment to a task."""
    config = CONFIGURATION_REPO.get_config()
    comment_author = author or config["author"] or getpass.getuser()

    repository = get_project_repository()
    repository.comment(task_id, text, comment_author)
    console.print(f"[green]Commented on '{task_id}'[/green]")


def remove(
    task_id: str,
    index_only: Annotated[
        bool,
        typer.Option("--index-only", "-i", help="keep the task file"),
    ] = False,
) -> None:
    """Remove a task from the board."""
    repository = get_project_repository()
    repository.delete_task(task_id, remove_file=not index_only)
    console.print(f"[green]Removed '{task_id}'[/green]")


def track(
    task_id: Annotated[
        Optional[str],
        typer.Argument(help="an untracked task, omit to list untracked tasks"),
    ] = None,
    column: Annotated[
        Optional[str],
        typer.Option("--column", "-c", help="defaults to the first column"),
    ] = None,
) -> None:
    """Add an untracked task file to the board."""
    repository = get_project_repository()
    if task_id is None:
        ids_view(repository.find_untracked_tasks())
        return

    index = repository.load_index()
    column_name = column or next(iter(index["columns"]), None)
    if column_name is None:
        raise ProjectError("No columns defined in the index")
    if column_name not in index["columns"]:
        raise ColumnNotFoundError(column_name)
    repository.add_untracked_task(task_id, column_name)
    console.print(f"[green]Tracked '{task_id}' in '{column_name}'[/green]")


def find(
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="only list ids")] = False,
    ids: Annotated[Optional[list[str]], typer.Option("--id", help="regex")] = None,
    names: Annotated[
        Optional[list[str]], typer.Option("--name", "-n", help="regex")
    ] = None,
    descriptions: Annotated[
        Optional[list[str]], typer.Option("--description", "-d", help="regex")
    ] = None,
    columns: Annotated[
        Optional[list[str]], typer.Option("--column", "-c", help="regex")
    ] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", "-t", help="regex")] = None,
    assigned: Annotated[
        Optional[list[str]], typer.Option("--assigned", "-a", help="regex")
    ] = None,
    sub_tasks: Annotated[
        Optional[list[str]], typer.Option("--sub-task", "-st", help="regex")
    ] = None,
    relations: Annotated[
        Optional[list[str]], typer.Option("--relation", "-r", help="regex")
    ] = None,
    comments: Annotated[
        Optional[list[str]], typer.Option("--comment", help="regex")
    ] = None,
    created: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--created", parser=parse_datetime, help="one day, or two for a range"),
    ] = None,
    updated: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--updated", parser=parse_datetime, help="one day, or two for a range"),
    ] = None,
    started: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--started", parser=parse_datetime, help="one day, or two for a range"),
    ] = None,
    completed: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--completed", parser=parse_datetime, help="one day, or two for a range"),
    ] = None,
    due: Annotated[
        Optional[list[pendulum.DateTime]],
        typer.Option("--due", "-u", parser=parse_datetime, help="one day, or two for a range"),
    ] = None,
    workload: Annotated[
        Optional[list[float]], typer.Option("--workload", "-w", help="value or range")
    ] = None,
    progress: Annotated[
        Optional[list[float]], typer.Option("--progress", "-p", help="value or range")
    ] = None,
    fields: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="any field as name=value, repeatable"),
    ] = None,
) -> None:
    """Find tasks matching every given filter."""
    repository = get_project_repository()
    index = repository.load_index()
    options = resolve_options(index["options"])

    task_filter: TaskFilter = {
        "id": ids,
        "name": names,
        "description": descriptions,
        "column": columns,
        "tags": tags,
        "assigned": assigned,
        "subTasks": sub_tasks,
        "relations": relations,
        "comments": comments,
        "created": created,
        "updated": updated,
        "started": started,
        "completed": completed,
        "due": due,
        "workload": workload,
        "progress": progress,
    }  # type: ignore[dict-item]
    for field_name, values in __field_filters(fields or [], options).items():
        task_filter[field_name] = values

    tasks = repository.search(task_filter)
    if quiet:
        ids_view([task["id"] for task in tasks])
        return
    tasks_view(index["name"], "find", tasks, index, options)


def archive(task_id: str) -> None:
    """Move a task to the archive."""
    repository = get_project_repository()
    repository.archive_task(task_id)
    console.print(f"[green]Archived '{task_id}'[/green]")


def restore(
    task_id: str,
    column: Annotated[
        Optional[str],
        typer.Option("--column", "-c", help="defaults to the column it was archived from"),
    ] = None,
) -> None:
    """Restore a task from the archive."""
    repository = get_project_repository()
    repository.restore_task(task_id, column)
    console.print(f"[green]Restored '{task_id}'[/green]")


def archived() -> None:
    """List archived tasks."""
    repository = get_project_repository()
    ids_view(repository.list_archived_tasks())


def __relation(relation_param: str) -> Relation:
    relation_type, _, target = relation_param.strip().rpartition(" ")
    return {"type": relation_type.strip(), "task": target}


def __apply_fields(task: Task, fields: list[str], options: BoardOptions) -> None:
    for field in fields:
        field_name, raw_value = parse_field_assignment(field)
        custom_field = get_custom_field(options, field_name)
        if custom_field is None:
            raise typer.BadParameter(f'Unknown custom field "{field_name}"')
        if custom_field["type"] == CustomFieldType.DATE:
            value = parse_datetime(raw_value)
        else:
            try:
                value = coerce_custom_field_value(raw_value, custom_field["type"])
            except ValueError as e:
                raise typer.BadParameter(str(e))
        task["metadata"]["custom_fields"][field_name] = value  # type: ignore[assignment]


def __field_filters(
    fields: list[str], options: BoardOptions
) -> dict[str, FilterValue]:
    filters: dict[str, list[FilterScalar]] = {}
    for field in fields:
        field_name, raw_value = parse_field_assignment(field)
        field_type = resolve_field(field_name, options).type
        filters.setdefault(field_name, []).append(parse_field_value(field_type, raw_value))
    return dict(filters)  # type: ignore[arg-type]
