# SPDX-License-Identifier: MIT

import logging
from typing import Callable, Optional, TypeAlias

import pendulum

from markban.exceptions import SprintNotFoundError
from markban.model.custom_field import CustomFieldType
from markban.model.index import Index
from markban.model.options import BoardOptions, resolve_options
from markban.model.sprint import Sprint
from markban.model.status import (
    AssignedWorkload,
    ColumnWorkload,
    DueTask,
    PeriodReport,
    SprintReport,
    StatusReport,
    TaskWorkload,
    WorkloadInPeriod,
)
from markban.model.task import Task
from markban.service.board import find_task_column
from markban.service.due import due_data, humanize_duration
from markban.service.workload import (
    remaining_workload,
    task_completed,
    task_progress,
    task_workload,
)
from markban.time import end_of_local_day, milliseconds_between, now_utc, start_of_local_day

logger = logging.getLogger(__name__)

DateAccessor: TypeAlias = Callable[[Task], Optional[pendulum.DateTime]]


def compute_status(
    index: Index,
    tasks: list[Task],
    quiet: bool = False,
    due: bool = False,
    sprint: Optional[int | str] = None,
    dates: Optional[list[pendulum.DateTime]] = None,
    untracked_tasks: Optional[list[str]] = None,
    now: Optional[pendulum.DateTime] = None,
) -> StatusReport:
    """
    Summarise the state of a board.

    Column counts are always reported. Unless quiet, workloads per column,
    per task and per assignee are added, along with sprint statistics when
    the board has sprints and period statistics when dates are given.

    Args:
        index: The board index
        tasks: The tracked tasks
        quiet: Only report task counts
        due: Include due data for every task with a due date
        sprint: Sprint number (1-based) or name, defaults to the current sprint
        dates: One date for a whole local day, or several for a range
        untracked_tasks: Untracked task file names to include in the report
        now: The current time, defaults to now

    Returns:
        The status report

    Raises:
        SprintNotFoundError: If the requested sprint doesn't exist
    """
    options = resolve_options(index["options"])
    current_time = now or now_utc()

    report: StatusReport = {
        "name": index["name"],
        "tasks": sum(len(task_ids) for task_ids in index["columns"].values()),
        "column_tasks": {
            column_name: len(task_ids)
            for column_name, task_ids in index["columns"].items()
        },
        "started_tasks": __count_in_columns(index, options["started_columns"]),
        "completed_tasks": __count_in_columns(index, options["completed_columns"]),
        "untracked_tasks": untracked_tasks,
        "total_workload": None,
        "total_remaining_workload": None,
        "column_workloads": None,
        "task_workloads": None,
        "assigned": None,
        "due_tasks": None,
        "sprint": None,
        "period": None,
    }
    if quiet:
        return report

    columns = {task["id"]: find_task_column(index, task["id"]) for task in tasks}
    task_workloads: dict[str, TaskWorkload] = {}
    for task in tasks:
        workload = task_workload(task, options)
        progress = task_progress(task, columns[task["id"]], options)
        task_workloads[task["id"]] = {
            "workload": workload,
            "progress": progress,
            "remaining_workload": remaining_workload(workload, progress),
            "completed": task_completed(task, columns[task["id"]], options),
        }

    column_workloads: dict[str, ColumnWorkload] = {
        column_name: {"workload": 0, "remaining_workload": 0}
        for column_name in index["columns"]
    }
    total_workload: float = 0
    total_remaining_workload: float = 0
    assigned: dict[str, AssignedWorkload] = {}
    for task in tasks:
        workload_data = task_workloads[task["id"]]
        total_workload += workload_data["workload"]
        total_remaining_workload += workload_data["remaining_workload"]

        column_name = columns[task["id"]]
        if column_name is not None:
            column_workloads[column_name]["workload"] += workload_data["workload"]
            column_workloads[column_name]["remaining_workload"] += workload_data[
                "remaining_workload"
            ]

        assignee = task["metadata"]["assigned"]
        if assignee:
            totals = assigned.setdefault(
                assignee, {"total": 0, "workload": 0, "remaining_workload": 0}
            )
            totals["total"] += 1
            totals["workload"] += workload_data["workload"]
            totals["remaining_workload"] += workload_data["remaining_workload"]

    report["total_workload"] = total_workload
    report["total_remaining_workload"] = total_remaining_workload
    report["column_workloads"] = column_workloads
    report["task_workloads"] = task_workloads
    report["assigned"] = assigned

    if due:
        report["due_tasks"] = __due_tasks(tasks, columns, task_workloads, options, current_time)

    if options["sprints"]:
        report["sprint"] = __sprint_report(
            tasks, columns, options, sprint, current_time
        )

    if dates:
        report["period"] = __period_report(tasks, columns, options, dates)

    return report


def select_sprint(sprints: list[Sprint], sprint: int | str) -> Sprint:
    """Find a sprint by 1-based number or by exact name."""
    if isinstance(sprint, int):
        if sprint < 1 or sprint > len(sprints):
            raise SprintNotFoundError(f"Sprint {sprint} does not exist")
        return sprints[sprint - 1]

    for candidate in sprints:
        if candidate["name"] == sprint:
            return candidate
    raise SprintNotFoundError(f'No sprint found with name "{sprint}"')


def sprint_window(
    sprints: list[Sprint], selected: Sprint, now: pendulum.DateTime
) -> tuple[pendulum.DateTime, pendulum.DateTime]:
    """A sprint runs from its start until the next sprint starts, or until now."""
    position = selected["number"] - 1
    if position < len(sprints) - 1:
        return selected["start"], sprints[position + 1]["start"]
    return selected["start"], now


def workload_in_period(
    tasks: list[Task],
    columns: dict[str, Optional[str]],
    options: BoardOptions,
    accessor: DateAccessor,
    start: pendulum.DateTime,
    end: pendulum.DateTime,
    include_end: bool = True,
) -> WorkloadInPeriod:
    """Collect the tasks whose date falls inside a window.

    Tasks without the date are left out.
    """
    period_tasks = []
    for task in tasks:
        value = accessor(task)
        if value is None or value < start:
            continue
        if value > end or (value == end and not include_end):
            continue
        period_tasks.append(
            {
                "id": task["id"],
                "column": columns.get(task["id"]),
                "workload": task_workload(task, options),
            }
        )
    return {
        "tasks": period_tasks,
        "workload": sum(t["workload"] for t in period_tasks),
    }


def __metadata_date(name: str) -> DateAccessor:
    return lambda task: task["metadata"][name]  # type: ignore[literal-required]


def __custom_date(name: str) -> DateAccessor:
    def accessor(task: Task) -> Optional[pendulum.DateTime]:
        value = task["metadata"]["custom_fields"].get(name)
        return value if isinstance(value, pendulum.DateTime) else None

    return accessor


def __count_in_columns(index: Index, column_names: list[str]) -> int:
    return sum(
        len(task_ids)
        for column_name, task_ids in index["columns"].items()
        if column_name in column_names
    )


def __due_tasks(
    tasks: list[Task],
    columns: dict[str, Optional[str]],
    task_workloads: dict[str, TaskWorkload],
    options: BoardOptions,
    now: pendulum.DateTime,
) -> list[DueTask]:
    due_tasks: list[DueTask] = []
    for task in tasks:
        data = due_data(task, columns[task["id"]], options, now)
        if data is None:
            continue
        workload_data = task_workloads[task["id"]]
        due_tasks.append(
            {
                "task": task["id"],
                "workload": workload_data["workload"],
                "progress": workload_data["progress"],
                "remaining_workload": workload_data["remaining_workload"],
                **data,
            }
        )
    return due_tasks


def __sprint_report(
    tasks: list[Task],
    columns: dict[str, Optional[str]],
    options: BoardOptions,
    sprint: Optional[int | str],
    now: pendulum.DateTime,
) -> SprintReport:
    sprints = options["sprints"]
    selected = sprints[-1] if sprint is None else select_sprint(sprints, sprint)
    start, end = sprint_window(sprints, selected, now)
    is_current = selected["number"] == len(sprints)
    logger.debug("sprint %d window %s to %s", selected["number"], start, end)

    def in_sprint(accessor: DateAccessor) -> WorkloadInPeriod:
        return workload_in_period(
            tasks, columns, options, accessor, start, end, include_end=False
        )

    duration = milliseconds_between(end, start)
    return {
        "number": selected["number"],
        "name": selected["name"],
        "description": selected["description"],
        "start": start,
        "end": None if is_current else end,
        "current": None if is_current else len(sprints),
        "duration_delta": duration,
        "duration_message": humanize_duration(duration),
        "created": in_sprint(__metadata_date("created")),
        "started": in_sprint(__metadata_date("started")),
        "completed": in_sprint(__metadata_date("completed")),
        "due": in_sprint(__metadata_date("due")),
        "custom_fields": {
            custom_field["name"]: in_sprint(__custom_date(custom_field["name"]))
            for custom_field in options["custom_fields"]
            if custom_field["type"] == CustomFieldType.DATE
        },
    }


def __period_report(
    tasks: list[Task],
    columns: dict[str, Optional[str]],
    options: BoardOptions,
    dates: list[pendulum.DateTime],
) -> PeriodReport:
    if len(dates) == 1:
        start, end = start_of_local_day(dates[0]), end_of_local_day(dates[0])
    else:
        start, end = min(dates), max(dates)

    def in_period(name: str) -> WorkloadInPeriod:
        return workload_in_period(tasks, columns, options, __metadata_date(name), start, end)

    return {
        "start": start,
        "end": end,
        "created": in_period("created"),
        "started": in_period("started"),
        "completed": in_period("completed"),
        "due": in_period("due"),
    }
