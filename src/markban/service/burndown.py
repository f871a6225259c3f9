# SPDX-License-Identifier: MIT

import logging
from typing import NamedTuple, Optional

import pendulum

from markban.exceptions import SprintNotFoundError
from markban.model.burndown import (
    BurndownReport,
    BurndownSample,
    BurndownSeries,
    EventType,
    TaskEvent,
)
from markban.model.index import Index
from markban.model.options import BoardOptions, resolve_options
from markban.model.sprint import Sprint
from markban.model.task import Task
from markban.service.board import find_task_column
from markban.service.status import select_sprint, sprint_window
from markban.service.workload import task_workload
from markban.time import (
    EPOCH,
    Resolution,
    auto_resolution,
    normalise_datetime,
    now_utc,
)

logger = logging.getLogger(__name__)


class BurndownTask(NamedTuple):
    id: str
    column: Optional[str]
    assigned: Optional[str]
    workload: float
    created: pendulum.DateTime
    started: Optional[pendulum.DateTime]
    completed: Optional[pendulum.DateTime]

    def active_at(self, moment: pendulum.DateTime) -> bool:
        return (
            self.started is not None
            and self.started <= moment
            and (self.completed is None or self.completed > moment)
        )

    def events_at(self, moment: pendulum.DateTime) -> list[EventType]:
        events = []
        if self.created == moment:
            events.append(EventType.CREATED)
        if self.started == moment:
            events.append(EventType.STARTED)
        if self.completed == moment:
            events.append(EventType.COMPLETED)
        return events

    def normalise(self, resolution: Resolution) -> "BurndownTask":
        return self._replace(
            created=normalise_datetime(self.created, resolution),
            started=None
            if self.started is None
            else normalise_datetime(self.started, resolution),
            completed=None
            if self.completed is None
            else normalise_datetime(self.completed, resolution),
        )


def compute_burndown(
    index: Index,
    tasks: list[Task],
    sprints: Optional[list[int | str]] = None,
    dates: Optional[list[pendulum.DateTime]] = None,
    assigned: Optional[str] = None,
    columns: Optional[list[str]] = None,
    normalise: Optional[Resolution] = None,
    now: Optional[pendulum.DateTime] = None,
) -> BurndownReport:
    """
    Sample the active workload of a board over one or more windows.

    With neither sprints nor dates, the window is the current sprint, or
    all of the board's history when it has no sprints. Each requested
    sprint adds a series, and dates add one more spanning their earliest to
    their latest date (or to now for a single date).

    Args:
        index: The board index
        tasks: The tracked tasks
        sprints: Sprint numbers (1-based) or names
        dates: Dates bounding an extra window
        assigned: Only count tasks assigned to this person
        columns: Only count tasks in these columns
        normalise: Truncate every timestamp to this resolution first
        now: The current time, defaults to now

    Returns:
        One series per window, each with its samples in time order

    Raises:
        SprintNotFoundError: If sprints are requested and the board has
            none, or one of them doesn't exist
    """
    options = resolve_options(index["options"])
    current_time = now or now_utc()

    selected_tasks: list[Task] = []
    burndown_tasks: list[BurndownTask] = []
    for task in tasks:
        burndown_task = __burndown_task(index, task, options)
        if (assigned is None or burndown_task.assigned == assigned) and (
            columns is None or burndown_task.column in columns
        ):
            selected_tasks.append(task)
            burndown_tasks.append(burndown_task)

    series: list[BurndownSeries] = []
    board_sprints = options["sprints"]
    if not sprints and not dates:
        if board_sprints:
            current = board_sprints[-1]
            series.append(__series(current, current["start"], current_time))
        else:
            series.append(
                __series(None, __earliest(selected_tasks, current_time), current_time)
            )
    else:
        if sprints:
            if not board_sprints:
                raise SprintNotFoundError("No sprints defined")
            for requested in sprints:
                selected = select_sprint(board_sprints, requested)
                start, end = sprint_window(board_sprints, selected, current_time)
                series.append(__series(selected, start, end))
        if dates:
            end = current_time if len(dates) == 1 else max(dates)
            series.append(__series(None, min(dates), end))

    if normalise == Resolution.AUTO:
        normalise = auto_resolution(series[0]["start"], series[0]["end"])
    if normalise is not None:
        logger.debug("normalising burndown to %s", normalise)
        for s in series:
            s["start"] = normalise_datetime(s["start"], normalise)
            s["end"] = normalise_datetime(s["end"], normalise)
        burndown_tasks = [task.normalise(normalise) for task in burndown_tasks]

    for s in series:
        s["data_points"] = [
            __sample(burndown_tasks, moment)
            for moment in sample_points(burndown_tasks, s["start"], s["end"])
        ]
    return {"series": series}


def sample_points(
    tasks: list[BurndownTask], start: pendulum.DateTime, end: pendulum.DateTime
) -> list[pendulum.DateTime]:
    """The window bounds plus every task event strictly inside the window."""
    moments = {start, end}
    for task in tasks:
        for moment in (task.created, task.started, task.completed):
            if moment is not None and start < moment < end:
                moments.add(moment)
    return sorted(moments)


def __burndown_task(index: Index, task: Task, options: BoardOptions) -> BurndownTask:
    column = find_task_column(index, task["id"])
    metadata = task["metadata"]
    created = metadata["created"] or EPOCH

    started = metadata["started"]
    if started is None and column in options["started_columns"]:
        started = created
    completed = metadata["completed"]
    if completed is None and column in options["completed_columns"]:
        completed = created

    return BurndownTask(
        id=task["id"],
        column=column,
        assigned=metadata["assigned"],
        workload=task_workload(task, options),
        created=created,
        started=started,
        completed=completed,
    )


def __earliest(tasks: list[Task], default: pendulum.DateTime) -> pendulum.DateTime:
    # stamps the tasks actually carry, not the ones filled in for burndown
    moments = [
        moment
        for task in tasks
        for moment in (
            task["metadata"]["created"],
            task["metadata"]["started"],
            task["metadata"]["completed"],
        )
        if moment is not None
    ]
    return min(moments, default=default)


def __series(
    sprint: Optional[Sprint], start: pendulum.DateTime, end: pendulum.DateTime
) -> BurndownSeries:
    return {"sprint": sprint, "start": start, "end": end, "data_points": []}


def __sample(tasks: list[BurndownTask], moment: pendulum.DateTime) -> BurndownSample:
    active = [task for task in tasks if task.active_at(moment)]
    events: list[TaskEvent] = [
        {"event_type": event_type, "task": task.id}
        for event_type in EventType
        for task in tasks
        if event_type in task.events_at(moment)
    ]
    return {
        "x": moment,
        "y": sum(task.workload for task in active),
        "count": len(active),
        "tasks": events,
    }
