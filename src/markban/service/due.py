# SPDX-License-Identifier: MIT

import math
from typing import Optional

import pendulum

from markban.model.due import DueData
from markban.model.options import BoardOptions
from markban.model.task import Task
from markban.service.workload import task_completed
from markban.time import milliseconds_between, now_utc

# name, length in milliseconds; a year and a month are calendar averages
DURATION_UNITS = (
    ("year", 31557600000),
    ("month", 2629800000),
    ("week", 604800000),
    ("day", 86400000),
    ("hour", 3600000),
    ("minute", 60000),
    ("second", 1000),
)


def due_data(
    task: Task,
    column: Optional[str],
    options: BoardOptions,
    now: Optional[pendulum.DateTime] = None,
) -> Optional[DueData]:
    """Work out how far a task is from its due date.

    The delta runs from the due date to the completed date, or to now when
    the task has no completed date. A positive delta is time past the due
    date.

    Args:
        task: The task
        column: The column holding the task
        options: Board options
        now: The current time, defaults to now

    Returns:
        The due data, or None if the task has no due date
    """
    due = task["metadata"]["due"]
    if due is None:
        return None

    completed = task_completed(task, column, options)
    completed_date = task["metadata"]["completed"]
    end = completed_date if completed_date is not None else (now or now_utc())
    delta = milliseconds_between(end, due)

    due_message = "Completed " if completed else ""
    due_message += f"{humanize_duration(delta)} {'overdue' if delta > 0 else 'remaining'}"

    return {
        "due_delta": delta,
        "completed": completed,
        "completed_date": completed_date,
        "due_date": due,
        "overdue": not completed and delta > 0,
        "due_message": due_message,
    }


def humanize_duration(milliseconds: float, largest: int = 3) -> str:
    """Describe a duration in words, e.g. "1 week, 4 days".

    At most `largest` units are shown, counted from the first non-zero unit
    whether or not the units in between are zero. The smallest shown unit
    is rounded, carrying into larger units when it fills them.
    """
    remaining = abs(milliseconds)
    counts: list[float] = []
    for position, (_, unit_ms) in enumerate(DURATION_UNITS):
        if position == len(DURATION_UNITS) - 1:
            count = remaining / unit_ms
        else:
            count = remaining // unit_ms
        remaining -= count * unit_ms
        counts.append(count)

    first_occupied = next(
        (position for position, count in enumerate(counts) if count != 0),
        len(counts),
    )
    for position in range(len(counts) - 1, -1, -1):
        # half rounds up
        counts[position] = math.floor(counts[position] + 0.5)
        if position == 0:
            break
        ratio = DURATION_UNITS[position - 1][1] / DURATION_UNITS[position][1]
        if counts[position] % ratio == 0 or largest - 1 < position - first_occupied:
            counts[position - 1] += counts[position] / ratio
            counts[position] = 0

    pieces = [
        __render(int(count), name)
        for (name, _), count in zip(DURATION_UNITS, counts)
        if count != 0
    ][:largest]
    if not pieces:
        return __render(0, DURATION_UNITS[-1][0])
    return ", ".join(pieces)


def __render(count: int, unit_name: str) -> str:
    return f"{count} {unit_name}{'' if count == 1 else 's'}"
