# SPDX-License-Identifier: MIT

import math
from typing import Optional

from markban.model.options import BoardOptions
from markban.model.task import Task


def task_workload(task: Task, options: BoardOptions) -> float:
    """Sum the weights of the task's workload tags.

    Falls back to the board's default workload when the task carries none
    of the weighted tags.
    """
    workload: float = 0
    has_workload_tags = False
    for tag, weight in options["task_workload_tags"].items():
        if tag in task["metadata"]["tags"]:
            workload += weight
            has_workload_tags = True
    if not has_workload_tags:
        workload = options["default_task_workload"]
    return workload


def task_completed(task: Task, column: Optional[str], options: BoardOptions) -> bool:
    return task["metadata"]["completed"] is not None or (
        column is not None and column in options["completed_columns"]
    )


def task_progress(task: Task, column: Optional[str], options: BoardOptions) -> float:
    if task_completed(task, column, options):
        return 1
    return task["metadata"]["progress"] or 0


def remaining_workload(workload: float, progress: float) -> int:
    return math.ceil(workload * (1 - progress))
