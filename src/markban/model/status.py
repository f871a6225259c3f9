# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from markban.model.task_id import TaskId


class ColumnWorkload(TypedDict):
    workload: float
    remaining_workload: float


class TaskWorkload(TypedDict):
    workload: float
    progress: float
    remaining_workload: float
    completed: bool


class AssignedWorkload(TypedDict):
    total: int
    workload: float
    remaining_workload: float


class DueTask(TypedDict):
    task: TaskId
    workload: float
    progress: float
    remaining_workload: float
    due_delta: int
    completed: bool
    completed_date: Optional[pendulum.DateTime]
    due_date: pendulum.DateTime
    overdue: bool
    due_message: str


class PeriodTask(TypedDict):
    id: TaskId
    column: Optional[str]
    workload: float


class WorkloadInPeriod(TypedDict):
    tasks: list[PeriodTask]
    workload: float


class SprintReport(TypedDict):
    number: int
    name: str
    description: str
    start: pendulum.DateTime
    end: Optional[pendulum.DateTime]
    current: Optional[int]
    duration_delta: int
    duration_message: str
    created: WorkloadInPeriod
    started: WorkloadInPeriod
    completed: WorkloadInPeriod
    due: WorkloadInPeriod
    custom_fields: dict[str, WorkloadInPeriod]


class PeriodReport(TypedDict):
    start: pendulum.DateTime
    end: pendulum.DateTime
    created: WorkloadInPeriod
    started: WorkloadInPeriod
    completed: WorkloadInPeriod
    due: WorkloadInPeriod


class StatusReport(TypedDict):
    name: str
    tasks: int
    column_tasks: dict[str, int]
    started_tasks: int
    completed_tasks: int
    untracked_tasks: Optional[list[str]]
    total_workload: Optional[float]
    total_remaining_workload: Optional[float]
    column_workloads: Optional[dict[str, ColumnWorkload]]
    task_workloads: Optional[dict[TaskId, TaskWorkload]]
    assigned: Optional[dict[str, AssignedWorkload]]
    due_tasks: Optional[list[DueTask]]
    sprint: Optional[SprintReport]
    period: Optional[PeriodReport]
