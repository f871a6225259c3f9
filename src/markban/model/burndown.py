# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypedDict

import pendulum

from markban.model.sprint import Sprint
from markban.model.task_id import TaskId


class EventType(StrEnum):
    CREATED = "created"
    STARTED = "started"
    COMPLETED = "completed"


class TaskEvent(TypedDict):
    event_type: EventType
    task: TaskId


class BurndownSample(TypedDict):
    x: pendulum.DateTime
    y: float
    count: int
    tasks: list[TaskEvent]


class BurndownSeries(TypedDict):
    sprint: Optional[Sprint]
    start: pendulum.DateTime
    end: pendulum.DateTime
    data_points: list[BurndownSample]


class BurndownReport(TypedDict):
    series: list[BurndownSeries]
