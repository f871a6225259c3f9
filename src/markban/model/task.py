# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from markban.model.custom_field import CustomFieldValue
from markban.model.task_id import TaskId, get_task_id


class SubTask(TypedDict):
    text: str
    completed: bool


class Relation(TypedDict):
    type: str
    task: TaskId


class Comment(TypedDict):
    author: str
    date: Optional[pendulum.DateTime]
    text: str


class TaskMetadata(TypedDict):
    created: Optional[pendulum.DateTime]
    updated: Optional[pendulum.DateTime]
    started: Optional[pendulum.DateTime]
    completed: Optional[pendulum.DateTime]
    due: Optional[pendulum.DateTime]
    assigned: Optional[str]
    tags: list[str]
    progress: Optional[float]
    column: Optional[str]
    custom_fields: dict[str, CustomFieldValue]


class Task(TypedDict):
    id: TaskId
    name: str
    description: str
    metadata: TaskMetadata
    sub_tasks: list[SubTask]
    relations: list[Relation]
    comments: list[Comment]


def get_task_template(name: str = "", description: str = "") -> Task:
    return {
        "id": get_task_id(name),
        "name": name,
        "description": description,
        "metadata": get_metadata_template(),
        "sub_tasks": [],
        "relations": [],
        "comments": [],
    }


def get_metadata_template() -> TaskMetadata:
    return {
        "created": None,
        "updated": None,
        "started": None,
        "completed": None,
        "due": None,
        "assigned": None,
        "tags": [],
        "progress": None,
        "column": None,
        "custom_fields": {},
    }
