# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Any, Callable, NamedTuple, Optional

from markban.exceptions import QueryError
from markban.model.custom_field import CustomFieldType
from markban.model.options import BoardOptions, get_custom_field
from markban.model.task import Task
from markban.service.workload import task_progress, task_workload


class FieldType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class TaskRow(NamedTuple):
    task: Task
    column: Optional[str]
    options: BoardOptions


class Field(NamedTuple):
    name: str
    type: FieldType
    accessor: Callable[[TaskRow], Any]

    def value(self, row: TaskRow) -> Any:
        return self.accessor(row)


def sub_tasks_text(task: Task) -> str:
    return "\n".join(
        f"[{'x' if sub_task['completed'] else ' '}] {sub_task['text']}"
        for sub_task in task["sub_tasks"]
    )


def relations_text(task: Task) -> str:
    return "\n".join(
        f"{relation['type']} {relation['task']}" for relation in task["relations"]
    )


def comments_text(task: Task) -> str:
    return "\n".join(
        f"{comment['author']} {comment['text']}" for comment in task["comments"]
    )


def __metadata(key: str) -> Callable[[TaskRow], Any]:
    return lambda row: row.task["metadata"][key]  # type: ignore[literal-required]


BUILTIN_FIELDS: dict[str, Field] = {
    field.name: field
    for field in (
        Field("id", FieldType.STRING, lambda row: row.task["id"]),
        Field("name", FieldType.STRING, lambda row: row.task["name"]),
        Field("description", FieldType.STRING, lambda row: row.task["description"]),
        Field("column", FieldType.STRING, lambda row: row.column or ""),
        Field("created", FieldType.DATE, __metadata("created")),
        Field("updated", FieldType.DATE, __metadata("updated")),
        Field("started", FieldType.DATE, __metadata("started")),
        Field("completed", FieldType.DATE, __metadata("completed")),
        Field("due", FieldType.DATE, __metadata("due")),
        Field(
            "assigned",
            FieldType.STRING,
            lambda row: row.task["metadata"]["assigned"] or "",
        ),
        Field("tags", FieldType.STRING, lambda row: "\n".join(row.task["metadata"]["tags"])),
        Field("countTags", FieldType.NUMBER, lambda row: len(row.task["metadata"]["tags"])),
        Field("subTasks", FieldType.STRING, lambda row: sub_tasks_text(row.task)),
        Field("countSubTasks", FieldType.NUMBER, lambda row: len(row.task["sub_tasks"])),
        Field("relations", FieldType.STRING, lambda row: relations_text(row.task)),
        Field("countRelations", FieldType.NUMBER, lambda row: len(row.task["relations"])),
        Field("comments", FieldType.STRING, lambda row: comments_text(row.task)),
        Field("countComments", FieldType.NUMBER, lambda row: len(row.task["comments"])),
        Field("workload", FieldType.NUMBER, lambda row: task_workload(row.task, row.options)),
        Field(
            "progress",
            FieldType.NUMBER,
            lambda row: task_progress(row.task, row.column, row.options),
        ),
    )
}

FIELD_ALIASES = {
    "tag": "tags",
    "subTask": "subTasks",
    "relation": "relations",
    "comment": "comments",
}

_CUSTOM_FIELD_TYPES = {
    CustomFieldType.STRING: FieldType.STRING,
    CustomFieldType.NUMBER: FieldType.NUMBER,
    CustomFieldType.BOOLEAN: FieldType.BOOLEAN,
    CustomFieldType.DATE: FieldType.DATE,
}


def resolve_field(name: str, options: BoardOptions) -> Field:
    """Find the typed accessor for a field name.

    Built-in fields come first, then custom fields declared in the board
    options, so a newly declared custom field can be filtered and sorted
    without further changes.

    Raises:
        QueryError: If the name is neither built in nor declared
    """
    name = FIELD_ALIASES.get(name, name)
    if name in BUILTIN_FIELDS:
        return BUILTIN_FIELDS[name]

    custom_field = get_custom_field(options, name)
    if custom_field is None:
        raise QueryError(f'Unknown field "{name}"')
    return Field(
        name,
        _CUSTOM_FIELD_TYPES[custom_field["type"]],
        lambda row: row.task["metadata"]["custom_fields"].get(name),
    )
