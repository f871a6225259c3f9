# SPDX-License-Identifier: MIT

import logging
from typing import Optional

import pendulum

from markban.model.custom_field import CustomFieldType, UpdatePolicy
from markban.model.options import BoardOptions
from markban.model.task import Task
from markban.time import now_utc

logger = logging.getLogger(__name__)


class LinkedField:
    """A date field stamped when a task enters one of its linked columns.

    The linked columns come from the "<name>Columns" board option, so
    "completed" is linked through completedColumns and a custom field
    "reviewed" through reviewedColumns.
    """

    def __init__(self, name: str, policy: UpdatePolicy, custom: bool) -> None:
        self.name = name
        self.policy = policy
        self.custom = custom

    def linked_columns(self, options: BoardOptions) -> list[str]:
        return options["linked_columns"].get(self.name, [])

    def get(self, task: Task) -> Optional[pendulum.DateTime]:
        if self.custom:
            value = task["metadata"]["custom_fields"].get(self.name)
            return value if isinstance(value, pendulum.DateTime) else None
        return task["metadata"][self.name]  # type: ignore[literal-required]

    def set(self, task: Task, value: pendulum.DateTime) -> None:
        if self.custom:
            task["metadata"]["custom_fields"][self.name] = value
        else:
            task["metadata"][self.name] = value  # type: ignore[literal-required]

    def update(
        self, task: Task, column_name: str, options: BoardOptions, now: pendulum.DateTime
    ) -> Task:
        if column_name not in self.linked_columns(options):
            return task

        match self.policy:
            case UpdatePolicy.ALWAYS:
                self.set(task, now)
            case UpdatePolicy.ONCE:
                if self.get(task) is None:
                    self.set(task, now)
            case UpdatePolicy.NONE:
                return task
        logger.debug("stamped %s on %r entering %r", self.name, task["id"], column_name)
        return task


BUILTIN_LINKED_FIELDS = (
    LinkedField("completed", UpdatePolicy.ONCE, custom=False),
    LinkedField("started", UpdatePolicy.ONCE, custom=False),
)


def linked_fields(options: BoardOptions) -> list[LinkedField]:
    return list(BUILTIN_LINKED_FIELDS) + [
        LinkedField(custom_field["name"], custom_field["update_date"], custom=True)
        for custom_field in options["custom_fields"]
        if custom_field["type"] == CustomFieldType.DATE
    ]


def update_column_linked_fields(
    task: Task,
    column_name: str,
    options: BoardOptions,
    now: Optional[pendulum.DateTime] = None,
) -> Task:
    """Stamp every date field linked to the column a task is entering.

    Args:
        task: The task, updated in place
        column_name: The column the task is entering
        options: Board options
        now: The time to stamp, defaults to now

    Returns:
        The same task
    """
    stamp = now or now_utc()
    for linked_field in linked_fields(options):
        task = linked_field.update(task, column_name, options, stamp)
    return task
