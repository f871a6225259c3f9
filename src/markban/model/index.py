# SPDX-License-Identifier: MIT

from typing import Any, TypedDict

from markban.model.task_id import TaskId


class Index(TypedDict):
    name: str
    description: str
    # kept exactly as decoded, see model.options for the typed view
    options: dict[str, Any]
    columns: dict[str, list[TaskId]]
