# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

from markban.model.task_id import TaskId


class ValidationError(TypedDict):
    # None when the index itself failed to load
    task: Optional[TaskId]
    errors: str
