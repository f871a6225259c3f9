# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum


class DueData(TypedDict):
    due_delta: int
    completed: bool
    completed_date: Optional[pendulum.DateTime]
    due_date: pendulum.DateTime
    overdue: bool
    due_message: str
