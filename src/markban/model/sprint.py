# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum


class Sprint(TypedDict):
    number: int
    name: str
    description: str
    start: pendulum.DateTime
