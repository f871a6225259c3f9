# SPDX-License-Identifier: MIT

from typing import Optional, TypeAlias

import pendulum

FilterScalar: TypeAlias = str | int | float | bool | pendulum.DateTime

FilterValue: TypeAlias = FilterScalar | list[FilterScalar]

# Field name to predicate value. A missing or None entry imposes no
# constraint; every other entry must hold.
TaskFilter: TypeAlias = dict[str, Optional[FilterValue]]
