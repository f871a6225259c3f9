# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypedDict


class SortOrder(StrEnum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class Sorter(TypedDict):
    field: str
    filter: Optional[str]
    order: SortOrder
