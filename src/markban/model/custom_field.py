# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import TypeAlias, TypedDict

import pendulum

CustomFieldValue: TypeAlias = str | int | float | bool | pendulum.DateTime


class CustomFieldType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class UpdatePolicy(StrEnum):
    NONE = "none"
    ONCE = "once"
    ALWAYS = "always"


class CustomField(TypedDict):
    name: str
    type: CustomFieldType
    update_date: UpdatePolicy
