# SPDX-License-Identifier: MIT

import datetime
from typing import Any, Optional, TypedDict

from markban.exceptions import OptionsError
from markban.model.custom_field import CustomField, CustomFieldType, UpdatePolicy
from markban.model.sorter import Sorter, SortOrder
from markban.model.sprint import Sprint
from markban.time import datetime_from_str, python_to_pendulum_utc

DEFAULT_TASK_WORKLOAD = 2
DEFAULT_TASK_WORKLOAD_TAGS = {
    "Nothing": 0,
    "Tiny": 1,
    "Small": 2,
    "Medium": 3,
    "Large": 5,
    "Huge": 8,
}
DEFAULT_DATE_FORMAT = "d mmm yy, H:MM"

LINKED_COLUMNS_SUFFIX = "Columns"


class BoardOptions(TypedDict):
    started_columns: list[str]
    completed_columns: list[str]
    custom_fields: list[CustomField]
    column_sorting: dict[str, list[Sorter]]
    sprints: list[Sprint]
    default_task_workload: float
    task_workload_tags: dict[str, float]
    date_format: str
    # field name -> columns that stamp it, from every "<field>Columns" key
    linked_columns: dict[str, list[str]]


def default_index_options() -> dict[str, Any]:
    """Options written into a freshly initialised index."""
    return {
        "startedColumns": ["In Progress"],
        "completedColumns": ["Done"],
    }


def resolve_options(options: Optional[dict[str, Any]]) -> BoardOptions:
    """Validate raw index options and fill in defaults.

    Args:
        options: The options mapping exactly as decoded from the index

    Returns:
        Typed board options

    Raises:
        OptionsError: If any known option holds a value of the wrong shape
    """
    raw = options or {}

    linked_columns: dict[str, list[str]] = {}
    for key, value in raw.items():
        if key.endswith(LINKED_COLUMNS_SUFFIX) and len(key) > len(
            LINKED_COLUMNS_SUFFIX
        ):
            linked_columns[key[: -len(LINKED_COLUMNS_SUFFIX)]] = __string_list(
                key, value
            )
    linked_columns.setdefault("started", [])
    linked_columns.setdefault("completed", [])

    return {
        "started_columns": linked_columns["started"],
        "completed_columns": linked_columns["completed"],
        "custom_fields": __custom_fields(raw.get("customFields")),
        "column_sorting": __column_sorting(raw.get("columnSorting")),
        "sprints": resolve_sprints(raw.get("sprints")),
        "default_task_workload": __number(
            "defaultTaskWorkload", raw.get("defaultTaskWorkload", DEFAULT_TASK_WORKLOAD)
        ),
        "task_workload_tags": __workload_tags(raw.get("taskWorkloadTags")),
        "date_format": str(raw.get("dateFormat", DEFAULT_DATE_FORMAT)),
        "linked_columns": linked_columns,
    }


def resolve_sprints(value: Any) -> list[Sprint]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise OptionsError("sprints must be a list")

    sprints: list[Sprint] = []
    for number, raw_sprint in enumerate(value, start=1):
        if not isinstance(raw_sprint, dict) or "start" not in raw_sprint:
            raise OptionsError(f"sprint {number} must have a start date")
        start = raw_sprint["start"]
        if isinstance(start, str):
            start_value = datetime_from_str(start)
        elif isinstance(start, datetime.date):
            start_value = python_to_pendulum_utc(start)
        else:
            raise OptionsError(f"sprint {number} has an invalid start date")
        sprints.append(
            {
                "number": number,
                "name": str(raw_sprint.get("name") or f"Sprint {number}"),
                "description": str(raw_sprint.get("description") or ""),
                "start": start_value,
            }
        )
    return sprints


def sorter_to_option(sorter: Sorter) -> dict[str, Any]:
    return {
        "field": sorter["field"],
        "filter": sorter["filter"],
        "order": str(sorter["order"]),
    }


def sorter_from_option(value: Any) -> Sorter:
    if not isinstance(value, dict) or "field" not in value:
        raise OptionsError("a sorter must be a mapping with a field")
    order = value.get("order") or SortOrder.ASCENDING
    try:
        sort_order = SortOrder(order)
    except ValueError:
        raise OptionsError(f'invalid sort order "{order}"') from None
    return {
        "field": str(value["field"]),
        "filter": value.get("filter"),
        "order": sort_order,
    }


def get_custom_field(options: BoardOptions, name: str) -> Optional[CustomField]:
    for custom_field in options["custom_fields"]:
        if custom_field["name"] == name:
            return custom_field
    return None


def __string_list(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise OptionsError(f"{key} must be a list of column names")
    return list(value)


def __number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise OptionsError(f"{key} must be a number")
    return value


def __workload_tags(value: Any) -> dict[str, float]:
    if value is None:
        return dict(DEFAULT_TASK_WORKLOAD_TAGS)
    if not isinstance(value, dict):
        raise OptionsError("taskWorkloadTags must be a mapping of tag to workload")
    return {str(tag): __number(f"taskWorkloadTags.{tag}", v) for tag, v in value.items()}


def __custom_fields(value: Any) -> list[CustomField]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise OptionsError("customFields must be a list")

    custom_fields: list[CustomField] = []
    for raw_field in value:
        if not isinstance(raw_field, dict) or "name" not in raw_field:
            raise OptionsError("a custom field must be a mapping with a name")
        name = str(raw_field["name"])
        try:
            field_type = CustomFieldType(raw_field.get("type", CustomFieldType.STRING))
        except ValueError:
            raise OptionsError(
                f'custom field "{name}" has invalid type "{raw_field.get("type")}"'
            ) from None
        try:
            update_date = UpdatePolicy(raw_field.get("updateDate") or UpdatePolicy.NONE)
        except ValueError:
            raise OptionsError(
                f'custom field "{name}" has invalid update policy '
                f'"{raw_field.get("updateDate")}"'
            ) from None
        custom_fields.append({"name": name, "type": field_type, "update_date": update_date})
    return custom_fields


def __column_sorting(value: Any) -> dict[str, list[Sorter]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise OptionsError("columnSorting must be a mapping of column to sorters")

    column_sorting: dict[str, list[Sorter]] = {}
    for column_name, sorters in value.items():
        if not isinstance(sorters, list):
            raise OptionsError(f'sorters for column "{column_name}" must be a list')
        column_sorting[str(column_name)] = [sorter_from_option(s) for s in sorters]
    return column_sorting
