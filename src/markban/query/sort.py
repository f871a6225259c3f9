# SPDX-License-Identifier: MIT

import datetime
import locale
import logging
import re
import unicodedata
from functools import cmp_to_key
from typing import Any

from markban.model.index import Index
from markban.model.options import resolve_options
from markban.model.sorter import Sorter, SortOrder
from markban.model.task import Task
from markban.query.field import Field, FieldType, TaskRow, resolve_field
from markban.service.board import find_task_column

logger = logging.getLogger(__name__)


def sort_tasks(tasks: list[Task], sorters: list[Sorter], index: Index) -> list[Task]:
    """Sort tasks by several keys.

    Sorters are applied in order, each one only breaking ties left by the
    ones before it. Tasks that tie on every sorter keep their input order.

    Args:
        tasks: The tasks to sort
        sorters: Sort keys, most significant first
        index: The index the tasks belong to, for columns and options

    Returns:
        A new sorted list
    """
    options = resolve_options(index["options"])
    fields = [resolve_field(sorter["field"], options) for sorter in sorters]
    rows = [
        TaskRow(task, find_task_column(index, task["id"]), options) for task in tasks
    ]

    def compare_rows(a: TaskRow, b: TaskRow) -> int:
        for sorter, field in zip(sorters, fields):
            value_a = sort_value(field, a, sorter["filter"])
            value_b = sort_value(field, b, sorter["filter"])
            if sorter["order"] == SortOrder.DESCENDING:
                result = compare_values(value_b, value_a)
            else:
                result = compare_values(value_a, value_b)
            if result != 0:
                return result
        return 0

    return [row.task for row in sorted(rows, key=cmp_to_key(compare_rows))]


def sort_column(
    index: Index, tasks: list[Task], column_name: str, sorters: list[Sorter]
) -> Index:
    """Reorder a column by sorting the tasks in it.

    Ids in the column with no matching task, such as tracked ids whose task
    file is missing, are kept after the sorted tasks in their previous order.

    Returns:
        The same index, with the column reordered
    """
    logger.debug("sorting column %r by %s", column_name, [s["field"] for s in sorters])
    sorted_ids = [task["id"] for task in sort_tasks(tasks, sorters, index)]
    loaded = set(sorted_ids)
    index["columns"][column_name] = sorted_ids + [
        task_id for task_id in index["columns"][column_name] if task_id not in loaded
    ]
    return index


def sort_value(field: Field, row: TaskRow, filter: str | None) -> Any:
    value = field.value(row)
    if value is None:
        value = "" if field.type == FieldType.STRING else 0
    if filter:
        if isinstance(value, datetime.datetime):
            value = value.isoformat()
        return sort_filter(str(value), filter)
    return value


def sort_filter(value: str, filter: str) -> str:
    """Replace a value with the parts of it picked out by a regex.

    Every match contributes its named groups joined together when the regex
    has named groups, otherwise its first group, otherwise the whole match.
    Matching is case-insensitive.
    """
    pattern = re.compile(filter, re.IGNORECASE)
    parts = []
    for match in pattern.finditer(value):
        if pattern.groupindex:
            parts.append("".join(group or "" for group in match.groupdict().values()))
        elif pattern.groups and match.group(1):
            parts.append(match.group(1))
        else:
            parts.append(match.group(0))
    return "".join(parts)


def collation_key(text: str) -> str:
    stripped = "".join(
        c for c in unicodedata.normalize("NFKD", text) if not unicodedata.combining(c)
    )
    return locale.strxfrm(stripped.casefold())


def compare_values(a: Any, b: Any) -> int:
    if isinstance(a, str) and isinstance(b, str):
        key_a, key_b = collation_key(a), collation_key(b)
        return (key_a > key_b) - (key_a < key_b)
    if isinstance(a, str) or isinstance(b, str):
        return compare_values(str(a), str(b))

    difference = __numeric(a) - __numeric(b)
    return (difference > 0) - (difference < 0)


def __numeric(value: Any) -> float:
    if isinstance(value, datetime.datetime):
        return value.timestamp()
    return float(value)
