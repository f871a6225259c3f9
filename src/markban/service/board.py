# SPDX-License-Identifier: MIT

"""Index mutations.

Each mutation changes the index in place and returns it so calls can be
chained. A task id is in at most one column at a time.
"""

from typing import Optional

from markban.model.index import Index
from markban.model.task_id import TaskId


def find_task_column(index: Index, task_id: TaskId) -> Optional[str]:
    for column_name, task_ids in index["columns"].items():
        if task_id in task_ids:
            return column_name
    return None


def contains(index: Index, task_id: TaskId) -> bool:
    return find_task_column(index, task_id) is not None


def tracked_task_ids(index: Index, column_name: Optional[str] = None) -> list[TaskId]:
    """Task ids in the index, in column order then position order.

    Args:
        index: The index
        column_name: Only return ids from this column

    Returns:
        The tracked ids without duplicates
    """
    if column_name is not None:
        columns = [index["columns"].get(column_name, [])]
    else:
        columns = list(index["columns"].values())
    return list(dict.fromkeys(task_id for task_ids in columns for task_id in task_ids))


def add_task(
    index: Index, task_id: TaskId, column_name: str, position: Optional[int] = None
) -> Index:
    if position is None:
        index["columns"][column_name].append(task_id)
    else:
        index["columns"][column_name].insert(position, task_id)
    return index


def remove_task(index: Index, task_id: TaskId) -> Index:
    for column_name, task_ids in index["columns"].items():
        index["columns"][column_name] = [t for t in task_ids if t != task_id]
    return index


def rename_task(index: Index, task_id: TaskId, new_task_id: TaskId) -> Index:
    for column_name, task_ids in index["columns"].items():
        index["columns"][column_name] = [
            new_task_id if t == task_id else t for t in task_ids
        ]
    return index
