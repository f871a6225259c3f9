# SPDX-License-Identifier: MIT

import re
from abc import ABC, abstractmethod
from typing import Any, cast

import pendulum

from markban.model.filter import FilterScalar, FilterValue, TaskFilter
from markban.model.index import Index
from markban.model.options import BoardOptions, resolve_options
from markban.model.task import Task
from markban.query.field import Field, FieldType, TaskRow, resolve_field
from markban.service.board import find_task_column
from markban.time import same_local_day


def filter_tasks(tasks: list[Task], task_filter: TaskFilter, index: Index) -> list[Task]:
    """Keep the tasks matching every predicate in the filter.

    Args:
        tasks: Tasks to filter, in the order they should be returned
        task_filter: Field name to predicate value, None entries are ignored
        index: The index the tasks belong to, for columns and options

    Returns:
        The matching tasks in their original order
    """
    options = resolve_options(index["options"])
    predicate = generate_filter(task_filter, options)
    return [
        task
        for task in tasks
        if predicate.include(TaskRow(task, find_task_column(index, task["id"]), options))
    ]


def generate_filter(task_filter: TaskFilter, options: BoardOptions) -> "And":
    filter_obj = And()
    for field_name, value in task_filter.items():
        if value is None or value == []:
            continue
        filter_obj.add_predicate(
            predicate_factory(resolve_field(field_name, options), value)
        )
    return filter_obj


def predicate_factory(field: Field, value: FilterValue) -> "Predicate":
    values = value if isinstance(value, list) else [value]
    match field.type:
        case FieldType.STRING:
            return StrRegex(field, [str(v) for v in values])
        case FieldType.NUMBER:
            return NumberRange(field, cast(list[float], values))
        case FieldType.DATE:
            return Date(field, cast(list[pendulum.DateTime], values))
        case FieldType.BOOLEAN:
            return Equals(field, values)
    raise ValueError(f"no predicate for {field.type}")


def string_matches(patterns: list[str], text: str) -> bool:
    return re.search("|".join(patterns), text, re.IGNORECASE) is not None


def number_matches(numbers: list[float], value: float) -> bool:
    return min(numbers) <= value <= max(numbers)


def date_matches(dates: list[pendulum.DateTime], value: pendulum.DateTime) -> bool:
    if len(dates) == 1:
        return same_local_day(value, dates[0])
    return min(dates) <= value <= max(dates)


class Predicate(ABC):
    @abstractmethod
    def include(self, row: TaskRow) -> bool: ...


class And(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def include(self, row: TaskRow) -> bool:
        return all(predicate.include(row) for predicate in self.predicates)


class FieldPredicate(Predicate):
    def __init__(self, field: Field, values: list[Any]) -> None:
        self.field = field
        self.values = values

    def include(self, row: TaskRow) -> bool:
        value = self.field.value(row)
        if value is None:
            return False
        return self.matches(value)

    @abstractmethod
    def matches(self, value: Any) -> bool: ...


class StrRegex(FieldPredicate):
    def matches(self, value: Any) -> bool:
        return string_matches(self.values, str(value))


class NumberRange(FieldPredicate):
    def matches(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return False
        return number_matches(self.values, value)


class Date(FieldPredicate):
    def matches(self, value: Any) -> bool:
        if not isinstance(value, pendulum.DateTime):
            return False
        return date_matches(self.values, value)


class Equals(FieldPredicate):
    def matches(self, value: Any) -> bool:
        return any(value == cast(FilterScalar, v) for v in self.values)
