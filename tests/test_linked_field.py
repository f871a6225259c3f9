# SPDX-License-Identifier: MIT

import pytest

from factories import at, make_task
from markban.model.options import resolve_options
from markban.service.linked_field import linked_fields, update_column_linked_fields


@pytest.fixture
def options():
    return resolve_options(
        {
            "startedColumns": ["Doing"],
            "completedColumns": ["Done"],
            "reviewedColumns": ["Review"],
            "shippedColumns": ["Done"],
            "customFields": [
                {"name": "reviewed", "type": "date", "updateDate": "always"},
                {"name": "shipped", "type": "date"},
                {"name": "owner", "type": "string"},
            ],
        }
    )


def test_only_date_fields_are_linked(options):
    names = [linked_field.name for linked_field in linked_fields(options)]

    assert names == ["completed", "started", "reviewed", "shipped"]


def test_entering_a_linked_column_stamps_the_field(options):
    task = update_column_linked_fields(make_task("a"), "Doing", options, at(1))

    assert task["metadata"]["started"] == at(1)
    assert task["metadata"]["completed"] is None


def test_built_in_dates_are_stamped_once(options):
    task = update_column_linked_fields(make_task("a"), "Done", options, at(1))
    task = update_column_linked_fields(task, "Done", options, at(2))

    assert task["metadata"]["completed"] == at(1)


def test_always_policy_restamps(options):
    task = update_column_linked_fields(make_task("a"), "Review", options, at(1))
    task = update_column_linked_fields(task, "Review", options, at(2))

    assert task["metadata"]["custom_fields"]["reviewed"] == at(2)


def test_fields_without_a_policy_are_left_alone(options):
    task = update_column_linked_fields(make_task("a"), "Done", options, at(1))

    assert "shipped" not in task["metadata"]["custom_fields"]


def test_other_columns_change_nothing(options):
    task = update_column_linked_fields(make_task("a"), "Todo", options, at(1))

    assert task["metadata"]["started"] is None
    assert task["metadata"]["completed"] is None
    assert task["metadata"]["custom_fields"] == {}
