# SPDX-License-Identifier: MIT

import pendulum
import pytest
import typer

from markban.model.sorter import SortOrder
from markban.query.field import FieldType
from markban.terminal.parse import (
    parse_datetime,
    parse_field_assignment,
    parse_field_value,
    parse_sorter,
    parse_sprint,
)


def test_parse_sorter():
    assert parse_sorter("name") == {
        "field": "name",
        "filter": None,
        "order": SortOrder.ASCENDING,
    }
    assert parse_sorter("desc workload") == {
        "field": "workload",
        "filter": None,
        "order": SortOrder.DESCENDING,
    }
    assert parse_sorter(r"ASC name:\d+")["filter"] == r"\d+"


def test_parse_sorter_rejects_garbage():
    with pytest.raises(typer.BadParameter):
        parse_sorter("sideways name")


def test_parse_datetime_reads_dates_as_local_time():
    assert parse_datetime("2024-03-04") == pendulum.datetime(2024, 3, 4, tz="UTC")
    assert parse_datetime("2024-03-04 09:30") == pendulum.datetime(
        2024, 3, 4, 9, 30, tz="UTC"
    )
    assert parse_datetime(None) is None


def test_parse_datetime_keywords():
    assert parse_datetime("today") == pendulum.today().in_tz("UTC")
    assert parse_datetime("1") == pendulum.tomorrow().in_tz("UTC")
    with pytest.raises(typer.BadParameter, match="Incorrect datetime format"):
        parse_datetime("someday")


def test_parse_sprint():
    assert parse_sprint("2") == 2
    assert parse_sprint("Sprint 2") == "Sprint 2"


def test_parse_field_assignment():
    assert parse_field_assignment("points = 3") == ("points", "3")
    with pytest.raises(typer.BadParameter):
        parse_field_assignment("points")


def test_parse_field_value():
    assert parse_field_value(FieldType.NUMBER, "3") == 3
    assert parse_field_value(FieldType.NUMBER, "2.5") == 2.5
    assert parse_field_value(FieldType.BOOLEAN, "no") is False
    assert parse_field_value(FieldType.STRING, "text") == "text"
    with pytest.raises(typer.BadParameter):
        parse_field_value(FieldType.NUMBER, "many")
