# SPDX-License-Identifier: MIT

import pytest

from factories import at, make_task
from markban.exceptions import SprintNotFoundError
from markban.model.burndown import EventType
from markban.service.burndown import compute_burndown
from markban.time import Resolution, auto_resolution


@pytest.fixture
def tasks(board_index):
    board_index["columns"] = {"Todo": [], "In Progress": ["b"], "Done": ["a"]}
    return [
        make_task("a", created=at(1), started=at(2), completed=at(4), assigned="alice"),
        make_task("b", tags=["Large"], created=at(1), started=at(3)),
    ]


def points(series):
    return [(sample["x"], sample["y"], sample["count"]) for sample in series["data_points"]]


def test_board_without_sprints_covers_all_history(tasks, board_index):
    report = compute_burndown(board_index, tasks, now=at(5))

    assert len(report["series"]) == 1
    series = report["series"][0]
    assert series["sprint"] is None
    assert points(series) == [
        (at(1), 0, 0),
        (at(2), 2, 1),
        (at(3), 7, 2),
        (at(4), 5, 1),
        (at(5), 5, 1),
    ]


def test_samples_list_the_events_at_each_point(tasks, board_index):
    series = compute_burndown(board_index, tasks, now=at(5))["series"][0]

    assert series["data_points"][0]["tasks"] == [
        {"event_type": EventType.CREATED, "task": "a"},
        {"event_type": EventType.CREATED, "task": "b"},
    ]
    assert series["data_points"][3]["tasks"] == [
        {"event_type": EventType.COMPLETED, "task": "a"}
    ]


def test_assigned_filter(tasks, board_index):
    series = compute_burndown(board_index, tasks, assigned="alice", now=at(5))["series"][0]

    assert [sample["y"] for sample in series["data_points"]] == [0, 2, 0, 0]


def test_column_filter(tasks, board_index):
    series = compute_burndown(
        board_index, tasks, columns=["In Progress"], now=at(5)
    )["series"][0]

    assert [sample["y"] for sample in series["data_points"]] == [0, 5, 5]


def test_tasks_in_started_columns_count_from_creation(board_index):
    board_index["columns"]["In Progress"] = ["c"]
    tasks = [make_task("c", created=at(2))]

    series = compute_burndown(board_index, tasks, now=at(3))["series"][0]

    assert points(series) == [(at(2), 2, 1), (at(3), 2, 1)]


def test_history_starts_at_the_earliest_recorded_stamp(board_index):
    board_index["columns"]["Todo"] = ["a", "b"]
    tasks = [make_task("a", created=at(2)), make_task("b")]

    series = compute_burndown(board_index, tasks, now=at(10))["series"][0]

    assert series["start"] == at(2)
    assert series["end"] == at(10)


def test_history_without_stamps_starts_now(board_index):
    board_index["columns"]["Todo"] = ["a"]

    series = compute_burndown(board_index, [make_task("a")], now=at(10))["series"][0]

    assert series["start"] == at(10)


def test_sprint_series(tasks, board_index):
    board_index["options"]["sprints"] = [
        {"name": "One", "start": "2024-03-01T00:00:00+00:00"},
        {"name": "Two", "start": "2024-03-03T12:00:00+00:00"},
    ]

    report = compute_burndown(board_index, tasks, sprints=[1, "Two"], now=at(5))

    first, second = report["series"]
    assert first["sprint"] is not None
    assert first["sprint"]["name"] == "One"
    assert (first["start"], first["end"]) == (at(1, 0), at(3))
    assert second["sprint"] is not None
    assert (second["start"], second["end"]) == (at(3), at(5))


def test_sprints_need_sprints_defined(tasks, board_index):
    with pytest.raises(SprintNotFoundError, match="No sprints defined"):
        compute_burndown(board_index, tasks, sprints=[1], now=at(5))


def test_dates_add_a_series(tasks, board_index):
    report = compute_burndown(board_index, tasks, dates=[at(3), at(2)], now=at(5))

    assert points(report["series"][0]) == [(at(2), 2, 1), (at(3), 7, 2)]


def test_auto_normalise_truncates_to_days(tasks, board_index):
    report = compute_burndown(
        board_index, tasks, normalise=Resolution.AUTO, now=at(10)
    )

    series = report["series"][0]
    assert series["start"] == at(1, 0)
    assert series["end"] == at(10, 0)
    assert [sample["x"] for sample in series["data_points"]] == [
        at(1, 0),
        at(2, 0),
        at(3, 0),
        at(4, 0),
        at(10, 0),
    ]


def test_auto_resolution():
    assert auto_resolution(at(1), at(9)) == Resolution.DAYS
    assert auto_resolution(at(1), at(3)) == Resolution.HOURS
    assert auto_resolution(at(1), at(1, 14)) == Resolution.MINUTES
    assert auto_resolution(at(1), at(1).add(minutes=5)) == Resolution.SECONDS
