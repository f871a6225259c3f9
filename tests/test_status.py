# SPDX-License-Identifier: MIT

import pytest

from factories import at, make_task
from markban.exceptions import SprintNotFoundError
from markban.model.options import resolve_sprints
from markban.service.status import compute_status, select_sprint


@pytest.fixture
def tasks(board_index):
    board_index["columns"] = {"Todo": ["a"], "In Progress": ["b"], "Done": ["c"]}
    return [
        make_task("a", tags=["Large"], assigned="alice", created=at(5), due=at(3)),
        make_task("b", assigned="alice", created=at(8, 0), progress=0.5),
        make_task("c", created=at(6, 0), completed=at(9)),
    ]


@pytest.fixture
def sprints(board_index):
    board_index["options"]["sprints"] = [
        {"name": "One", "start": "2024-03-01T00:00:00+00:00"},
        {"name": "Two", "start": "2024-03-08T00:00:00+00:00", "description": "second"},
    ]


def ids(period):
    return [task["id"] for task in period["tasks"]]


def test_quiet_only_counts(tasks, board_index):
    report = compute_status(board_index, tasks, quiet=True)

    assert report["tasks"] == 3
    assert report["column_tasks"] == {"Todo": 1, "In Progress": 1, "Done": 1}
    assert report["started_tasks"] == 1
    assert report["completed_tasks"] == 1
    assert report["total_workload"] is None
    assert report["column_workloads"] is None


def test_workloads(tasks, board_index):
    report = compute_status(board_index, tasks, now=at(10))

    assert report["total_workload"] == 9
    assert report["total_remaining_workload"] == 6
    assert report["column_workloads"] == {
        "Todo": {"workload": 5, "remaining_workload": 5},
        "In Progress": {"workload": 2, "remaining_workload": 1},
        "Done": {"workload": 2, "remaining_workload": 0},
    }
    assert report["task_workloads"]["c"]["completed"]
    assert report["assigned"] == {
        "alice": {"total": 2, "workload": 7, "remaining_workload": 6}
    }
    assert report["sprint"] is None
    assert report["due_tasks"] is None


def test_due_tasks(tasks, board_index):
    report = compute_status(board_index, tasks, due=True, now=at(4))

    assert report["due_tasks"] is not None
    assert [due_task["task"] for due_task in report["due_tasks"]] == ["a"]
    assert report["due_tasks"][0]["overdue"]
    assert report["due_tasks"][0]["workload"] == 5


def test_current_sprint_runs_until_now(tasks, board_index, sprints):
    report = compute_status(board_index, tasks, now=at(10))

    sprint = report["sprint"]
    assert sprint is not None
    assert sprint["number"] == 2
    assert sprint["description"] == "second"
    assert sprint["end"] is None
    assert sprint["current"] is None
    assert ids(sprint["created"]) == ["b"]
    assert ids(sprint["completed"]) == ["c"]


def test_past_sprint_ends_when_the_next_starts(tasks, board_index, sprints):
    report = compute_status(board_index, tasks, sprint=1, now=at(10))

    sprint = report["sprint"]
    assert sprint is not None
    assert sprint["name"] == "One"
    assert sprint["end"] == at(8, 0)
    assert sprint["current"] == 2
    assert sprint["duration_message"] == "1 week"
    # b was created exactly as sprint two started
    assert ids(sprint["created"]) == ["a", "c"]
    assert sprint["created"]["workload"] == 7
    assert ids(sprint["due"]) == ["a"]


def test_sprint_by_name(tasks, board_index, sprints):
    report = compute_status(board_index, tasks, sprint="One", now=at(10))

    assert report["sprint"] is not None
    assert report["sprint"]["number"] == 1


def test_select_sprint_errors():
    sprints = resolve_sprints([{"start": "2024-03-01T00:00:00+00:00"}])

    assert select_sprint(sprints, 1)["name"] == "Sprint 1"
    with pytest.raises(SprintNotFoundError, match="Sprint 3 does not exist"):
        select_sprint(sprints, 3)
    with pytest.raises(SprintNotFoundError, match='No sprint found with name "Nope"'):
        select_sprint(sprints, "Nope")


def test_single_date_covers_the_whole_day(tasks, board_index):
    report = compute_status(board_index, tasks, dates=[at(6, 18)], now=at(10))

    period = report["period"]
    assert period is not None
    assert period["start"] == at(6, 0)
    assert ids(period["created"]) == ["c"]
    assert ids(period["completed"]) == []


def test_date_range_includes_both_ends(tasks, board_index):
    report = compute_status(board_index, tasks, dates=[at(9), at(5)], now=at(10))

    period = report["period"]
    assert period is not None
    assert ids(period["created"]) == ["a", "b", "c"]
    assert ids(period["completed"]) == ["c"]
    assert ids(period["started"]) == []
