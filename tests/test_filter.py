# SPDX-License-Identifier: MIT

import pytest

from factories import at, make_task
from markban.exceptions import QueryError
from markban.query.filter import filter_tasks, string_matches


@pytest.fixture
def tasks(board_index):
    board_index["columns"]["Todo"] = ["alpha", "beta"]
    board_index["columns"]["Done"] = ["gamma"]
    return [
        make_task("Alpha", tags=["Large", "backend"], assigned="alice", due=at(4, 9)),
        make_task("Beta", tags=["frontend"], assigned="bob"),
        make_task("Gamma"),
    ]


def ids(tasks):
    return [task["id"] for task in tasks]


def test_string_fields_match_a_regex_ignoring_case(tasks, board_index):
    assert ids(filter_tasks(tasks, {"name": "^a"}, board_index)) == ["alpha"]
    assert ids(filter_tasks(tasks, {"tags": "END$"}, board_index)) == ["alpha", "beta"]


def test_several_patterns_match_any(tasks, board_index):
    result = filter_tasks(tasks, {"assigned": ["alice", "bob"]}, board_index)

    assert ids(result) == ["alpha", "beta"]


def test_column_is_a_field(tasks, board_index):
    assert ids(filter_tasks(tasks, {"column": "Done"}, board_index)) == ["gamma"]


def test_numbers_match_a_range(tasks, board_index):
    # Large is 5, untagged tasks fall back to 2
    assert ids(filter_tasks(tasks, {"workload": [1, 3]}, board_index)) == ["beta", "gamma"]
    assert ids(filter_tasks(tasks, {"countTags": 2}, board_index)) == ["alpha"]


def test_completed_column_counts_as_full_progress(tasks, board_index):
    assert ids(filter_tasks(tasks, {"progress": 1}, board_index)) == ["gamma"]


def test_single_date_matches_the_whole_day(tasks, board_index):
    assert ids(filter_tasks(tasks, {"due": at(4, 23)}, board_index)) == ["alpha"]
    assert filter_tasks(tasks, {"due": at(5)}, board_index) == []


def test_tasks_without_the_value_never_match(tasks, board_index):
    assert ids(filter_tasks(tasks, {"due": [at(1), at(9)]}, board_index)) == ["alpha"]


def test_every_predicate_must_hold(tasks, board_index):
    result = filter_tasks(tasks, {"tags": "end", "assigned": "bob"}, board_index)

    assert ids(result) == ["beta"]


def test_empty_predicates_are_ignored(tasks, board_index):
    result = filter_tasks(tasks, {"assigned": None, "tags": []}, board_index)

    assert ids(result) == ["alpha", "beta", "gamma"]


def test_custom_fields_can_be_filtered(tasks, board_index):
    board_index["options"]["customFields"] = [{"name": "points", "type": "number"}]
    tasks[1]["metadata"]["custom_fields"]["points"] = 8

    assert ids(filter_tasks(tasks, {"points": [5, 10]}, board_index)) == ["beta"]


def test_unknown_field_is_an_error(tasks, board_index):
    with pytest.raises(QueryError, match='Unknown field "nope"'):
        filter_tasks(tasks, {"nope": "x"}, board_index)


def test_string_matches():
    assert string_matches(["foo", "bar"], "a BAR b")
    assert not string_matches(["^foo"], "a foo")
