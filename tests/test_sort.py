# SPDX-License-Identifier: MIT

from factories import make_task
from markban.model.sorter import SortOrder
from markban.query.sort import compare_values, sort_column, sort_filter, sort_tasks


def sorter(field, order=SortOrder.ASCENDING, filter=None):
    return {"field": field, "filter": filter, "order": order}


def test_sorts_by_name(board_index):
    tasks = [make_task("banana"), make_task("Apple"), make_task("cherry")]

    result = sort_tasks(tasks, [sorter("name")], board_index)

    assert [task["name"] for task in result] == ["Apple", "banana", "cherry"]


def test_later_sorters_break_ties(board_index):
    tasks = [
        make_task("Small one", tags=["Small"]),
        make_task("Large one", tags=["Large"]),
        make_task("Another small", tags=["Small"]),
    ]

    result = sort_tasks(
        tasks, [sorter("workload", SortOrder.DESCENDING), sorter("name")], board_index
    )

    assert [task["id"] for task in result] == ["large-one", "another-small", "small-one"]


def test_ties_keep_their_order(board_index):
    tasks = [make_task("b", tags=["Small"]), make_task("a", tags=["Small"])]

    result = sort_tasks(tasks, [sorter("workload")], board_index)

    assert [task["id"] for task in result] == ["b", "a"]


def test_sort_column_reorders_the_index(board_index):
    board_index["columns"]["Todo"] = ["b", "a"]
    tasks = [make_task("b"), make_task("a")]

    sort_column(board_index, tasks, "Todo", [sorter("id")])

    assert board_index["columns"]["Todo"] == ["a", "b"]


def test_sort_column_keeps_ids_it_has_no_task_for(board_index):
    board_index["columns"]["Todo"] = ["gone", "b", "lost", "a"]
    tasks = [make_task("b"), make_task("a")]

    sort_column(board_index, tasks, "Todo", [sorter("id")])

    assert board_index["columns"]["Todo"] == ["a", "b", "gone", "lost"]


def test_sort_filter_picks_out_matches():
    assert sort_filter("task-12", r"\d+") == "12"
    assert sort_filter("release v1.2", r"v(\d+)") == "1"
    assert sort_filter("v1.2", r"(?P<major>\d+)\.(?P<minor>\d+)") == "12"
    assert sort_filter("no digits", r"\d+") == ""


def test_compare_values():
    assert compare_values(1, 2) == -1
    assert compare_values(2.5, 2.5) == 0
    assert compare_values("b", "A") == 1
    assert compare_values("école", "ecole") == 0


def test_sort_by_id(board_index):
    tasks = [make_task("C task 2"), make_task("A task 3"), make_task("B task 1")]

    ascending = sort_tasks(tasks, [sorter("id")], board_index)
    descending = sort_tasks(tasks, [sorter("id", SortOrder.DESCENDING)], board_index)

    assert [task["id"] for task in ascending] == ["a-task-3", "b-task-1", "c-task-2"]
    assert [task["id"] for task in descending] == ["c-task-2", "b-task-1", "a-task-3"]


def test_sort_by_extracted_digit(board_index):
    tasks = [make_task("C task 2"), make_task("A task 3"), make_task("B task 1")]

    result = sort_tasks(
        tasks, [sorter("id", filter=r"[abc]-task-(\d)")], board_index
    )

    assert [task["id"] for task in result] == ["b-task-1", "c-task-2", "a-task-3"]
