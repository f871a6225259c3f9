# SPDX-License-Identifier: MIT

import json

import pendulum
import pytest

from markban.exceptions import (
    ColumnNotFoundError,
    DuplicateTaskError,
    NotInitialisedError,
    ProjectError,
    TaskNotFoundError,
)
from markban.model.options import resolve_options
from markban.model.sorter import SortOrder
from markban.model.task import get_task_template
from markban.repository.project import ProjectRepository


@pytest.fixture
def repository(tmp_path):
    repository = ProjectRepository(tmp_path)
    repository.initialise("Board", columns=["Todo", "In Progress", "Done"])
    return repository


def create(repository, name, column="Todo"):
    return repository.create_task(get_task_template(name), column)


def test_uninitialised_folder(tmp_path):
    repository = ProjectRepository(tmp_path)

    assert not repository.initialised()
    with pytest.raises(NotInitialisedError, match="Not initialised in this folder"):
        repository.load_index()


def test_initialise_writes_the_index(repository, tmp_path):
    assert (tmp_path / ".markban" / "index.md").is_file()
    assert (tmp_path / ".markban" / "tasks").is_dir()

    index = repository.load_index()
    assert index["name"] == "Board"
    assert list(index["columns"]) == ["Todo", "In Progress", "Done"]
    assert index["options"]["startedColumns"] == ["In Progress"]


def test_reinitialise_keeps_tasks_and_adds_columns(repository):
    create(repository, "Keep me")

    index = repository.initialise("Renamed", columns=["Todo", "Review"])

    assert index["name"] == "Renamed"
    assert list(index["columns"]) == ["Todo", "In Progress", "Done", "Review"]
    assert index["columns"]["Todo"] == ["keep-me"]


def test_create_task(repository):
    task_id = create(repository, "Write Docs")

    assert task_id == "write-docs"
    assert repository.task_path(task_id).is_file()
    assert repository.load_index()["columns"]["Todo"] == ["write-docs"]
    task = repository.load_task(task_id)
    assert task["name"] == "Write Docs"
    assert task["metadata"]["created"] is not None
    assert task["metadata"]["started"] is None


def test_create_task_in_a_started_column_stamps_started(repository):
    task_id = create(repository, "Busy", column="In Progress")

    assert repository.load_task(task_id)["metadata"]["started"] is not None


def test_create_task_errors(repository):
    create(repository, "Write Docs")

    with pytest.raises(DuplicateTaskError, match='"write-docs" already exists'):
        create(repository, "write docs")
    with pytest.raises(ProjectError, match="Task name cannot be blank"):
        create(repository, "   ")
    with pytest.raises(ColumnNotFoundError, match='Column "Nope" doesn\'t exist'):
        create(repository, "Other", column="Nope")


def test_move_task_stamps_linked_dates(repository):
    task_id = create(repository, "Ship it")

    repository.move_task(task_id, "In Progress")
    repository.move_task(task_id, "Done")

    task = repository.load_task(task_id)
    assert task["metadata"]["started"] is not None
    assert task["metadata"]["completed"] is not None
    assert repository.find_task_column(task_id) == "Done"


def test_move_task_positions(repository):
    for name in ("a", "b", "c"):
        create(repository, name)

    repository.move_task("c", "Todo", position=0)
    assert repository.find_tracked_tasks("Todo") == ["c", "a", "b"]

    repository.move_task("a", "Todo", position=5, relative=True)
    assert repository.find_tracked_tasks("Todo") == ["c", "b", "a"]

    repository.move_task("b", "Done", position=-3)
    assert repository.find_tracked_tasks("Done") == ["b"]


def test_move_task_errors(repository):
    create(repository, "a")

    with pytest.raises(ColumnNotFoundError):
        repository.move_task("a", "Nope")
    with pytest.raises(TaskNotFoundError, match='No task file found with id "zzz"'):
        repository.move_task("zzz", "Done")


def test_rename_task(repository):
    create(repository, "Write Docs")

    new_id = repository.rename_task("write-docs.md", "Write Guides")

    assert new_id == "write-guides"
    assert not repository.task_path("write-docs").exists()
    assert repository.load_index()["columns"]["Todo"] == ["write-guides"]
    assert repository.load_task(new_id)["name"] == "Write Guides"


def test_rename_to_a_taken_id(repository):
    create(repository, "a")
    create(repository, "b")

    with pytest.raises(DuplicateTaskError):
        repository.rename_task("a", "B")


def test_update_task_renames_and_moves(repository):
    create(repository, "Draft")
    task = repository.load_task("draft")
    task["name"] = "Final"
    task["metadata"]["tags"] = ["Large"]

    task_id = repository.update_task("draft", task, column_name="Done")

    assert task_id == "final"
    updated = repository.load_task(task_id)
    assert updated["metadata"]["tags"] == ["Large"]
    assert updated["metadata"]["updated"] is not None
    assert repository.find_task_column(task_id) == "Done"


def test_comment(repository):
    create(repository, "a")

    repository.comment("a", "Looks good\nShip it", "bob")

    comments = repository.load_task("a")["comments"]
    assert len(comments) == 1
    assert comments[0]["author"] == "bob"
    assert comments[0]["text"] == "Looks good\nShip it"
    assert comments[0]["date"] is not None
    with pytest.raises(ProjectError, match="Comment text cannot be empty"):
        repository.comment("a", "  ", "bob")


def test_delete_task(repository):
    create(repository, "a")
    create(repository, "b")

    repository.delete_task("a")
    repository.delete_task("b", remove_file=True)

    assert repository.find_tracked_tasks() == []
    assert repository.find_untracked_tasks() == ["a"]
    assert not repository.task_path("b").exists()
    with pytest.raises(TaskNotFoundError, match='Task "a" is not in the index'):
        repository.delete_task("a")


def test_untracked_tasks_can_be_tracked(repository):
    repository.task_path("loose").write_text("# Loose\n")

    assert repository.find_untracked_tasks() == ["loose"]

    repository.add_untracked_task("loose.md", "In Progress")

    assert repository.find_untracked_tasks() == []
    assert repository.find_task_column("loose") == "In Progress"
    assert repository.load_task("loose")["metadata"]["started"] is not None


def test_task_id_comes_from_the_file_name(repository):
    repository.task_path("odd").write_text("# Something Else\n")

    assert repository.load_task("odd")["id"] == "odd"


def test_sort_column(repository):
    create(repository, "B task")
    create(repository, "A task")
    name_sorter = {"field": "name", "filter": None, "order": SortOrder.ASCENDING}

    repository.sort("Todo", [name_sorter])

    assert repository.find_tracked_tasks("Todo") == ["a-task", "b-task"]
    assert "Todo" not in repository.load_index()["options"]["columnSorting"]


def test_saved_sorters_apply_on_every_save(repository):
    create(repository, "B task")
    create(repository, "A task")
    name_sorter = {"field": "name", "filter": None, "order": SortOrder.ASCENDING}

    repository.sort("Todo", [name_sorter], save=True)
    create(repository, "AA task")

    assert repository.find_tracked_tasks("Todo") == ["a-task", "aa-task", "b-task"]
    assert repository.load_index()["options"]["columnSorting"] == {
        "Todo": [{"field": "name", "filter": None, "order": "ascending"}]
    }


def test_sorting_keeps_ids_without_a_task_file(repository):
    create(repository, "B task")
    index = repository.load_index()
    index["columns"]["Todo"].append("missing-task")
    repository.save_index(index)
    name_sorter = {"field": "name", "filter": None, "order": SortOrder.ASCENDING}

    repository.sort("Todo", [name_sorter], save=True)

    assert repository.find_tracked_tasks("Todo") == ["b-task", "missing-task"]

    create(repository, "A task")

    assert repository.find_tracked_tasks("Todo") == [
        "a-task",
        "b-task",
        "missing-task",
    ]


def test_description_cannot_hold_a_column_heading(repository):
    with pytest.raises(ProjectError, match="cannot contain"):
        repository.initialise("Board", description="Intro\n\n## Notes\n\nmore")

    index = repository.initialise("Board", description="```\n## fenced\n```")

    assert repository.load_index()["description"] == index["description"]


def test_sprints(repository):
    first = repository.sprint("First", start=pendulum.datetime(2024, 3, 1, tz="UTC"))
    second = repository.sprint()

    assert first["number"] == 1
    assert second["number"] == 2
    assert second["name"] == "Sprint 2"
    sprints = resolve_options(repository.load_index()["options"])["sprints"]
    assert [sprint["name"] for sprint in sprints] == ["First", "Sprint 2"]
    assert sprints[0]["start"] == pendulum.datetime(2024, 3, 1, tz="UTC")


def test_validate(repository):
    create(repository, "a")
    create(repository, "b")

    assert repository.validate() is True

    repository.task_path("b").write_text("no heading here\n")

    assert repository.validate() == [
        {"task": "b", "errors": "data is missing a name heading"}
    ]


def test_validate_reports_a_broken_index(repository):
    repository.index_path.write_text("")

    assert repository.validate() == [{"task": None, "errors": "data is null or empty"}]


def test_archive_and_restore(repository):
    create(repository, "a", column="In Progress")

    repository.archive_task("a")

    assert repository.find_tracked_tasks() == []
    assert not repository.task_path("a").exists()
    assert repository.list_archived_tasks() == ["a"]
    assert repository.load_archived_task("a")["metadata"]["column"] == "In Progress"

    repository.restore_task("a")

    assert repository.find_task_column("a") == "In Progress"
    assert repository.list_archived_tasks() == []
    assert repository.load_task("a")["metadata"]["column"] is None


def test_restore_errors(repository):
    with pytest.raises(ProjectError, match="Archive folder doesn't exist"):
        repository.restore_task("a")

    create(repository, "a")
    repository.archive_task("a")
    create(repository, "a")

    with pytest.raises(DuplicateTaskError, match="already an indexed task"):
        repository.restore_task("a")
    with pytest.raises(TaskNotFoundError, match='No archived task found with id "zzz"'):
        repository.restore_task("zzz")


def test_status_lists_untracked_files(repository):
    create(repository, "a")
    repository.task_path("loose").write_text("# Loose\n")

    report = repository.status(untracked=True)

    assert report["tasks"] == 1
    assert report["untracked_tasks"] == ["loose.md"]


def test_search(repository):
    create(repository, "Write docs")
    create(repository, "Fix bug")

    assert [task["id"] for task in repository.search({"name": "bug"})] == ["fix-bug"]


def test_project_config_moves_the_board(tmp_path):
    (tmp_path / "markban.json").write_text(json.dumps({"mainFolder": "board"}))
    repository = ProjectRepository(tmp_path)

    repository.initialise("Board", columns=["Todo"])

    assert (tmp_path / "board" / "index.md").is_file()
    assert not (tmp_path / "board" / "index.md").read_text().startswith("---")
    config = json.loads((tmp_path / "markban.json").read_text())
    assert config["mainFolder"] == "board"
    assert config["startedColumns"] == ["In Progress"]
    assert repository.load_index()["options"]["completedColumns"] == ["Done"]


def test_broken_project_config(tmp_path):
    (tmp_path / "markban.json").write_text("{not json")
    repository = ProjectRepository(tmp_path)

    with pytest.raises(ProjectError, match="Couldn't load config file"):
        repository.load_index()


def test_remove_all(repository):
    repository.remove_all()

    assert not repository.main_folder.exists()
    assert not repository.initialised()
