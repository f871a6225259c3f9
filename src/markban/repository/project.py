# SPDX-License-Identifier: MIT

import datetime
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

import pendulum
from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from markban import configuration
from markban.codec.index import decode_index, encode_index
from markban.codec.markdown import has_section_heading, to_yaml_value
from markban.codec.task import decode_task, encode_task
from markban.exceptions import (
    ColumnNotFoundError,
    DuplicateTaskError,
    MarkbanError,
    NotInitialisedError,
    ProjectError,
    TaskNotFoundError,
)
from markban.model.burndown import BurndownReport
from markban.model.filter import TaskFilter
from markban.model.index import Index
from markban.model.options import (
    default_index_options,
    resolve_options,
    sorter_to_option,
)
from markban.model.sorter import Sorter
from markban.model.sprint import Sprint
from markban.model.status import StatusReport
from markban.model.task import Task
from markban.model.task_id import (
    TASK_FILE_EXTENSION,
    TaskId,
    add_file_extension,
    get_task_id,
    remove_file_extension,
)
from markban.model.validation import ValidationError
from markban.query.filter import filter_tasks
from markban.query.sort import sort_column
from markban.service import board
from markban.service.burndown import compute_burndown
from markban.service.linked_field import update_column_linked_fields
from markban.service.status import compute_status
from markban.time import Resolution, now_utc, pendulum_to_python_utc

logger = logging.getLogger(__name__)


class ProjectRepository:
    """File-backed storage for one board.

    The board lives in a main folder under the project root, holding the
    index file, a folder of task files and an archive folder. A markban.yml
    or markban.json file in the root can rename those and carries options
    merged over the index options.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.config_yaml_path = root / configuration.PROJECT_CONFIG_YAML_NAME
        self.config_json_path = root / configuration.PROJECT_CONFIG_JSON_NAME
        self._config: Optional[configuration.ProjectConfiguration] = None
        self._config_loaded = False

    # Project configuration

    def config_exists(self) -> bool:
        return self.config_yaml_path.is_file() or self.config_json_path.is_file()

    def get_config(self) -> Optional[configuration.ProjectConfiguration]:
        if not self._config_loaded:
            self._config = self.__load_config()
            self._config_loaded = True
        return self._config

    def clear_config_cache(self) -> None:
        self._config = None
        self._config_loaded = False

    def save_config(self, config: configuration.ProjectConfiguration) -> None:
        if self.config_yaml_path.is_file():
            self.config_yaml_path.write_text(
                dump(to_yaml_value(config), Dumper=Dumper, sort_keys=False)
            )
        else:
            self.config_json_path.write_text(
                json.dumps(config, indent=4, default=_json_default)
            )
        self.clear_config_cache()

    def __load_config(self) -> Optional[configuration.ProjectConfiguration]:
        if self.config_yaml_path.is_file():
            try:
                config = load(self.config_yaml_path.read_text(), Loader=Loader)
            except YAMLError as e:
                raise ProjectError(f"Couldn't load config file: {e}") from e
        elif self.config_json_path.is_file():
            try:
                config = json.loads(self.config_json_path.read_text())
            except json.JSONDecodeError as e:
                raise ProjectError(f"Couldn't load config file: {e}") from e
        else:
            return None

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ProjectError("Couldn't load config file: not a mapping")
        return config

    # Paths

    def __folder_name(self, key: str, default: str) -> str:
        config = self.get_config()
        if config is not None and key in config:
            return str(config[key])
        return default

    @property
    def main_folder(self) -> Path:
        return self.root / self.__folder_name(
            "mainFolder", configuration.DEFAULT_FOLDER_NAME
        )

    @property
    def index_path(self) -> Path:
        return self.main_folder / self.__folder_name(
            "indexFile", configuration.DEFAULT_INDEX_FILE_NAME
        )

    @property
    def task_folder(self) -> Path:
        return self.main_folder / self.__folder_name(
            "taskFolder", configuration.DEFAULT_TASKS_FOLDER_NAME
        )

    @property
    def archive_folder(self) -> Path:
        return self.main_folder / self.__folder_name(
            "archiveFolder", configuration.DEFAULT_ARCHIVE_FOLDER_NAME
        )

    def task_path(self, task_id: TaskId) -> Path:
        return self.task_folder / add_file_extension(task_id)

    def archived_task_path(self, task_id: TaskId) -> Path:
        return self.archive_folder / add_file_extension(task_id)

    # Index

    def initialised(self) -> bool:
        return self.index_path.is_file()

    def __ensure_initialised(self) -> None:
        if not self.initialised():
            raise NotInitialisedError()

    def initialise(
        self,
        name: str,
        description: str = "",
        columns: Optional[list[str]] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Index:
        """
        Create the board folders and index, or update an existing index.

        Re-initialising renames the board and adds any new columns while
        keeping existing columns and the tasks in them.

        Args:
            name: The board name
            description: The board description
            columns: Column names, defaults to the configured default columns
            options: Options merged over the existing or default options

        Returns:
            The saved index
        """
        if has_section_heading(description):
            raise ProjectError('Board description cannot contain a "## " heading')
        column_names = columns if columns is not None else list(configuration.DEFAULT_COLUMNS)
        self.main_folder.mkdir(parents=True, exist_ok=True)
        self.task_folder.mkdir(parents=True, exist_ok=True)

        if self.initialised():
            index = self.load_index()
            index["name"] = name
            index["description"] = description
            index["options"].update(options or {})
            for column_name in column_names:
                index["columns"].setdefault(column_name, [])
            logger.info("re-initialised board %r", name)
        else:
            index = {
                "name": name,
                "description": description,
                "options": {
                    **default_index_options(),
                    **(options or {}),
                    **(self.get_config() or {}),
                },
                "columns": {column_name: [] for column_name in column_names},
            }
            logger.info("initialised board %r in %s", name, self.main_folder)

        self.save_index(index)
        return index

    def load_index(self) -> Index:
        self.__ensure_initialised()
        logger.debug("reading index %s", self.index_path)
        index = decode_index(self.index_path.read_text())

        config = self.get_config()
        if config is not None:
            index["options"] = {**index["options"], **config}
        return index

    def save_index(self, index: Index) -> None:
        """Write the index, sorting any columns that have saved sorters first."""
        options = resolve_options(index["options"])
        for column_name, sorters in options["column_sorting"].items():
            if column_name not in index["columns"]:
                logger.warning("saved sorters for missing column %r", column_name)
                continue
            sort_column(
                index,
                self.load_all_tracked_tasks(index, column_name),
                column_name,
                sorters,
            )

        suppress_options = False
        if self.config_exists():
            self.save_config(index["options"])
            suppress_options = True

        logger.debug("writing index %s", self.index_path)
        self.index_path.write_text(encode_index(index, suppress_options=suppress_options))

    # Tasks

    def load_task(self, task_id: TaskId, index: Optional[Index] = None) -> Task:
        task_id = remove_file_extension(task_id)
        path = self.task_path(task_id)
        if not path.is_file():
            raise TaskNotFoundError(f'No task file found with id "{task_id}"')
        return self.__read_task(path, index)

    def load_archived_task(self, task_id: TaskId, index: Optional[Index] = None) -> Task:
        task_id = remove_file_extension(task_id)
        path = self.archived_task_path(task_id)
        if not path.is_file():
            raise TaskNotFoundError(f'No archived task found with id "{task_id}"')
        return self.__read_task(path, index)

    def __read_task(self, path: Path, index: Optional[Index]) -> Task:
        if index is None:
            index = self.load_index()
        custom_fields = resolve_options(index["options"])["custom_fields"]
        logger.debug("reading task %s", path)
        task = decode_task(path.read_text(), custom_fields)
        # the file name is the identity, whatever the heading says
        task["id"] = remove_file_extension(path.name)
        return task

    def save_task(self, task_id: TaskId, task: Task) -> None:
        self.__write_task(self.task_path(task_id), task)

    def __write_task(self, path: Path, task: Task) -> None:
        logger.debug("writing task %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(encode_task(task))

    def load_all_tracked_tasks(
        self, index: Index, column_name: Optional[str] = None
    ) -> list[Task]:
        tasks = []
        for task_id in board.tracked_task_ids(index, column_name):
            if not self.task_path(task_id).is_file():
                logger.warning("tracked task %r has no task file", task_id)
                continue
            tasks.append(self.load_task(task_id, index))
        return tasks

    def __ensure_task(self, task_id: TaskId, index: Index) -> None:
        if not self.task_path(task_id).is_file():
            raise TaskNotFoundError(f'No task file found with id "{task_id}"')
        if not board.contains(index, task_id):
            raise TaskNotFoundError(f'Task "{task_id}" is not in the index')

    def find_task_column(self, task_id: TaskId) -> Optional[str]:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        return board.find_task_column(index, task_id)

    def find_tracked_tasks(self, column_name: Optional[str] = None) -> list[TaskId]:
        return board.tracked_task_ids(self.load_index(), column_name)

    def find_untracked_tasks(self) -> list[TaskId]:
        index = self.load_index()
        tracked = set(board.tracked_task_ids(index))
        if not self.task_folder.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.task_folder.glob(f"*{TASK_FILE_EXTENSION}")
            if path.stem not in tracked
        )

    def create_task(self, task: Task, column_name: str) -> TaskId:
        """
        Write a new task file and add the task to a column.

        Returns:
            The new task id

        Raises:
            ProjectError: If the name is blank
            DuplicateTaskError: If the id is already taken
            ColumnNotFoundError: If the column doesn't exist
        """
        self.__ensure_initialised()
        if not task["name"].strip():
            raise ProjectError("Task name cannot be blank")

        task_id = get_task_id(task["name"])
        if self.task_path(task_id).exists():
            raise DuplicateTaskError(f'A task with id "{task_id}" already exists')

        index = self.load_index()
        if column_name not in index["columns"]:
            raise ColumnNotFoundError(column_name)
        if board.contains(index, task_id):
            raise DuplicateTaskError(f'A task with id "{task_id}" is already in the index')

        task["id"] = task_id
        task["metadata"]["created"] = now_utc()
        update_column_linked_fields(task, column_name, resolve_options(index["options"]))
        self.save_task(task_id, task)

        board.add_task(index, task_id, column_name)
        self.save_index(index)
        logger.info("created task %r in %r", task_id, column_name)
        return task_id

    def add_untracked_task(self, task_id: TaskId, column_name: str) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        if not self.task_path(task_id).is_file():
            raise TaskNotFoundError(f'No task file found with id "{task_id}"')

        index = self.load_index()
        if column_name not in index["columns"]:
            raise ColumnNotFoundError(column_name)
        if board.contains(index, task_id):
            raise DuplicateTaskError(f'Task "{task_id}" is already in the index')

        task = self.load_task(task_id, index)
        update_column_linked_fields(task, column_name, resolve_options(index["options"]))
        self.save_task(task_id, task)

        board.add_task(index, task_id, column_name)
        self.save_index(index)
        logger.info("tracked task %r in %r", task_id, column_name)
        return task_id

    def update_task(
        self, task_id: TaskId, task: Task, column_name: Optional[str] = None
    ) -> TaskId:
        """
        Replace a task, renaming it if its name changed and moving it if a
        column is given.

        Returns:
            The task id, which changes when the task is renamed
        """
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        if not task["name"].strip():
            raise ProjectError("Task name cannot be blank")

        original = self.load_task(task_id, index)
        if original["name"] != task["name"]:
            task_id = self.rename_task(task_id, task["name"])
            index = self.load_index()

        if column_name is not None and column_name not in index["columns"]:
            raise ColumnNotFoundError(column_name)

        task["id"] = task_id
        task["metadata"]["updated"] = now_utc()
        self.save_task(task_id, task)

        if column_name is not None:
            self.move_task(task_id, column_name)
        else:
            self.save_index(index)
        logger.info("updated task %r", task_id)
        return task_id

    def rename_task(self, task_id: TaskId, new_name: str) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        if not new_name.strip():
            raise ProjectError("Task name cannot be blank")

        new_task_id = get_task_id(new_name)
        if new_task_id != task_id:
            if self.task_path(new_task_id).exists():
                raise DuplicateTaskError(f'A task with id "{new_task_id}" already exists')
            if board.contains(index, new_task_id):
                raise DuplicateTaskError(
                    f'A task with id "{new_task_id}" is already in the index'
                )

        task = self.load_task(task_id, index)
        task["name"] = new_name
        task["id"] = new_task_id
        task["metadata"]["updated"] = now_utc()
        self.save_task(task_id, task)
        self.task_path(task_id).rename(self.task_path(new_task_id))

        board.rename_task(index, task_id, new_task_id)
        self.save_index(index)
        logger.info("renamed task %r to %r", task_id, new_task_id)
        return new_task_id

    def move_task(
        self,
        task_id: TaskId,
        column_name: str,
        position: Optional[int] = None,
        relative: bool = False,
    ) -> TaskId:
        """
        Move a task to a column, optionally at a position within it.

        Args:
            task_id: The task to move
            column_name: The target column
            position: Zero-based position in the target column, appended
                when None and clamped to the column length
            relative: Treat position as an offset from the task's current
                position

        Returns:
            The task id
        """
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        if column_name not in index["columns"]:
            raise ColumnNotFoundError(column_name)

        task = self.load_task(task_id, index)
        task["metadata"]["updated"] = now_utc()
        update_column_linked_fields(task, column_name, resolve_options(index["options"]))
        self.save_task(task_id, task)

        if position is not None and relative:
            current_column = board.find_task_column(index, task_id)
            current_position = index["columns"][current_column].index(task_id)  # type: ignore[index]
            position = current_position + position

        board.remove_task(index, task_id)
        if position is not None:
            position = max(min(position, len(index["columns"][column_name])), 0)
        board.add_task(index, task_id, column_name, position)
        self.save_index(index)
        logger.info("moved task %r to %r", task_id, column_name)
        return task_id

    def delete_task(self, task_id: TaskId, remove_file: bool = False) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        if not board.contains(index, task_id):
            raise TaskNotFoundError(f'Task "{task_id}" is not in the index')

        board.remove_task(index, task_id)
        if remove_file and self.task_path(task_id).is_file():
            self.task_path(task_id).unlink()
        self.save_index(index)
        logger.info("removed task %r", task_id)
        return task_id

    def comment(self, task_id: TaskId, text: str, author: str) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        if not text.strip():
            raise ProjectError("Comment text cannot be empty")

        task = self.load_task(task_id, index)
        task["comments"].append({"author": author, "date": now_utc(), "text": text})
        self.save_task(task_id, task)
        logger.info("commented on task %r", task_id)
        return task_id

    # Queries and reports

    def search(self, task_filter: TaskFilter) -> list[Task]:
        index = self.load_index()
        return filter_tasks(self.load_all_tracked_tasks(index), task_filter, index)

    def status(
        self,
        quiet: bool = False,
        untracked: bool = False,
        due: bool = False,
        sprint: Optional[int | str] = None,
        dates: Optional[list[pendulum.DateTime]] = None,
    ) -> StatusReport:
        index = self.load_index()
        untracked_tasks = None
        if untracked:
            untracked_tasks = [
                add_file_extension(task_id) for task_id in self.find_untracked_tasks()
            ]
        tasks = [] if quiet else self.load_all_tracked_tasks(index)
        return compute_status(
            index,
            tasks,
            quiet=quiet,
            due=due,
            sprint=sprint,
            dates=dates,
            untracked_tasks=untracked_tasks,
        )

    def burndown(
        self,
        sprints: Optional[list[int | str]] = None,
        dates: Optional[list[pendulum.DateTime]] = None,
        assigned: Optional[str] = None,
        columns: Optional[list[str]] = None,
        normalise: Optional[Resolution] = None,
    ) -> BurndownReport:
        index = self.load_index()
        return compute_burndown(
            index,
            self.load_all_tracked_tasks(index),
            sprints=sprints,
            dates=dates,
            assigned=assigned,
            columns=columns,
            normalise=normalise,
        )

    def sort(self, column_name: str, sorters: list[Sorter], save: bool = False) -> Index:
        """
        Sort a column.

        Saved sorters are kept in the columnSorting option and re-applied
        every time the index is saved. Sorting without saving drops any
        sorters saved for the column.
        """
        index = self.load_index()
        if column_name not in index["columns"]:
            raise ColumnNotFoundError(column_name)

        # validates the options before changing them
        resolve_options(index["options"])
        column_sorting = dict(index["options"].get("columnSorting") or {})
        if save:
            column_sorting[column_name] = [sorter_to_option(s) for s in sorters]
        else:
            column_sorting.pop(column_name, None)
            sort_column(
                index,
                self.load_all_tracked_tasks(index, column_name),
                column_name,
                sorters,
            )
        index["options"]["columnSorting"] = column_sorting
        self.save_index(index)
        return index

    def sprint(
        self,
        name: Optional[str] = None,
        description: str = "",
        start: Optional[pendulum.DateTime] = None,
    ) -> Sprint:
        index = self.load_index()
        raw_sprints = list(index["options"].get("sprints") or [])
        number = len(raw_sprints) + 1
        sprint: Sprint = {
            "number": number,
            "name": name or f"Sprint {number}",
            "description": description,
            "start": start or now_utc(),
        }
        raw_sprints.append(
            {
                "name": sprint["name"],
                "description": sprint["description"],
                "start": pendulum_to_python_utc(sprint["start"]),
            }
        )
        index["options"]["sprints"] = raw_sprints
        self.save_index(index)
        logger.info("started sprint %d %r", number, sprint["name"])
        return sprint

    def validate(self, save: bool = False) -> list[ValidationError] | bool:
        """
        Check that the index and every tracked task can be decoded.

        Args:
            save: Re-write every file that decodes cleanly

        Returns:
            True when everything is valid, otherwise one entry for the index
            alone, or one entry per broken task
        """
        self.__ensure_initialised()
        try:
            index = self.load_index()
            resolve_options(index["options"])
            if save:
                self.save_index(index)
        except MarkbanError as e:
            return [{"task": None, "errors": str(e)}]

        errors: list[ValidationError] = []
        for task_id in board.tracked_task_ids(index):
            try:
                task = self.load_task(task_id, index)
                if save:
                    self.save_task(task_id, task)
            except MarkbanError as e:
                errors.append({"task": task_id, "errors": str(e)})

        if errors:
            return errors
        return True

    # Archive

    def list_archived_tasks(self) -> list[TaskId]:
        self.__ensure_initialised()
        if not self.archive_folder.is_dir():
            raise ProjectError("Archive folder doesn't exist")
        return sorted(
            path.stem for path in self.archive_folder.glob(f"*{TASK_FILE_EXTENSION}")
        )

    def archive_task(self, task_id: TaskId) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        index = self.load_index()
        self.__ensure_task(task_id, index)
        if self.archived_task_path(task_id).exists():
            raise DuplicateTaskError(f'An archived task with id "{task_id}" already exists')

        task = self.load_task(task_id, index)
        task["metadata"]["column"] = board.find_task_column(index, task_id)
        self.__write_task(self.archived_task_path(task_id), task)

        self.delete_task(task_id, remove_file=True)
        logger.info("archived task %r", task_id)
        return task_id

    def restore_task(self, task_id: TaskId, column_name: Optional[str] = None) -> TaskId:
        self.__ensure_initialised()
        task_id = remove_file_extension(task_id)
        if not self.archive_folder.is_dir():
            raise ProjectError("Archive folder doesn't exist")
        if not self.archived_task_path(task_id).is_file():
            raise TaskNotFoundError(f'No archived task found with id "{task_id}"')

        index = self.load_index()
        if board.contains(index, task_id):
            raise DuplicateTaskError(
                f'There is already an indexed task with id "{task_id}"'
            )
        if self.task_path(task_id).exists():
            raise DuplicateTaskError(
                f'There is already an untracked task with id "{task_id}"'
            )
        if not index["columns"]:
            raise ProjectError("No columns defined in the index")

        task = self.load_archived_task(task_id, index)
        target_column = (
            column_name or task["metadata"]["column"] or next(iter(index["columns"]))
        )
        if target_column not in index["columns"]:
            raise ColumnNotFoundError(target_column)
        task["metadata"]["column"] = None
        update_column_linked_fields(task, target_column, resolve_options(index["options"]))
        self.save_task(task_id, task)

        board.add_task(index, task_id, target_column)
        self.save_index(index)
        self.archived_task_path(task_id).unlink()
        logger.info("restored task %r to %r", task_id, target_column)
        return task_id

    def remove_all(self) -> None:
        self.__ensure_initialised()
        logger.info("removing %s", self.main_folder)
        shutil.rmtree(self.main_folder)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime.datetime | datetime.date):
        return value.isoformat()
    return str(value)
