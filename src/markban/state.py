# SPDX-License-Identifier: MIT

from contextvars import ContextVar
from pathlib import Path

from markban.repository.project import ProjectRepository

_root: ContextVar[Path] = ContextVar("root", default=Path("."))


def set_root(value: Path) -> None:
    _root.set(value)


def get_root() -> Path:
    return _root.get()


def get_project_repository() -> ProjectRepository:
    return ProjectRepository(get_root())
