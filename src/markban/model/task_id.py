# SPDX-License-Identifier: MIT

import re
from typing import TypeAlias

TaskId: TypeAlias = str

_UPPER_RUN_P = re.compile(r"([A-Z]+(.))")
_SEPARATOR_P = re.compile(r"[\s!?.,@:;|\\/\"'`£$%^&*{}\[\]()<>~#+\-=_¬]+")

TASK_FILE_EXTENSION = ".md"


def __hyphenate_upper_run(match: re.Match[str]) -> str:
    run = match.group(1)
    if match.start() == 0:
        return run.lower()
    return ("-" + run).lower()


def param_case(text: str) -> str:
    """Convert text to simplified param-case.

    "PascalCase" becomes "pascal-case" and "Test Word" becomes "test-word".
    """
    hyphenated = _UPPER_RUN_P.sub(__hyphenate_upper_run, text)
    joined = "-".join(_SEPARATOR_P.split(hyphenated))
    return re.sub(r"(^-|-$)", "", joined)


def get_task_id(name: str) -> TaskId:
    return param_case(name)


def add_file_extension(task_id: str) -> str:
    if not task_id.endswith(TASK_FILE_EXTENSION):
        return f"{task_id}{TASK_FILE_EXTENSION}"
    return task_id


def remove_file_extension(task_id: str) -> TaskId:
    if task_id.endswith(TASK_FILE_EXTENSION):
        return task_id[: -len(TASK_FILE_EXTENSION)]
    return task_id
