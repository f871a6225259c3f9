# SPDX-License-Identifier: MIT


class MarkbanError(Exception):
    """Base class for every error raised by markban."""


class ParseError(MarkbanError):
    """Raised when an index or task file cannot be decoded."""


class IndexParseError(ParseError):
    """Raised when index markdown is malformed."""


class TaskParseError(ParseError):
    """Raised when task markdown is malformed."""


class OptionsError(MarkbanError):
    """Raised when index options hold values of the wrong shape."""


class QueryError(MarkbanError):
    """Raised when a filter or sorter refers to something that doesn't exist."""


class ProjectError(MarkbanError):
    """Raised when a board operation cannot be completed."""


class NotInitialisedError(ProjectError):
    def __init__(self) -> None:
        super().__init__("Not initialised in this folder")


class TaskNotFoundError(ProjectError):
    """Raised when a task file is missing or a task is not indexed."""


class ColumnNotFoundError(ProjectError):
    def __init__(self, column_name: str) -> None:
        super().__init__(f'Column "{column_name}" doesn\'t exist')
        self.column_name = column_name


class DuplicateTaskError(ProjectError):
    """Raised when a task id is already taken by a file or an index entry."""


class SprintNotFoundError(ProjectError):
    """Raised when a sprint can't be found by number or name."""
