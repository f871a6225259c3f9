# SPDX-License-Identifier: MIT

from typing import Any, NotRequired, Optional, TypeAlias, TypedDict

import platformdirs

APP_NAME = "markban"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

# Board layout, relative to the project root
DEFAULT_FOLDER_NAME = ".markban"
DEFAULT_INDEX_FILE_NAME = "index.md"
DEFAULT_TASKS_FOLDER_NAME = "tasks"
DEFAULT_ARCHIVE_FOLDER_NAME = "archive"

PROJECT_CONFIG_YAML_NAME = "markban.yml"
PROJECT_CONFIG_JSON_NAME = "markban.json"

DEFAULT_COLUMNS = ["Backlog", "Todo", "In Progress", "Done"]


class Configuration(TypedDict):
    author: Optional[str]
    columns: list[str]
    show_due: bool
    date_format: NotRequired[str]


ProjectConfiguration: TypeAlias = dict[str, Any]


def default_configuration() -> Configuration:
    return {
        "author": None,
        "columns": list(DEFAULT_COLUMNS),
        "show_due": True,
        "date_format": "YYYY-MM-DD HH:mm",
    }
