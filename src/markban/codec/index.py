# SPDX-License-Identifier: MIT

import logging
import re
from typing import Any

from markban.codec.markdown import (
    front_matter_block,
    has_section_heading,
    list_items,
    load_mapping,
    read_document,
    unfence,
)
from markban.exceptions import IndexParseError
from markban.model.index import Index
from markban.model.task_id import TaskId, add_file_extension

logger = logging.getLogger(__name__)

OPTIONS_HEADING = "Options"
TASKS_LINK_FOLDER = "tasks"

_TASK_LINK_P = re.compile(r"^\[(?P<id>[^\]]*)\]\((?P<path>[^)]*)\)")


def decode_index(data: Any) -> Index:
    """Decode index markdown into an Index.

    Front matter and an Options section are both read as options; Options
    keys win when both name the same key. Every other level-2 section is a
    column holding a list of task links or bare task ids.

    Raises:
        IndexParseError: If the data is empty, not text, or malformed
    """
    if data is None or data == "":
        raise IndexParseError("data is null or empty")
    if not isinstance(data, str):
        raise IndexParseError("data is not a string")

    document = read_document(data)
    if document["name"] is None:
        raise IndexParseError("data is missing a name heading")

    try:
        options = load_mapping(document["front_matter"])
    except ValueError:
        raise IndexParseError("invalid front matter content") from None

    columns: dict[str, list[TaskId]] = {}
    for section in document["sections"]:
        heading = section["heading"]
        if heading.casefold() == OPTIONS_HEADING.casefold():
            try:
                options.update(load_mapping(unfence(section["body"])))
            except ValueError:
                raise IndexParseError("invalid options content") from None
            continue

        items = list_items(section["body"])
        if items is None:
            raise IndexParseError(f'column "{heading}" must contain a list')
        columns[heading] = [__task_id_from_item(item) for item in items]

    logger.debug(
        "decoded index %r with %d columns", document["name"], len(columns)
    )
    return {
        "name": document["name"],
        "description": document["description"],
        "options": options,
        "columns": columns,
    }


def encode_index(index: Index, suppress_options: bool = False) -> str:
    """Encode an Index as markdown.

    Args:
        index: The index to encode
        suppress_options: Leave options out, for when a separate project
            configuration file already holds them

    Returns:
        The index markdown

    Raises:
        ValueError: If the description holds a level 2 heading, which would
            read back as a column
    """
    if has_section_heading(index["description"]):
        raise ValueError("index description cannot contain a level 2 heading")

    content = ""
    if index["options"] and not suppress_options:
        content += front_matter_block(index["options"])

    content += f"# {index['name']}\n"
    if index["description"]:
        content += f"\n{index['description']}\n"

    for column_name, task_ids in index["columns"].items():
        content += f"\n## {column_name}\n"
        if task_ids:
            content += "\n" + "".join(
                f"- [{task_id}]({TASKS_LINK_FOLDER}/{add_file_extension(task_id)})\n"
                for task_id in task_ids
            )
    return content


def __task_id_from_item(item: str) -> TaskId:
    first_line = item.split("\n", 1)[0].strip()
    link = _TASK_LINK_P.match(first_line)
    if link is not None:
        return link.group("id").strip()
    return first_line
