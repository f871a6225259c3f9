# SPDX-License-Identifier: MIT

import datetime
import logging
import re
from typing import Any, Optional

import pendulum
from pendulum.parsing.exceptions import ParserError

from markban.codec.markdown import (
    front_matter_block,
    list_items,
    load_mapping,
    read_document,
    unfence,
)
from markban.exceptions import TaskParseError
from markban.model.custom_field import CustomField, CustomFieldType, CustomFieldValue
from markban.model.task import (
    Comment,
    Relation,
    SubTask,
    Task,
    TaskMetadata,
    get_metadata_template,
)
from markban.model.task_id import add_file_extension, get_task_id
from markban.time import (
    datetime_from_str,
    datetime_to_iso_str,
    python_to_pendulum_utc,
)

logger = logging.getLogger(__name__)

METADATA_HEADING = "Metadata"
SUB_TASKS_HEADING = "Sub-tasks"
RELATIONS_HEADING = "Relations"
COMMENTS_HEADING = "Comments"

DATE_KEYS = ("created", "updated", "started", "completed", "due")
METADATA_KEYS = DATE_KEYS + ("assigned", "tags", "progress", "column")

_SUB_TASK_P = re.compile(r"^\[(?P<mark>[ xX]?)\][ \t]*(?P<text>.*)$")
_LINK_P = re.compile(r"^\[(?P<text>[^\]]*)\]\((?P<path>[^)]*)\)$")
_COMMENT_FIELD_P = re.compile(r"^(?P<key>author|date):[ \t]*(?P<value>.*)$", re.I)


def decode_task(data: Any, custom_fields: Optional[list[CustomField]] = None) -> Task:
    """Decode task markdown into a Task.

    Args:
        data: The task markdown
        custom_fields: Declared custom fields, used to coerce metadata values
            to their declared types

    Returns:
        The decoded task

    Raises:
        TaskParseError: If the data is empty, not text, or malformed
    """
    if data is None or data == "":
        raise TaskParseError("data is null or empty")
    if not isinstance(data, str):
        raise TaskParseError("data is not a string")

    document = read_document(data)
    if document["name"] is None:
        raise TaskParseError("data is missing a name heading")

    try:
        raw_metadata = load_mapping(document["front_matter"])
    except ValueError:
        raise TaskParseError("invalid metadata content") from None

    description = document["description"]
    sub_tasks: list[SubTask] = []
    relations: list[Relation] = []
    comments: list[Comment] = []

    for section in document["sections"]:
        heading = __section_key(section["heading"])
        if heading == __section_key(METADATA_HEADING):
            try:
                raw_metadata.update(load_mapping(unfence(section["body"])))
            except ValueError:
                raise TaskParseError("invalid metadata content") from None
        elif heading == __section_key(SUB_TASKS_HEADING):
            sub_tasks = __decode_sub_tasks(section["body"])
        elif heading == __section_key(RELATIONS_HEADING):
            relations = __decode_relations(section["body"])
        elif heading == __section_key(COMMENTS_HEADING):
            comments = __decode_comments(section["body"])
        else:
            # sections we don't know stay with the description
            description = (
                f"{description}\n\n## {section['heading']}\n\n{section['body']}"
            ).strip()

    return {
        "id": get_task_id(document["name"]),
        "name": document["name"],
        "description": description,
        "metadata": __decode_metadata(raw_metadata, custom_fields or []),
        "sub_tasks": sub_tasks,
        "relations": relations,
        "comments": comments,
    }


def encode_task(task: Task) -> str:
    content = ""
    metadata = __encode_metadata(task["metadata"])
    if metadata:
        content += front_matter_block(metadata)

    content += f"# {task['name']}\n"
    if task["description"]:
        content += f"\n{task['description']}\n"

    if task["sub_tasks"]:
        content += f"\n## {SUB_TASKS_HEADING}\n\n"
        for sub_task in task["sub_tasks"]:
            mark = "x" if sub_task["completed"] else " "
            content += f"- [{mark}] {sub_task['text']}\n"

    if task["relations"]:
        content += f"\n## {RELATIONS_HEADING}\n\n"
        for relation in task["relations"]:
            label = (
                f"{relation['type']} {relation['task']}"
                if relation["type"]
                else relation["task"]
            )
            content += f"- [{label}]({add_file_extension(relation['task'])})\n"

    if task["comments"]:
        content += f"\n## {COMMENTS_HEADING}\n\n"
        for comment in task["comments"]:
            content += f"- author: {comment['author']}\n"
            date = comment["date"]
            content += f"  date: {datetime_to_iso_str(date)}\n" if date else "  date:\n"
            for line in comment["text"].split("\n"):
                content += f"  {line}\n" if line else "\n"

    return content


def coerce_custom_field_value(
    value: Any, field_type: CustomFieldType
) -> CustomFieldValue:
    """Convert a raw metadata value to the declared custom field type.

    Raises:
        ValueError: If the value can't represent the declared type
    """
    match field_type:
        case CustomFieldType.STRING:
            return str(value)
        case CustomFieldType.NUMBER:
            if isinstance(value, bool):
                raise ValueError(f"{value!r} is not a number")
            if isinstance(value, int | float):
                return value
            number = float(str(value))
            return int(number) if number.is_integer() else number
        case CustomFieldType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if str(value).lower() in ("true", "yes", "1"):
                return True
            if str(value).lower() in ("false", "no", "0"):
                return False
            raise ValueError(f"{value!r} is not a boolean")
        case CustomFieldType.DATE:
            return __to_datetime(value)


def __section_key(heading: str) -> str:
    return re.sub(r"[\s_-]", "", heading).casefold()


def __to_datetime(value: Any) -> pendulum.DateTime:
    if isinstance(value, datetime.date):
        return python_to_pendulum_utc(value)
    if isinstance(value, str):
        try:
            return datetime_from_str(value)
        except (ValueError, ParserError) as error:
            raise ValueError(f"{value!r} is not a date") from error
    raise ValueError(f"{value!r} is not a date")


def __decode_metadata(
    raw_metadata: dict[str, Any], custom_fields: list[CustomField]
) -> TaskMetadata:
    metadata = get_metadata_template()
    declared = {custom_field["name"]: custom_field for custom_field in custom_fields}

    for key, value in raw_metadata.items():
        key = str(key)
        if value is None:
            continue
        try:
            if key in DATE_KEYS:
                metadata[key] = __to_datetime(value)  # type: ignore[literal-required]
            elif key == "assigned":
                metadata["assigned"] = str(value)
            elif key == "tags":
                tags = value if isinstance(value, list) else [value]
                metadata["tags"] = [str(tag) for tag in tags]
            elif key == "progress":
                metadata["progress"] = coerce_custom_field_value(  # type: ignore[typeddict-item]
                    value, CustomFieldType.NUMBER
                )
            elif key == "column":
                metadata["column"] = str(value)
            elif key in declared:
                metadata["custom_fields"][key] = coerce_custom_field_value(
                    value, declared[key]["type"]
                )
            elif isinstance(value, datetime.date):
                metadata["custom_fields"][key] = python_to_pendulum_utc(value)
            else:
                metadata["custom_fields"][key] = value
        except ValueError as error:
            raise TaskParseError(f'invalid metadata value for "{key}": {error}') from None
    return metadata


def __encode_metadata(metadata: TaskMetadata) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for key in METADATA_KEYS:
        value = metadata[key]  # type: ignore[literal-required]
        if value is None or value == []:
            continue
        encoded[key] = value
    for key, value in metadata["custom_fields"].items():
        if value is not None:
            encoded[key] = value
    return encoded


def __decode_sub_tasks(body: str) -> list[SubTask]:
    items = list_items(body)
    if items is None:
        raise TaskParseError("invalid sub-tasks content")

    sub_tasks: list[SubTask] = []
    for item in items:
        sub_task = _SUB_TASK_P.match(item.split("\n", 1)[0])
        if sub_task is None:
            raise TaskParseError("invalid sub-tasks content")
        sub_tasks.append(
            {
                "text": sub_task.group("text").strip(),
                "completed": sub_task.group("mark").lower() == "x",
            }
        )
    return sub_tasks


def __decode_relations(body: str) -> list[Relation]:
    items = list_items(body)
    if items is None:
        raise TaskParseError("invalid relations content")

    relations: list[Relation] = []
    for item in items:
        text = item.split("\n", 1)[0].strip()
        link = _LINK_P.match(text)
        if link is not None:
            text = link.group("text").strip()
        if not text:
            raise TaskParseError("invalid relations content")
        parts = text.rsplit(" ", 1)
        if len(parts) == 2:
            relations.append({"type": parts[0].strip(), "task": parts[1]})
        else:
            relations.append({"type": "", "task": parts[0]})
    return relations


def __decode_comments(body: str) -> list[Comment]:
    items = list_items(body)
    if items is None:
        raise TaskParseError("invalid comments content")

    comments: list[Comment] = []
    for item in items:
        lines = [__dedent(line) for line in item.split("\n")]
        author = ""
        date: Optional[pendulum.DateTime] = None

        # one author line then one date line, everything after is text
        field = _COMMENT_FIELD_P.match(lines[0])
        if field is not None and field.group("key").lower() == "author":
            author = field.group("value").strip()
            lines.pop(0)
        field = _COMMENT_FIELD_P.match(lines[0]) if lines else None
        if field is not None and field.group("key").lower() == "date":
            value = field.group("value").strip()
            if value:
                try:
                    date = datetime_from_str(value)
                except (ValueError, ParserError):
                    raise TaskParseError("invalid comments content") from None
            lines.pop(0)

        comments.append(
            {"author": author, "date": date, "text": "\n".join(lines).strip()}
        )
    return comments


def __dedent(line: str) -> str:
    if line.startswith("  "):
        return line[2:]
    return line.lstrip("\t")
