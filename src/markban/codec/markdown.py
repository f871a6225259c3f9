# SPDX-License-Identifier: MIT

"""Line based reader for the markdown shared by index and task files.

A document is an optional front matter block, a level-1 name heading, a
free text description and any number of level-2 sections. Fenced code
blocks are opaque, so a heading inside a fence never starts a section.
"""

import re
from typing import Any, Optional, TypedDict

import pendulum
from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from markban.time import pendulum_to_python_utc

FRONT_MATTER_DELIMITER = "---"

_FRONT_MATTER_P = re.compile(
    r"\A---[ \t]*\n(?P<content>.*?)^---[ \t]*$\n?", re.MULTILINE | re.DOTALL
)
_HEADING_P = re.compile(r"^(?P<level>#{1,2})[ \t]+(?P<text>\S.*?)[ \t]*$")
_LIST_ITEM_P = re.compile(r"^[-*+](?:[ \t]+(?P<text>.*))?$")
_FENCE_P = re.compile(r"^ {0,3}(```|~~~)")


class MarkdownSection(TypedDict):
    heading: str
    body: str


class MarkdownDocument(TypedDict):
    front_matter: Optional[str]
    name: Optional[str]
    description: str
    sections: list[MarkdownSection]


def read_document(data: str) -> MarkdownDocument:
    front_matter, body = split_front_matter(data)

    name: Optional[str] = None
    description_lines: list[str] = []
    sections: list[MarkdownSection] = []
    section_lines: list[str] = []
    in_fence = False

    for line in body.split("\n"):
        if _FENCE_P.match(line):
            in_fence = not in_fence
        heading = None if in_fence else _HEADING_P.match(line)

        if heading is not None and name is None:
            if heading.group("level") == "#":
                name = heading.group("text")
            continue
        if name is None:
            continue

        if heading is not None and heading.group("level") == "##":
            if sections:
                sections[-1]["body"] = "\n".join(section_lines).strip()
            sections.append({"heading": heading.group("text"), "body": ""})
            section_lines = []
        elif sections:
            section_lines.append(line)
        else:
            description_lines.append(line)

    if sections:
        sections[-1]["body"] = "\n".join(section_lines).strip()

    return {
        "front_matter": front_matter,
        "name": name,
        "description": "\n".join(description_lines).strip(),
        "sections": sections,
    }


def has_section_heading(text: str) -> bool:
    """True when text holds a level 2 heading outside a fenced block."""
    in_fence = False
    for line in text.split("\n"):
        if _FENCE_P.match(line):
            in_fence = not in_fence
            continue
        heading = None if in_fence else _HEADING_P.match(line)
        if heading is not None and heading.group("level") == "##":
            return True
    return False


def split_front_matter(data: str) -> tuple[Optional[str], str]:
    text = data.replace("\r\n", "\n")
    match = _FRONT_MATTER_P.match(text)
    if match is None:
        return None, text
    return match.group("content"), text[match.end() :]


def unfence(body: str) -> str:
    """Return the content of a fenced block, or body itself when unfenced."""
    lines = body.strip().split("\n")
    if not _FENCE_P.match(lines[0]):
        return body
    content: list[str] = []
    for line in lines[1:]:
        if _FENCE_P.match(line):
            break
        content.append(line)
    return "\n".join(content)


def load_mapping(text: Optional[str]) -> dict[str, Any]:
    """Parse YAML text that must hold a mapping.

    Empty text is an empty mapping.

    Raises:
        ValueError: If the text isn't YAML or holds something other than a
            mapping
    """
    if text is None or text.strip() == "":
        return {}
    try:
        value = load(text, Loader=Loader)
    except YAMLError as error:
        raise ValueError(str(error)) from error
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected a mapping, got {type(value).__name__}")
    return value


def dump_mapping(mapping: dict[str, Any]) -> str:
    return dump(
        to_yaml_value(mapping),
        Dumper=Dumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def to_yaml_value(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return pendulum_to_python_utc(value)
    if isinstance(value, dict):
        return {key: to_yaml_value(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_yaml_value(item) for item in value]
    if isinstance(value, str) and type(value) is not str:
        # StrEnum members
        return str(value)
    return value


def front_matter_block(mapping: dict[str, Any]) -> str:
    return (
        f"{FRONT_MATTER_DELIMITER}\n"
        + dump_mapping(mapping)
        + f"{FRONT_MATTER_DELIMITER}\n\n"
    )


def list_items(body: str) -> Optional[list[str]]:
    """Split a section body into list items.

    Each item is its first line of text followed by any continuation lines,
    unchanged. Returns None when the body holds text outside a list.
    """
    items: list[list[str]] = []
    for line in body.split("\n"):
        item = _LIST_ITEM_P.match(line)
        if item is not None:
            items.append([item.group("text") or ""])
        elif line.strip() == "":
            if items:
                items[-1].append(line)
        elif items and line[:1] in (" ", "\t"):
            items[-1].append(line)
        else:
            return None
    return ["\n".join(lines).rstrip() for lines in items]
