# SPDX-License-Identifier: MIT

import pendulum
import pytest

from markban.codec.task import coerce_custom_field_value, decode_task, encode_task
from markban.exceptions import TaskParseError
from markban.model.custom_field import CustomFieldType, UpdatePolicy

TASK = """---
created: 2024-03-04T12:00:00+00:00
tags: [Small, backend]
assigned: alice
points: "3"
---
# Write docs

Some description.

## Sub-tasks

- [x] outline
- [ ] draft

## Relations

- [blocks other-task](other-task.md)

## Comments

- author: bob
  date: 2024-03-05T09:30:00+00:00
  Looks good
  second line
"""

POINTS = {"name": "points", "type": CustomFieldType.NUMBER, "update_date": UpdatePolicy.NONE}


def test_decode_reads_every_section():
    task = decode_task(TASK, [POINTS])

    assert task["id"] == "write-docs"
    assert task["name"] == "Write docs"
    assert task["description"] == "Some description."
    assert task["metadata"]["created"] == pendulum.datetime(2024, 3, 4, 12, tz="UTC")
    assert task["metadata"]["tags"] == ["Small", "backend"]
    assert task["metadata"]["assigned"] == "alice"
    assert task["metadata"]["custom_fields"] == {"points": 3}
    assert task["sub_tasks"] == [
        {"text": "outline", "completed": True},
        {"text": "draft", "completed": False},
    ]
    assert task["relations"] == [{"type": "blocks", "task": "other-task"}]
    assert task["comments"] == [
        {
            "author": "bob",
            "date": pendulum.datetime(2024, 3, 5, 9, 30, tz="UTC"),
            "text": "Looks good\nsecond line",
        }
    ]


def test_undeclared_metadata_keeps_its_raw_value():
    task = decode_task(TASK)

    assert task["metadata"]["custom_fields"] == {"points": "3"}


def test_unknown_sections_stay_in_the_description():
    task = decode_task("# Task\n\nIntro\n\n## Notes\n\nremember this\n")

    assert task["description"] == "Intro\n\n## Notes\n\nremember this"


def test_section_headings_ignore_case_and_separators():
    task = decode_task("# Task\n\n## SUB TASKS\n\n- [X] done\n")

    assert task["sub_tasks"] == [{"text": "done", "completed": True}]


def test_metadata_section_is_merged_with_front_matter():
    task = decode_task(
        "---\nassigned: alice\n---\n# Task\n\n## Metadata\n\n```yaml\nassigned: bob\n```\n"
    )

    assert task["metadata"]["assigned"] == "bob"


def test_sub_tasks_must_be_a_checklist():
    with pytest.raises(TaskParseError, match="invalid sub-tasks content"):
        decode_task("# Task\n\n## Sub-tasks\n\n- no checkbox here\n")


def test_bad_custom_field_value_is_rejected():
    with pytest.raises(TaskParseError, match='invalid metadata value for "points"'):
        decode_task("---\npoints: lots\n---\n# Task\n", [POINTS])


def test_empty_data_is_rejected():
    with pytest.raises(TaskParseError, match="data is null or empty"):
        decode_task("")


def test_encoded_task_decodes_to_the_same_task():
    task = decode_task(TASK, [POINTS])

    assert decode_task(encode_task(task), [POINTS]) == task


def test_comment_text_that_looks_like_a_field_survives_encoding():
    task = decode_task("# Task\n")
    task["comments"] = [
        {
            "author": "bob",
            "date": pendulum.datetime(2024, 3, 2, 12, tz="UTC"),
            "text": "date: tomorrow please",
        },
        {"author": "carol", "date": None, "text": "author: not me\ndate: whenever"},
    ]

    assert decode_task(encode_task(task))["comments"] == task["comments"]


def test_non_text_data_is_rejected():
    with pytest.raises(TaskParseError, match="data is not a string"):
        decode_task(42)


def test_name_heading_is_required():
    with pytest.raises(TaskParseError, match="data is missing a name heading"):
        decode_task("---\nassigned: alice\n---\nno heading\n")


def test_front_matter_must_be_a_mapping():
    with pytest.raises(TaskParseError, match="invalid metadata content"):
        decode_task("---\n- a\n- b\n---\n# Task\n")


def test_metadata_section_must_be_a_mapping():
    with pytest.raises(TaskParseError, match="invalid metadata content"):
        decode_task("# Task\n\n## Metadata\n\n```yaml\njust text\n```\n")


def test_relations_must_be_a_list():
    with pytest.raises(TaskParseError, match="invalid relations content"):
        decode_task("# Task\n\n## Relations\n\nblocks other-task\n")


def test_comments_must_be_a_list():
    with pytest.raises(TaskParseError, match="invalid comments content"):
        decode_task("# Task\n\n## Comments\n\nnot a list\n")


def test_comment_date_must_be_a_date():
    with pytest.raises(TaskParseError, match="invalid comments content"):
        decode_task("# Task\n\n## Comments\n\n- author: bob\n  date: someday\n  hi\n")


def test_encode_leaves_out_empty_sections():
    task = decode_task("# Task\n")

    assert encode_task(task) == "# Task\n"


def test_coerce_custom_field_value():
    assert coerce_custom_field_value("2.5", CustomFieldType.NUMBER) == 2.5
    assert coerce_custom_field_value("yes", CustomFieldType.BOOLEAN) is True
    assert coerce_custom_field_value(7, CustomFieldType.STRING) == "7"
    assert coerce_custom_field_value(
        "2024-03-04T12:00:00Z", CustomFieldType.DATE
    ) == pendulum.datetime(2024, 3, 4, 12, tz="UTC")
    with pytest.raises(ValueError):
        coerce_custom_field_value(True, CustomFieldType.NUMBER)
