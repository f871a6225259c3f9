# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer
from pendulum.parsing.exceptions import ParserError

from markban.model.filter import FilterScalar
from markban.model.sorter import Sorter, SortOrder
from markban.query.field import FieldType
from markban.time import local_datetime_from_str

_SORTER_P = re.compile(
    r"^(?:(?P<order>asc|ascending|desc|descending)\s+)?(?P<field>[A-Za-z][\w-]*)(?::(?P<filter>.+))?$",
    re.IGNORECASE,
)


def parse_datetime(datetime_param: Optional[str | int]) -> Optional[pendulum.DateTime]:
    if datetime_param is None:
        return None

    datetime = str(datetime_param).strip()

    # Match YYYY-MM-DD format (with optional time component)
    if re.match(r"\d{4}-\d{2}-\d{2}", datetime):
        try:
            return local_datetime_from_str(datetime)
        except ParserError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    # Match numeric input for relative days (e.g., "1", "-1", "365")
    if re.match(r"^-?\d+$", datetime):
        days_offset = int(datetime)
        return pendulum.today().add(days=days_offset).start_of("day").in_tz("UTC")

    if datetime == "now" or datetime == "n":
        return pendulum.now().in_tz("UTC")
    if datetime == "today" or datetime == "t":
        return pendulum.today().start_of("day").in_tz("UTC")
    if datetime == "yesterday" or datetime == "y":
        return pendulum.yesterday().start_of("day").in_tz("UTC")
    if datetime == "tomorrow" or datetime == "o":
        return pendulum.tomorrow().start_of("day").in_tz("UTC")
    raise typer.BadParameter("Incorrect datetime format")


def parse_sorter(sorter_param: str) -> Sorter:
    """
    Parse a sorter written as "[asc|desc] <field>[:<regex>]".

    Examples: "name", "desc workload", "asc name:\\d+".
    """
    match = _SORTER_P.match(sorter_param.strip())
    if match is None:
        raise typer.BadParameter(
            f"Invalid sorter '{sorter_param}' (expected format: '[asc|desc] field[:regex]')"
        )
    order = (match.group("order") or "asc").lower()
    return {
        "field": match.group("field"),
        "filter": match.group("filter"),
        "order": SortOrder.DESCENDING if order.startswith("desc") else SortOrder.ASCENDING,
    }


def parse_sprint(sprint_param: str) -> int | str:
    """A sprint is picked by number when the parameter is all digits, otherwise by name."""
    if re.match(r"^\d+$", sprint_param.strip()):
        return int(sprint_param)
    return sprint_param


def parse_field_assignment(field_param: str) -> tuple[str, str]:
    """Split a "name=value" parameter."""
    name, separator, value = field_param.partition("=")
    if not separator or not name.strip():
        raise typer.BadParameter(
            f"Invalid field '{field_param}' (expected format: 'name=value')"
        )
    return name.strip(), value.strip()


def parse_field_value(field_type: FieldType, value: str) -> FilterScalar:
    """Convert a value typed on the command line to a field's type."""
    match field_type:
        case FieldType.NUMBER:
            try:
                return float(value) if "." in value else int(value)
            except ValueError:
                raise typer.BadParameter(f"'{value}' is not a number")
        case FieldType.BOOLEAN:
            lowered = value.lower()
            if lowered in ("true", "yes", "1"):
                return True
            if lowered in ("false", "no", "0"):
                return False
            raise typer.BadParameter(f"'{value}' is not true or false")
        case FieldType.DATE:
            parsed = parse_datetime(value)
            if parsed is None:
                raise typer.BadParameter(f"'{value}' is not a date")
            return parsed
    return value
