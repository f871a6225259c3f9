# SPDX-License-Identifier: MIT

import datetime
from enum import StrEnum
from typing import Optional, cast

import pendulum

EPOCH = pendulum.datetime(1970, 1, 1, tz="UTC")

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


class Resolution(StrEnum):
    DAYS = "days"
    HOURS = "hours"
    MINUTES = "minutes"
    SECONDS = "seconds"
    AUTO = "auto"


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def python_to_pendulum_utc(
    python_value: datetime.datetime | datetime.date,
) -> pendulum.DateTime:
    if not isinstance(python_value, datetime.datetime):
        # bare dates mean local midnight
        return pendulum.datetime(
            python_value.year, python_value.month, python_value.day, tz="local"
        ).in_tz("UTC")
    pendulum_value = pendulum.instance(python_value, tz="local")
    return pendulum_value.in_tz("UTC")


def pendulum_to_python_utc(value: datetime.datetime) -> datetime.datetime:
    """Plain datetime in UTC, which PyYAML writes as a timestamp."""
    utc_value = pendulum.instance(value, tz="UTC").in_tz("UTC")
    return datetime.datetime(
        utc_value.year,
        utc_value.month,
        utc_value.day,
        utc_value.hour,
        utc_value.minute,
        utc_value.second,
        utc_value.microsecond,
        tzinfo=datetime.timezone.utc,
    )


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("UTC").isoformat()


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    return cast(pendulum.DateTime, pendulum.parse(datetime)).in_tz("UTC")


def local_datetime_from_str(datetime: str) -> pendulum.DateTime:
    """Parse a wall clock time typed by the user, read as local time."""
    pendulum_date_time = cast(pendulum.DateTime, pendulum.parse(datetime))
    pendulum_date_time = pendulum_date_time.set(tz="local")
    return pendulum_date_time.in_tz("UTC")


def datetime_to_display_local_datetime_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY-MM-DD HH:mm")


def datetime_to_display_local_datetime_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_display_local_datetime_str(datetime)


def start_of_local_day(value: pendulum.DateTime) -> pendulum.DateTime:
    return value.in_tz("local").start_of("day").in_tz("UTC")


def end_of_local_day(value: pendulum.DateTime) -> pendulum.DateTime:
    """Last millisecond of the local calendar day holding value."""
    return (
        value.in_tz("local")
        .start_of("day")
        .add(hours=23, minutes=59, seconds=59, microseconds=999000)
        .in_tz("UTC")
    )


def same_local_day(a: pendulum.DateTime, b: pendulum.DateTime) -> bool:
    return a.in_tz("local").date() == b.in_tz("local").date()


def milliseconds_between(
    later: pendulum.DateTime, earlier: pendulum.DateTime
) -> int:
    return round((later.timestamp() - earlier.timestamp()) * 1000)


def auto_resolution(start: pendulum.DateTime, end: pendulum.DateTime) -> Resolution:
    delta = milliseconds_between(end, start)
    if delta >= DAY_MS * 7:
        return Resolution.DAYS
    elif delta >= DAY_MS:
        return Resolution.HOURS
    elif delta >= HOUR_MS:
        return Resolution.MINUTES
    return Resolution.SECONDS


def normalise_datetime(
    value: pendulum.DateTime, resolution: Resolution
) -> pendulum.DateTime:
    """Truncate value to the given resolution.

    Each resolution also clears every finer unit, so days drops hours,
    minutes, seconds and microseconds. Days are cut at local midnight.
    """
    match resolution:
        case Resolution.DAYS:
            return start_of_local_day(value)
        case Resolution.HOURS:
            return value.set(minute=0, second=0, microsecond=0)
        case Resolution.MINUTES:
            return value.set(second=0, microsecond=0)
        case Resolution.SECONDS:
            return value.set(microsecond=0)
    raise ValueError(f"cannot normalise to {resolution}")
