"""Display switches set once by the CLI callback and read by the views."""

# SPDX-License-Identifier: MIT

from contextvars import ContextVar

# False when --no-header is given
_show_header: ContextVar[bool] = ContextVar("show_header", default=True)


def set_show_header(value: bool) -> None:
    """Turn the markban header above boards and reports on or off.

    Args:
        value: False to print reports without the header
    """
    _show_header.set(value)


def get_show_header() -> bool:
    return _show_header.get()
