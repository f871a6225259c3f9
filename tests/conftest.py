# SPDX-License-Identifier: MIT

"""Shared pytest configuration and fixtures for tests."""

import pendulum
import pytest

from markban.model.index import Index
from markban.model.options import default_index_options


@pytest.fixture(autouse=True)
def utc_local_timezone():
    """Read local days in UTC so day windows don't depend on the machine."""
    pendulum.set_local_timezone(pendulum.timezone("UTC"))
    yield
    pendulum.set_local_timezone()


@pytest.fixture
def board_index() -> Index:
    return {
        "name": "Board",
        "description": "",
        "options": default_index_options(),
        "columns": {"Todo": [], "In Progress": [], "Done": []},
    }
