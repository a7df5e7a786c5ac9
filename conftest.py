"""Root conftest: pytester and the doctest namespace for libsu.

Kept outside the package so it is not shipped in the wheel.
"""

from __future__ import annotations

import typing as t

import pytest
from _pytest.doctest import DoctestItem

from libsu.command import SuperUserCommand
from libsu.session import SubprocessSession
from libsu.superuser import SuperUser

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem):
        doctest_namespace["SuperUser"] = SuperUser
        doctest_namespace["SuperUserCommand"] = SuperUserCommand
        doctest_namespace["SubprocessSession"] = SubprocessSession
        doctest_namespace["session"] = request.getfixturevalue("shell_session")
        doctest_namespace["request"] = request
