"""libsu pytest plugin."""

from __future__ import annotations

import logging
import shutil
import typing as t

import pytest

from libsu.session import SubprocessSession
from libsu.superuser import SuperUser
from libsu.test.fake import FakeSession

if t.TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@pytest.fixture
def fake_session() -> FakeSession:
    """Return a :class:`libsu.test.FakeSession` with permissions granted.

    >>> from libsu.command import SuperUserCommand

    >>> def test_example(fake_session) -> None:
    ...     fake_session.respond(stdout=["0"])
    ...     command = SuperUserCommand("id -u", session=fake_session, timeout=1)
    ...     assert command.execute()
    ...     assert command.standard_output == ["0"]
    """
    return FakeSession()


@pytest.fixture
def denied_session() -> FakeSession:
    """Return a :class:`libsu.test.FakeSession` without permissions."""
    return FakeSession(granted=False)


@pytest.fixture
def superuser(fake_session: FakeSession) -> SuperUser:
    """Return :class:`libsu.SuperUser` bound to :func:`fake_session`."""
    return SuperUser(fake_session)


@pytest.fixture
def shell_session() -> Iterator[SubprocessSession]:
    """Return a started :class:`libsu.SubprocessSession` running ``sh``.

    ``sh`` does not run elevated, so permissions are granted without checking
    for user id ``0``. The shell is stopped after the test.
    """
    if shutil.which("sh") is None:
        pytest.skip("sh not found in PATH")

    session = SubprocessSession("sh", verify_root=False)
    if not session.ask_for_permissions():
        session.stop()
        pytest.fail("sh did not answer permission probe")

    yield session

    session.stop()
