"""Tests for libsu.superuser."""

from __future__ import annotations

import threading
import time

import pytest

from libsu import exc
from libsu.command import SuperUserCommand
from libsu.session import SubprocessSession
from libsu.superuser import SuperUser
from libsu.test import FakeSession


def test_default_session() -> None:
    """Without a session, a SubprocessSession is created (not started)."""
    su = SuperUser()
    assert isinstance(su.session, SubprocessSession)
    assert su.session.pid is None


def test_cmd(superuser: SuperUser, fake_session: FakeSession) -> None:
    """cmd() returns the executed command."""
    fake_session.respond(stdout=["uid=0(root) gid=0(root)"])
    proc = superuser.cmd("id", timeout=1)

    assert isinstance(proc, SuperUserCommand)
    assert proc.superuser_was_successful()
    assert proc.standard_output == ["uid=0(root) gid=0(root)"]
    assert proc.timeout == 1


def test_cmd_denied(denied_session: FakeSession) -> None:
    """cmd() on a denied session reports the failure, never raises."""
    proc = SuperUser(denied_session).cmd("id", timeout=1)
    assert not proc.superuser_was_successful()


def test_ask_for_permissions_falls_back_to_has_permissions(
    fake_session: FakeSession,
    denied_session: FakeSession,
) -> None:
    """Sessions without ask_for_permissions() are only checked."""
    assert SuperUser(fake_session).ask_for_permissions()
    assert fake_session.permission_checks == 1
    assert not SuperUser(denied_session).ask_for_permissions()


def test_ask_for_permissions_raises(denied_session: FakeSession) -> None:
    """raises=True turns a denial into PermissionDenied."""
    with pytest.raises(exc.PermissionDenied):
        SuperUser(denied_session).ask_for_permissions(raises=True)


def test_ask_for_permissions_delegates() -> None:
    """Sessions able to ask for permissions are asked, with the timeout."""
    calls: list[float] = []

    class AskingSession(FakeSession):
        def ask_for_permissions(self, timeout: float) -> bool:
            calls.append(timeout)
            return True

    assert SuperUser(AskingSession()).ask_for_permissions(3)
    assert calls == [3]


def test_close_stops_session() -> None:
    """close() stops sessions supporting it, and is a no-op otherwise."""
    stopped: list[bool] = []

    class StoppableSession(FakeSession):
        def stop(self) -> None:
            stopped.append(True)

    with SuperUser(StoppableSession()):
        pass
    assert stopped == [True]

    SuperUser(FakeSession()).close()


def test_cmd_serialized(fake_session: FakeSession) -> None:
    """Concurrent cmd() calls never overlap on the shared session."""
    active = 0
    overlaps = 0
    original = fake_session.has_permissions

    def tracking_has_permissions() -> bool:
        nonlocal active, overlaps
        active += 1
        if active > 1:
            overlaps += 1
        time.sleep(0.01)
        active -= 1
        return original()

    fake_session.has_permissions = tracking_has_permissions  # type: ignore[method-assign]
    su = SuperUser(fake_session)

    threads = [
        threading.Thread(target=su.cmd, args=(f"echo {i}",), kwargs={"timeout": 0})
        for i in range(5)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert overlaps == 0
    assert len(fake_session.stdin.written) == 5


def test_real_shell(shell_session: SubprocessSession) -> None:
    """SuperUser drives a real shell."""
    su = SuperUser(shell_session)
    assert su.has_permissions()

    proc = su.cmd(["echo one", "echo two"], timeout=5)
    assert proc.command_was_successful()
    assert proc.standard_output[0] == "one"


def test_cmd_sequence_keeps_commands(superuser: SuperUser) -> None:
    """Each cmd() call keeps its own command lines."""
    procs = [superuser.cmd(["a", "b"], timeout=0), superuser.cmd("c", timeout=0)]
    assert [proc.commands for proc in procs] == [("a", "b"), ("c",)]
