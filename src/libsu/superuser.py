"""Serialized access to one privileged shell.

libsu.superuser
~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import threading
import typing as t

from . import exc
from .command import SuperUserCommand
from .constants import PERMISSION_TIMEOUT_SECONDS
from .session import SubprocessSession

if t.TYPE_CHECKING:
    import sys
    import types
    from collections.abc import Sequence

    from .session import PrivilegedSession

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

logger = logging.getLogger(__name__)


class SuperUser:
    """Run commands in a shared privileged shell, one execution at a time.

    The shell exposes a single stdin and a single pair of output pipes, so
    overlapping executions would interleave their lines. :meth:`cmd` holds a
    lock for the duration of each execution.

    Parameters
    ----------
    session : :class:`libsu.session.PrivilegedSession`, optional
        Shell to run commands in. Defaults to a new
        :class:`libsu.session.SubprocessSession`.

    Examples
    --------
    .. code-block:: python

        with SuperUser() as su:
            su.ask_for_permissions(raises=True)
            proc = su.cmd("ls /data/data")
            if proc.command_was_successful():
                print(proc.standard_output)
    """

    def __init__(self, session: PrivilegedSession | None = None) -> None:
        if session is None:
            session = SubprocessSession()
        self.session = session
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(session={self.session!r})"

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def ask_for_permissions(
        self,
        timeout: float = PERMISSION_TIMEOUT_SECONDS,
        *,
        raises: bool = False,
    ) -> bool:
        """Ask the shell for elevated permissions.

        Sessions without an ``ask_for_permissions`` method are only checked
        with ``has_permissions()``.

        Raises
        ------
        :exc:`exc.PermissionDenied`
            Permissions not granted and ``raises`` is set.
        """
        ask = getattr(self.session, "ask_for_permissions", None)
        with self._lock:
            granted = ask(timeout) if ask is not None else self.session.has_permissions()

        if not granted:
            logger.warning("superuser permissions denied for %r", self.session)
            if raises:
                raise exc.PermissionDenied(repr(self.session))
        return granted

    def has_permissions(self) -> bool:
        """Return True if the shell is usable."""
        return self.session.has_permissions()

    def cmd(
        self,
        commands: str | Sequence[str],
        *,
        timeout: float | None = None,
    ) -> SuperUserCommand:
        """Execute command lines and return the executed command.

        Parameters
        ----------
        commands : str or sequence of str
            Command line(s) to run.
        timeout : float, optional
            Seconds to wait for the first line of output.

        Returns
        -------
        :class:`libsu.command.SuperUserCommand`
            Check :meth:`~libsu.command.SuperUserCommand.superuser_was_successful`
            before trusting its output.
        """
        proc = SuperUserCommand(commands, session=self.session, timeout=timeout)
        with self._lock:
            proc.execute()
        return proc

    def close(self) -> None:
        """Stop the shell, if the session can be stopped."""
        stop = getattr(self.session, "stop", None)
        if stop is not None:
            with self._lock:
                stop()
