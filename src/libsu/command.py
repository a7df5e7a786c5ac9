"""Commands run in the privileged shell, and their captured output.

libsu.command
~~~~~~~~~~~~~

"""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from .common import encode_line
from .constants import DEFAULT_COMMAND_TIMEOUT_SECONDS
from .executor import CommandExecutor

if t.TYPE_CHECKING:
    import sys
    from collections.abc import Sequence

    from .session import PrivilegedSession

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class CommandResult:
    """Output captured by one execution of a :class:`SuperUserCommand`.

    If :attr:`session_failed` is set, ``stdout`` and ``stderr`` hold whatever
    was captured before the fault and are not authoritative.
    """

    stdout: list[str] = dataclasses.field(default_factory=list)
    stderr: list[str] = dataclasses.field(default_factory=list)
    session_failed: bool = False

    @property
    def session_succeeded(self) -> bool:
        """Return True if the privileged session was usable."""
        return not self.session_failed

    @property
    def command_succeeded(self) -> bool:
        """Return True if the session was usable and nothing hit stderr."""
        return self.session_succeeded and not self.stderr


class SuperUserCommand:
    """One or more shell command lines for the privileged shell.

    Parameters
    ----------
    commands : str or sequence of str
        A single command line, or command lines fed to the shell in order.
    session : :class:`libsu.session.PrivilegedSession`
        The shared privileged shell to run in.
    timeout : float, optional
        Seconds to wait for the *first* line of output. Defaults to ``30``,
        configurable via ``LIBSU_COMMAND_TIMEOUT`` environment variable.

    Raises
    ------
    ValueError
        A command line holds text that cannot be encoded for the shell.

    Examples
    --------
    >>> command = SuperUserCommand("echo hello", session=session)
    >>> command.execute()
    True
    >>> command.standard_output
    ['hello']
    >>> command.command_was_successful()
    True

    Notes
    -----
    Commands writing nothing at all keep :meth:`execute` waiting for the whole
    timeout, since there is no marker telling when a command has finished.
    """

    def __init__(
        self,
        commands: str | Sequence[str],
        *,
        session: PrivilegedSession,
        timeout: float | None = None,
    ) -> None:
        if isinstance(commands, str):
            commands = [commands]

        self._commands: tuple[str, ...] = tuple(commands)
        for line in self._commands:
            try:
                encode_line(line)
            except UnicodeEncodeError as e:
                msg = f"Command line cannot be encoded: {line!r}"
                raise ValueError(msg) from e
        self.session = session
        self._timeout = DEFAULT_COMMAND_TIMEOUT_SECONDS
        self._result = CommandResult()

        if timeout is not None:
            self.set_timeout(timeout)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            f"(commands={list(self._commands)!r}, timeout={self._timeout!r})"
        )

    @property
    def commands(self) -> tuple[str, ...]:
        """Command lines, in the order they are written to the shell."""
        return self._commands

    @property
    def timeout(self) -> float:
        """Seconds to wait for the first line of output."""
        return self._timeout

    def set_timeout(self, timeout: float) -> Self:
        """Set seconds to wait for the first line of output.

        Returns
        -------
        :class:`SuperUserCommand`
            Itself, for chaining.

        Raises
        ------
        ValueError
            Negative timeout.
        """
        if timeout < 0:
            msg = f"timeout must not be negative: {timeout}"
            raise ValueError(msg)
        self._timeout = timeout
        return self

    @property
    def result(self) -> CommandResult:
        """Output of the latest execution."""
        return self._result

    @result.setter
    def result(self, result: CommandResult) -> None:
        self._result = result

    @property
    def standard_output(self) -> list[str]:
        """Lines captured from the shell's standard output."""
        return self._result.stdout

    @property
    def error_output(self) -> list[str]:
        """Lines captured from the shell's error output."""
        return self._result.stderr

    def execute(self) -> bool:
        """Run the command lines and capture their output.

        Output of a previous execution is replaced. I/O faults never raise,
        they are reported through :meth:`superuser_was_successful`.

        Returns
        -------
        bool
            ``False`` if permissions were not granted or the session faulted.
            ``True`` otherwise, even if the command wrote to error output; use
            :meth:`command_was_successful` for that.
        """
        return CommandExecutor(self.session).execute(self)

    def command_was_successful(self) -> bool:
        """Return True if the session was usable and error output is empty."""
        return self._result.command_succeeded

    def superuser_was_successful(self) -> bool:
        """Return True if the session was usable, regardless of error output."""
        return self._result.session_succeeded
