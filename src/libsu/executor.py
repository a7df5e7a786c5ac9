"""Run commands through a privileged shell's pipes.

libsu.executor
~~~~~~~~~~~~~~

The shell is long-lived and shared, and its pipes carry no end-of-message
marker. Output is therefore collected in two phases: wait (bounded by the
command's timeout) until either pipe has data, then drain whatever lines are
immediately available from stdout, then from stderr.

Executions against one session must not overlap. :class:`CommandExecutor`
does not enforce that, see :class:`libsu.superuser.SuperUser`.
"""

from __future__ import annotations

import logging
import typing as t

from .common import encode_line, wait_until, write_all
from .constants import POLL_INTERVAL_SECONDS
from .streams import EndOfStream

if t.TYPE_CHECKING:
    from .command import SuperUserCommand
    from .session import PrivilegedSession
    from .streams import LineSource

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Execute :class:`~libsu.command.SuperUserCommand` in a privileged session.

    Parameters
    ----------
    session : :class:`libsu.session.PrivilegedSession`
        Shared privileged shell. Never started, stopped or respawned here.
    poll_interval : float
        Seconds to sleep between readiness checks while waiting for output.
    """

    def __init__(
        self,
        session: PrivilegedSession,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.session = session
        self.poll_interval = poll_interval

    def execute(self, command: SuperUserCommand) -> bool:
        """Write the command lines, then capture stdout and stderr.

        Starts ``command`` on a fresh :class:`~libsu.command.CommandResult`.

        Returns
        -------
        bool
            ``True`` if the session was usable. ``False`` if permissions were
            missing or an I/O fault happened; lines captured before the fault
            are kept.

        Raises
        ------
        UnicodeEncodeError
            A command line cannot be encoded. Raised before anything is
            written, the session stays usable.
        """
        from .command import CommandResult

        result = CommandResult()
        command.result = result

        if not self.session.has_permissions():
            logger.warning("No superuser permissions, not executing %s", command)
            result.session_failed = True
            return False

        payload = [encode_line(line) for line in command.commands]

        try:
            self._write(command.commands, payload)
            self._wait_for_output(command.timeout)
            self._drain(self.session.stdout, result.stdout, logging.INFO)
            self._drain(self.session.stderr, result.stderr, logging.ERROR)
        except (OSError, ValueError) as e:
            if isinstance(e, ValueError) and not _is_closed_file_error(e):
                raise
            logger.exception("Session fault while executing %s", command)
            result.session_failed = True
            return False

        return True

    def _write(self, commands: t.Iterable[str], payload: list[bytes]) -> None:
        stdin = self.session.stdin
        for line, data in zip(commands, payload):
            logger.info("< %s", line)
            write_all(stdin, data)
        stdin.flush()

    def _wait_for_output(self, timeout: float) -> bool:
        stdout = self.session.stdout
        stderr = self.session.stderr

        def has_output() -> bool:
            return stdout.ready() or stderr.ready()

        if not wait_until(has_output, timeout, interval=self.poll_interval):
            logger.debug("No output after %s seconds", timeout)
            return False
        return True

    def _drain(
        self,
        stream: LineSource,
        lines: list[str],
        level: int,
    ) -> None:
        while stream.ready():
            read = stream.readline()
            if isinstance(read, EndOfStream):
                break
            logger.log(level, "> %s", read.text)
            lines.append(read.text)


def _is_closed_file_error(error: ValueError) -> bool:
    # io raises ValueError, not OSError, once a pipe object was closed
    return "closed file" in str(error)
