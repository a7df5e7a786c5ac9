"""Privileged shell sessions.

libsu.session
~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import typing as t

from . import exc
from .common import encode_line, wait_until, write_all
from .constants import (
    PERMISSION_TIMEOUT_SECONDS,
    SHELL_COMMAND,
    STOP_TIMEOUT_SECONDS,
)
from .streams import EndOfStream, PipeReader

if t.TYPE_CHECKING:
    import sys
    import types
    from collections.abc import Sequence

    from .streams import ByteSink, LineSource

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

logger = logging.getLogger(__name__)

#: Command written to the shell to find out whether it runs as root
PERMISSION_PROBE = "id -u"


class PrivilegedSession(t.Protocol):
    """Shared privileged shell as seen by :class:`libsu.executor.CommandExecutor`."""

    @property
    def stdin(self) -> ByteSink:
        """Shell's input."""
        ...

    @property
    def stdout(self) -> LineSource:
        """Shell's standard output."""
        ...

    @property
    def stderr(self) -> LineSource:
        """Shell's error output."""
        ...

    def has_permissions(self) -> bool:
        """Return True if the shell was granted elevated permissions."""
        ...


class SubprocessSession:
    """Privileged shell spawned with :class:`subprocess.Popen`.

    Parameters
    ----------
    shell : str or sequence of str, optional
        Command line spawning the privileged shell. Defaults to ``su``,
        configurable via ``LIBSU_SHELL`` environment variable.
    verify_root : bool
        Only grant permissions if the shell reports user id ``0``. Without it,
        any shell answering the probe is granted.

    Examples
    --------
    .. code-block:: python

        with SubprocessSession() as session:
            if session.ask_for_permissions():
                SuperUserCommand("mount -o rw,remount /", session=session).execute()
    """

    def __init__(
        self,
        shell: str | Sequence[str] | None = None,
        *,
        verify_root: bool = True,
    ) -> None:
        if shell is None:
            shell = SHELL_COMMAND
        if isinstance(shell, str):
            shell = shlex.split(shell)

        self.shell: list[str] = list(shell)
        self.verify_root = verify_root

        self._process: subprocess.Popen[bytes] | None = None
        self._stdout: PipeReader | None = None
        self._stderr: PipeReader | None = None
        self._granted = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(shell={self.shell!r}, pid={self.pid})"

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.stop()

    @property
    def pid(self) -> int | None:
        """Process id of the shell, if started."""
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        """Exit status of the shell, ``None`` while running or not started."""
        if self._process is None:
            return None
        return self._process.poll()

    @property
    def is_alive(self) -> bool:
        """Return True if the shell process is running."""
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """Spawn the privileged shell. A running shell is kept as is.

        Raises
        ------
        :exc:`exc.SuBinaryNotFound`
            Shell executable not in ``PATH``.
        """
        if self.is_alive:
            return
        if self._process is not None:
            self.stop()

        executable = shutil.which(self.shell[0])
        if executable is None:
            raise exc.SuBinaryNotFound(self.shell[0])

        cmd = [executable, *self.shell[1:]]
        try:
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except Exception:
            logger.exception("Exception for %s", subprocess.list2cmdline(cmd))
            raise

        assert self._process.stdout is not None
        assert self._process.stderr is not None
        self._stdout = PipeReader(self._process.stdout)
        self._stderr = PipeReader(self._process.stderr)
        self._granted = False
        logger.debug("started privileged shell %s (pid %s)", cmd, self._process.pid)

    def stop(self, timeout: float = STOP_TIMEOUT_SECONDS) -> None:
        """Close the shell's input and wait for it, killing it after ``timeout``."""
        process = self._process
        self._granted = False
        if process is None:
            return

        if process.poll() is None:
            if process.stdin is not None:
                try:
                    process.stdin.close()
                except OSError:
                    logger.debug("stdin already closed", exc_info=True)
            process.terminate()
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

        for pipe in (process.stdin, process.stdout, process.stderr):
            if pipe is not None and not pipe.closed:
                try:
                    pipe.close()
                except OSError:
                    logger.debug("closing pipe failed", exc_info=True)

        logger.debug("stopped privileged shell (pid %s)", process.pid)
        self._process = None
        self._stdout = None
        self._stderr = None

    def ask_for_permissions(self, timeout: float = PERMISSION_TIMEOUT_SECONDS) -> bool:
        """Start the shell if needed and check that it runs elevated.

        Writes ``id -u`` and waits up to ``timeout`` seconds for an answer.

        Returns
        -------
        bool
            Whether permissions were granted.
        """
        self.start()
        stdout = self.stdout

        try:
            write_all(self.stdin, encode_line(PERMISSION_PROBE))
            self.stdin.flush()
            if not wait_until(stdout.ready, timeout):
                logger.warning("privileged shell did not answer within %s s", timeout)
                self._granted = False
                return False
            read = stdout.readline()
        except OSError:
            logger.exception("privileged shell refused input")
            self._granted = False
            return False

        if isinstance(read, EndOfStream):
            self._granted = False
        elif self.verify_root:
            self._granted = read.text.strip() == "0"
        else:
            self._granted = True

        logger.debug("superuser permissions granted: %s", self._granted)
        return self._granted

    def has_permissions(self) -> bool:
        """Return True if permissions were granted and the shell is alive."""
        return self._granted and self.is_alive

    @property
    def stdin(self) -> t.IO[bytes]:
        """Shell's input pipe."""
        if self._process is None or self._process.stdin is None:
            raise exc.SessionNotStarted
        return self._process.stdin

    @property
    def stdout(self) -> LineSource:
        """Shell's standard output."""
        if self._stdout is None:
            raise exc.SessionNotStarted
        return self._stdout

    @property
    def stderr(self) -> LineSource:
        """Shell's error output."""
        if self._stderr is None:
            raise exc.SessionNotStarted
        return self._stderr
