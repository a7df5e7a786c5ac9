"""In-memory privileged session used in doctests and unit tests."""

from __future__ import annotations

import time
import typing as t
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from libsu.common import decode_line
from libsu.streams import END_OF_STREAM, EndOfStream, Line

if t.TYPE_CHECKING:
    from libsu.streams import ReadResult


class ScriptedStream:
    """Output stream replaying lines once their scheduled time has come.

    Like :class:`~libsu.streams.PipeReader`, :meth:`readline` returns at once
    after :meth:`ready` returned ``True``; it only sleeps when called early.

    Once :meth:`close` takes effect, the stream keeps reporting
    :data:`~libsu.streams.END_OF_STREAM`, like a pipe whose writer exited.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[float, ReadResult]] = deque()
        self.broken = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(pending={len(self._pending)})"

    def feed(self, *lines: str, delay: float = 0.0) -> None:
        """Make ``lines`` readable ``delay`` seconds from now."""
        available_at = time.monotonic() + delay
        for line in lines:
            self._pending.append((available_at, Line(line)))

    def close(self, delay: float = 0.0) -> None:
        """Report end of stream after the already fed lines."""
        self._pending.append((time.monotonic() + delay, END_OF_STREAM))

    def ready(self) -> bool:
        """Return True if the next entry is due."""
        if self.broken:
            msg = "stream broken"
            raise OSError(msg)
        return bool(self._pending) and self._pending[0][0] <= time.monotonic()

    def readline(self) -> ReadResult:
        """Return the next entry, sleeping until it is due if called early."""
        if self.broken:
            msg = "stream broken"
            raise OSError(msg)
        if not self._pending:
            return END_OF_STREAM

        available_at, read = self._pending[0]
        delay = available_at - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        if not isinstance(read, EndOfStream):
            self._pending.popleft()
        return read


class FakeInput:
    """Shell input recording what is written to it."""

    def __init__(self, on_flush: Callable[[], None] | None = None) -> None:
        self.written: list[bytes] = []
        self.flushes = 0
        self.broken = False
        self.closed = False
        self._on_flush = on_flush

    def _check(self) -> None:
        if self.closed:
            msg = "I/O operation on closed file"
            raise ValueError(msg)
        if self.broken:
            raise BrokenPipeError

    def write(self, data: bytes, /) -> int:
        """Record ``data``, fail like a pipe if broken or closed."""
        self._check()
        self.written.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        """Count the flush and trigger the scripted response."""
        self._check()
        self.flushes += 1
        if self._on_flush is not None:
            self._on_flush()

    @property
    def lines(self) -> list[str]:
        """Written command lines, without terminators."""
        return [decode_line(raw) for raw in self.written]


@dataclass
class _Response:
    stdout: list[str] = field(default_factory=list)
    stderr: list[str] = field(default_factory=list)
    delay: float = 0.0


class FakeSession:
    """Privileged session replaying scripted responses.

    Each flush of :attr:`stdin` (one per execution) makes the next response
    from :meth:`respond` readable on :attr:`stdout` and :attr:`stderr`.

    Parameters
    ----------
    granted : bool
        Value returned by :meth:`has_permissions`.

    Examples
    --------
    >>> from libsu.command import SuperUserCommand
    >>> session = FakeSession()
    >>> session.respond(stdout=["hello"])
    >>> command = SuperUserCommand("echo hello", session=session, timeout=1)
    >>> command.execute()
    True
    >>> command.standard_output
    ['hello']
    >>> session.stdin.lines
    ['echo hello']
    """

    def __init__(self, *, granted: bool = True) -> None:
        self.granted = granted
        self.permission_checks = 0
        self.stdin = FakeInput(on_flush=self._on_flush)
        self.stdout = ScriptedStream()
        self.stderr = ScriptedStream()
        self._responses: deque[_Response] = deque()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(granted={self.granted})"

    def respond(
        self,
        *,
        stdout: Iterable[str] = (),
        stderr: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        """Queue output for the next execution, ``delay`` seconds after flush."""
        self._responses.append(
            _Response(stdout=list(stdout), stderr=list(stderr), delay=delay),
        )

    def has_permissions(self) -> bool:
        """Return :attr:`granted`."""
        self.permission_checks += 1
        return self.granted

    def _on_flush(self) -> None:
        if not self._responses:
            return
        response = self._responses.popleft()
        if response.stdout:
            self.stdout.feed(*response.stdout, delay=response.delay)
        if response.stderr:
            self.stderr.feed(*response.stderr, delay=response.delay)


__all__ = ["FakeInput", "FakeSession", "ScriptedStream"]
