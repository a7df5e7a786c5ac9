"""Line-oriented access to the privileged shell's pipes.

libsu.streams
~~~~~~~~~~~~~

Reading a line is modeled as ``Line(text) | EndOfStream`` so the end of a
pipe is never confused with an empty line.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import select
import typing as t

from .common import decode_line

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Line:
    """A line read from a stream, without its terminator."""

    text: str


@dataclasses.dataclass(frozen=True)
class EndOfStream:
    """Marker returned once the writing end of a stream is closed."""


#: Shared :class:`EndOfStream` instance
END_OF_STREAM = EndOfStream()

ReadResult = t.Union[Line, EndOfStream]


class LineSource(t.Protocol):
    """Readable stream with a non-blocking "data available" predicate."""

    def ready(self) -> bool:
        """Return True if :meth:`readline` has data to return right now.

        Must not block.
        """
        ...

    def readline(self) -> ReadResult:
        """Return the next line, or :class:`EndOfStream`.

        After :meth:`ready` returned ``True``, must return without waiting
        for more data: a partial line is returned as is rather than held
        back for its newline.
        """
        ...


class ByteSink(t.Protocol):
    """Writable byte stream, e.g. the shell's stdin."""

    def write(self, data: bytes, /) -> t.Any:
        """Write bytes."""
        ...

    def flush(self) -> None:
        """Flush buffered bytes."""
        ...


class PipeReader:
    """Read lines from a pipe without blocking on :meth:`ready`.

    Readiness is checked with :func:`select.select` and a zero timeout, plus
    whatever was already buffered by an earlier read. Once the pipe reports
    end-of-file, :meth:`ready` stays ``True`` so that a drain loop picks up
    :data:`END_OF_STREAM` and stops.

    Parameters
    ----------
    pipe : file object or int
        Pipe to read from, e.g. ``Popen.stdout``, or its file descriptor.
    chunk_size : int
        Maximum bytes fetched per :func:`os.read` call.
    """

    def __init__(self, pipe: t.IO[bytes] | int, *, chunk_size: int = 4096) -> None:
        self._fd = pipe if isinstance(pipe, int) else pipe.fileno()
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(fd={self._fd}, eof={self._eof})"

    def fileno(self) -> int:
        """Return the underlying file descriptor."""
        return self._fd

    @property
    def eof(self) -> bool:
        """Return True once the writing end has been closed."""
        return self._eof

    def ready(self) -> bool:
        """Return True if data (or end-of-file) can be read without waiting."""
        if self._buffer or self._eof:
            return True
        return self._readable()

    def readline(self) -> ReadResult:
        """Return the next line.

        A fragment without newline is returned as a line once nothing more
        is ready on the pipe, or at end-of-file. Only blocks when called
        while :meth:`ready` is ``False``.
        """
        while True:
            index = self._buffer.find(b"\n")
            if index >= 0:
                raw = bytes(self._buffer[: index + 1])
                del self._buffer[: index + 1]
                return Line(decode_line(raw))

            if self._eof:
                if self._buffer:
                    return self._take_fragment()
                return END_OF_STREAM

            if self._buffer and not self._readable():
                return self._take_fragment()

            chunk = os.read(self._fd, self._chunk_size)
            if chunk:
                self._buffer.extend(chunk)
            else:
                logger.debug("end of stream on fd %s", self._fd)
                self._eof = True

    def _readable(self) -> bool:
        readable, _, _ = select.select([self._fd], [], [], 0)
        return bool(readable)

    def _take_fragment(self) -> Line:
        raw = bytes(self._buffer)
        self._buffer.clear()
        return Line(decode_line(raw))
