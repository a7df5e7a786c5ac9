"""Helper methods for libsu.

libsu.common
~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import time
import typing as t

from . import exc
from .constants import POLL_INTERVAL_SECONDS

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from .streams import ByteSink

logger = logging.getLogger(__name__)

#: Encoding used for the privileged shell's pipes
ENCODING = "utf-8"


def wait_until(
    fun: Callable[[], bool],
    seconds: float,
    *,
    interval: float = POLL_INTERVAL_SECONDS,
    raises: bool | None = False,
) -> bool:
    """
    Poll a function until it returns ``True`` or the specified time passes.

    The elapsed time is measured with :func:`time.monotonic`, so adjustments
    of the wall clock do not stretch or shorten the wait.

    Parameters
    ----------
    fun : callable
        A function that will be called repeatedly until it returns ``True`` or
        the specified time passes.
    seconds : float
        Seconds to wait.
    interval : float
        Time in seconds to sleep between calls. Defaults to ``0.01`` and is
        configurable via ``LIBSU_POLL_INTERVAL`` environment variable.
    raises : bool
        Whether or not to raise an exception on timeout. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if ``fun`` returned ``True`` before the time passed.

    Raises
    ------
    :exc:`exc.WaitTimeout`
        Time passed and ``raises`` is set.

    Examples
    --------
    >>> wait_until(lambda: True, 1)
    True

    >>> wait_until(lambda: False, 0.05)
    False
    """
    ini = time.monotonic()

    while not fun():
        end = time.monotonic()
        if end - ini >= seconds:
            if raises:
                msg = f"Timed out after {seconds} seconds"
                raise exc.WaitTimeout(msg)
            return False
        time.sleep(interval)
    return True


def decode_line(raw: bytes) -> str:
    r"""Return text of a raw line, without its line terminator.

    Undecodable bytes are kept as backslash escapes.

    Examples
    --------
    >>> decode_line(b"hello\n")
    'hello'

    >>> decode_line(b"crlf\r\n")
    'crlf'

    >>> decode_line(b"\xff")
    '\\xff'
    """
    text = raw.decode(ENCODING, errors="backslashreplace")
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return text


def encode_line(command: str) -> bytes:
    r"""Return a command as newline-terminated bytes for the shell's input.

    Surrogate escapes, as produced by :func:`os.fsdecode`, turn back into the
    raw bytes they stand for.

    Raises
    ------
    UnicodeEncodeError
        ``command`` holds a lone surrogate outside the escape range.

    Examples
    --------
    >>> encode_line("id -u")
    b'id -u\n'

    >>> encode_line("cat /tmp/\udcff")
    b'cat /tmp/\xff\n'
    """
    return f"{command}\n".encode(ENCODING, errors="surrogateescape")


def write_all(sink: ByteSink, data: bytes) -> None:
    """Write all of ``data``, looping over partial writes of unbuffered sinks.

    Examples
    --------
    >>> import io
    >>> buffer = io.BytesIO()
    >>> write_all(buffer, b"echo hello\\n")
    >>> buffer.getvalue()
    b'echo hello\\n'
    """
    view = memoryview(data)
    while view:
        written = sink.write(view)
        view = view[written or 0 :]
