"""Provide exceptions used by libsu.

libsu.exc
~~~~~~~~~

Notes
-----
Exceptions in this module inherit from :exc:`LibSuException`.

:class:`libsu.executor.CommandExecutor` never raises these for I/O trouble
with the privileged shell. Those faults end up in
:attr:`libsu.command.CommandResult.session_failed` instead.
"""

from __future__ import annotations


class LibSuException(Exception):
    """Base exception for all libsu errors."""


class SuBinaryNotFound(LibSuException):
    """Raised when the privileged shell executable cannot be found."""

    def __init__(self, executable: str | None = None, *args: object) -> None:
        if executable is not None:
            super().__init__(f"Privileged shell not found in PATH: {executable}")
        else:
            super().__init__("Privileged shell not found in PATH")


class SessionNotStarted(LibSuException):
    """Raised when the privileged shell process is accessed before start()."""


class PermissionDenied(LibSuException):
    """Raised if the privileged shell did not grant elevated permissions."""


class WaitTimeout(LibSuException):
    """Raised when a function times out waiting for a condition."""
