"""libsu, a typed, pythonic API for running commands in a privileged shell."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .command import CommandResult, SuperUserCommand
from .executor import CommandExecutor
from .session import PrivilegedSession, SubprocessSession
from .superuser import SuperUser

__all__ = (
    "CommandExecutor",
    "CommandResult",
    "PrivilegedSession",
    "SubprocessSession",
    "SuperUser",
    "SuperUserCommand",
    "__author__",
    "__copyright__",
    "__description__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
)
