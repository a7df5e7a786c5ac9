"""Defaults for libsu, configurable through environment variables."""

from __future__ import annotations

import os

#: Seconds a command waits for its first line of output
#: Can be configured via :envvar:`LIBSU_COMMAND_TIMEOUT` environment variable
#: Defaults to 30 seconds
DEFAULT_COMMAND_TIMEOUT_SECONDS = float(os.getenv("LIBSU_COMMAND_TIMEOUT", 30))

#: Interval in seconds between readiness checks while waiting for output
#: Can be configured via :envvar:`LIBSU_POLL_INTERVAL` environment variable
#: Defaults to 0.01 seconds (10ms)
POLL_INTERVAL_SECONDS = float(os.getenv("LIBSU_POLL_INTERVAL", 0.01))

#: Seconds to wait for the privileged shell to answer the permission probe
#: Can be configured via :envvar:`LIBSU_PERMISSION_TIMEOUT` environment variable
PERMISSION_TIMEOUT_SECONDS = float(os.getenv("LIBSU_PERMISSION_TIMEOUT", 10))

#: Command line used to spawn the privileged shell, split with :func:`shlex.split`
#: Can be configured via :envvar:`LIBSU_SHELL` environment variable
SHELL_COMMAND = os.getenv("LIBSU_SHELL", "su")

#: Seconds :meth:`libsu.session.SubprocessSession.stop` waits before killing
STOP_TIMEOUT_SECONDS = 2.0
