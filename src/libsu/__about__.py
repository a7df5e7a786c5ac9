"""Metadata for libsu package."""

from __future__ import annotations

__title__ = "libsu"
__package_name__ = "libsu"
__version__ = "0.3.0"
__description__ = "Typed, pythonic API for running commands in a privileged shell"
__author__ = "David Schulte"
__license__ = "MIT"
__copyright__ = "Copyright 2015- David Schulte"
