"""Helpers for testing libsu and code built on it."""

from __future__ import annotations

from .fake import FakeInput, FakeSession, ScriptedStream

__all__ = ["FakeInput", "FakeSession", "ScriptedStream"]
