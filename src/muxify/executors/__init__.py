"""Executor implementations for muxify."""

from __future__ import annotations

from .base import CommandResult, Executor
from .local import LocalExecutor
from .ssh import SSHExecutor

__all__ = [
    "CommandResult",
    "Executor",
    "LocalExecutor",
    "SSHExecutor",
]
