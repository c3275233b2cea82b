"""Local shell executor."""

from __future__ import annotations

import asyncio
import logging

from muxify.constants import TIMEOUT_EXIT_CODE
from muxify.executors.base import CommandResult, Executor, decode_output

logger = logging.getLogger(__name__)


class LocalExecutor(Executor):
    """Execute commands through the local shell.

    Nothing raises past :meth:`execute`: a command that cannot be launched is
    reported as ``returncode=1`` with the error in ``stderr``.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def execute(self, command: str) -> CommandResult:
        """Run *command* with ``/bin/sh`` and capture its output."""
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except Exception as e:
            logger.exception("Exception for %s", command)
            return CommandResult(cmd=command, stdout="", stderr=str(e), returncode=1)

        try:
            if self.timeout is None:
                stdout, stderr = await process.communicate()
            else:
                async with asyncio.timeout(self.timeout):
                    stdout, stderr = await process.communicate()
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("command timed out after %ss: %s", self.timeout, command)
            return CommandResult(
                cmd=command,
                stdout="",
                stderr=f"command timed out after {self.timeout}s",
                returncode=TIMEOUT_EXIT_CODE,
            )

        result = CommandResult(
            cmd=command,
            stdout=decode_output(stdout),
            stderr=decode_output(stderr),
            returncode=process.returncode or 0,
        )
        logger.debug(
            "local %s -> %s: %s",
            command,
            result.returncode,
            result.stdout,
        )
        return result

    def dispose(self) -> None:
        """Nothing to release for local execution."""


__all__ = ["LocalExecutor"]
