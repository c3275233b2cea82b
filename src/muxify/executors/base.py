"""Core abstractions for muxify command executors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class CommandResult:
    """Result of executing a shell command.

    A non-zero ``returncode`` is a normal result, not an error.

    >>> result = CommandResult(cmd='tmux -V', stdout='tmux 3.4', stderr='', returncode=0)
    >>> result.ok
    True
    >>> CommandResult(cmd='x', stdout='a\\n\\nb\\n', stderr='', returncode=0).stdout_lines
    ['a', 'b']
    """

    cmd: str
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        """Return True if the command exited zero."""
        return self.returncode == 0

    @property
    def stdout_lines(self) -> list[str]:
        """Return stdout as a list of non-blank lines."""
        return [line for line in self.stdout.split("\n") if line.strip()]


@runtime_checkable
class Executor(Protocol):
    """Protocol for components that run shell commands against one target."""

    async def execute(self, command: str) -> CommandResult:  # pragma: no cover
        """Run *command* and return its captured output.

        Implementations raise only for transport failures, never because the
        command itself exited non-zero.
        """
        ...

    def dispose(self) -> None:  # pragma: no cover
        """Release resources. Safe to call more than once."""
        ...


def decode_output(data: bytes) -> str:
    """Decode captured output and strip surrounding whitespace."""
    return data.decode("utf-8", errors="backslashreplace").strip()
