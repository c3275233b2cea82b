"""Testing helpers for muxify.

In-memory stand-ins for executors and stores, used in doctests and unit tests.
"""

from __future__ import annotations

import asyncio
import copy
import typing as t
from collections.abc import Callable, Mapping

from muxify.executors.base import CommandResult, Executor
from muxify.registry import ConnectionRegistry

if t.TYPE_CHECKING:
    from muxify.config import Settings
    from muxify.models import SSHConfig
    from muxify.storage import ConnectionRecord

Responder = Callable[[str], "CommandResult | BaseException | None"]


def result(
    *,
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
    cmd: str = "",
) -> CommandResult:
    """Return a scripted command result."""
    return CommandResult(cmd=cmd, stdout=stdout, stderr=stderr, returncode=returncode)


def error(*, stderr: str = "error", returncode: int = 1) -> CommandResult:
    """Return a scripted failed command result."""
    return result(stderr=stderr, returncode=returncode)


class MockExecutor(Executor):
    """Executor replaying scripted results.

    Commands are looked up in *script* first, then passed to *responder*.
    Anything else succeeds with empty output. A scripted exception is raised
    instead of returned.

    >>> executor = MockExecutor(script={'tmux -V': result(stdout='tmux 3.4')})
    >>> asyncio.run(executor.execute('tmux -V')).stdout
    'tmux 3.4'
    >>> asyncio.run(executor.execute('true')).returncode
    0
    >>> executor.commands
    ['tmux -V', 'true']
    """

    def __init__(
        self,
        *,
        script: Mapping[str, CommandResult | BaseException] | None = None,
        responder: Responder | None = None,
        connect_error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.script = dict(script or {})
        self.responder = responder
        self.connect_error = connect_error
        self.delay = delay
        self.commands: list[str] = []
        self.connect_count = 0
        self.dispose_count = 0

    @property
    def disposed(self) -> bool:
        """Return True once :meth:`dispose` has been called."""
        return self.dispose_count > 0

    async def connect(self) -> None:
        """Count the attempt, raising *connect_error* if set."""
        self.connect_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.connect_error is not None:
            raise self.connect_error

    async def execute(self, command: str) -> CommandResult:
        """Replay the result scripted for *command*."""
        self.commands.append(command)
        if self.delay:
            await asyncio.sleep(self.delay)

        value: CommandResult | BaseException | None = self.script.get(command)
        if value is None and self.responder is not None:
            value = self.responder(command)
        if value is None:
            value = result()
        if isinstance(value, BaseException):
            raise value
        return CommandResult(
            cmd=command,
            stdout=value.stdout,
            stderr=value.stderr,
            returncode=value.returncode,
        )

    def dispose(self) -> None:
        """Count the call."""
        self.dispose_count += 1


class MockSSHExecutorFactory:
    """Stand-in for the registry's SSH executor factory.

    Records every config it is called with, secrets included, and hands out
    the executor registered for the config's id or a fresh
    :class:`MockExecutor` that takes *delay* seconds per call.
    """

    def __init__(
        self,
        executors: Mapping[str, MockExecutor] | None = None,
        *,
        connect_error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.executors = dict(executors or {})
        self.connect_error = connect_error
        self.delay = delay
        self.configs: list[SSHConfig] = []
        self.created: list[MockExecutor] = []

    def __call__(self, config: SSHConfig) -> MockExecutor:
        self.configs.append(config)
        executor = self.executors.get(config.id) or MockExecutor(delay=self.delay)
        executor.connect_error = self.connect_error
        self.created.append(executor)
        return executor


class MemoryCredentialStore:
    """Keep secrets in a dict.

    >>> store = MemoryCredentialStore()
    >>> store.store('ssh.password.box', 'hunter2')
    >>> store.get('ssh.password.box')
    'hunter2'
    >>> store.delete('ssh.password.box')
    >>> store.delete('ssh.password.box')
    >>> store.get('ssh.password.box') is None
    True
    """

    def __init__(self, secrets: Mapping[str, str] | None = None) -> None:
        self.secrets = dict(secrets or {})

    def store(self, key: str, value: str) -> None:
        self.secrets[key] = value

    def get(self, key: str) -> str | None:
        return self.secrets.get(key)

    def delete(self, key: str) -> None:
        self.secrets.pop(key, None)


class MemoryConnectionStore:
    """Keep connection records in a list, copied on every load and save."""

    def __init__(self, records: list[ConnectionRecord] | None = None) -> None:
        self.records: list[ConnectionRecord] = copy.deepcopy(records or [])
        self.save_count = 0

    def load(self) -> list[ConnectionRecord]:
        return copy.deepcopy(self.records)

    def save(self, records: list[ConnectionRecord]) -> None:
        self.records = copy.deepcopy(records)
        self.save_count += 1


def make_registry(
    *,
    local: MockExecutor | None = None,
    ssh: MockSSHExecutorFactory | None = None,
    credentials: MemoryCredentialStore | None = None,
    store: MemoryConnectionStore | None = None,
    settings: Settings | None = None,
) -> ConnectionRegistry:
    """Return a registry wired to in-memory stores and mock executors.

    >>> registry = make_registry()
    >>> isinstance(asyncio.run(registry.get_executor('local')), MockExecutor)
    True
    """
    local_executor = local if local is not None else MockExecutor()
    return ConnectionRegistry(
        credentials=credentials if credentials is not None else MemoryCredentialStore(),
        store=store if store is not None else MemoryConnectionStore(),
        settings=settings,
        ssh_executor_factory=ssh if ssh is not None else MockSSHExecutorFactory(),
        local_executor_factory=lambda: local_executor,
    )


__all__ = [
    "MemoryConnectionStore",
    "MemoryCredentialStore",
    "MockExecutor",
    "MockSSHExecutorFactory",
    "error",
    "make_registry",
    "result",
]
