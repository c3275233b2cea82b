"""Registry of known connections and their live executors.

muxify.registry
~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import asyncio
import collections
import dataclasses
import logging
import typing as t

from muxify import exc
from muxify.config import Settings
from muxify.constants import LOCAL_CONNECTION_ID, TEST_COMMAND
from muxify.credentials import KeyringCredentialStore, passphrase_key, password_key
from muxify.executors import LocalExecutor, SSHExecutor
from muxify.models import AuthType, Connection, ConnectionKind, SSHConfig
from muxify.storage import JSONConnectionStore

if t.TYPE_CHECKING:
    import types
    from collections.abc import Callable
    from typing import Self

    from muxify.credentials import CredentialStore
    from muxify.executors import CommandResult, Executor
    from muxify.storage import ConnectionStore

    LocalExecutorFactory = Callable[[], Executor]
    SSHExecutorFactory = Callable[[SSHConfig], SSHExecutor]

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Own the connection set and serve one cached executor per connection.

    The local connection always exists under ``"local"``. SSH connections are
    loaded from *store* on construction and written back after every change;
    their secrets go to *credentials* and never into *store*.

    Executors are created lazily by :meth:`get_executor` and cached until the
    connection is updated or removed, or the registry is disposed.

    Parameters
    ----------
    credentials : :class:`muxify.credentials.CredentialStore`
        Where passwords and passphrases are kept.
    store : :class:`muxify.storage.ConnectionStore`
        Where the non-secret SSH connection list is kept.
    settings : :class:`muxify.config.Settings`, optional
    ssh_executor_factory : callable, optional
        Builds the executor for an SSH config, secrets included. Defaults to
        :class:`muxify.executors.SSHExecutor`.
    local_executor_factory : callable, optional
        Builds the executor of the local connection. Defaults to
        :class:`muxify.executors.LocalExecutor`.

    Examples
    --------
    >>> from muxify.testing import MemoryConnectionStore, MemoryCredentialStore
    >>> registry = ConnectionRegistry(
    ...     credentials=MemoryCredentialStore(), store=MemoryConnectionStore(),
    ... )
    >>> [c.id for c in registry.connections]
    ['local']
    """

    def __init__(
        self,
        credentials: CredentialStore,
        store: ConnectionStore,
        settings: Settings | None = None,
        ssh_executor_factory: SSHExecutorFactory | None = None,
        local_executor_factory: LocalExecutorFactory | None = None,
    ) -> None:
        self.credentials = credentials
        self.store = store
        self.settings = settings if settings is not None else Settings()
        self._ssh_executor_factory = ssh_executor_factory or self._default_ssh_executor
        self._local_executor_factory = (
            local_executor_factory or self._default_local_executor
        )
        self._connections: dict[str, Connection] = {}
        self._executors: dict[str, Executor] = {}
        self._locks: collections.defaultdict[str, asyncio.Lock] = (
            collections.defaultdict(asyncio.Lock)
        )

        local = Connection.local()
        self._connections[local.id] = local
        self._load()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ConnectionRegistry:
        """Return a registry backed by the system keyring and a JSON file.

        Both locations come from *settings*, :meth:`Settings.from_env` by
        default.
        """
        settings = settings if settings is not None else Settings.from_env()
        return cls(
            credentials=KeyringCredentialStore(settings.keyring_service),
            store=JSONConnectionStore(settings.connections_path),
            settings=settings,
        )

    async def __aenter__(self) -> Self:
        """Enter the async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Dispose every executor on exit."""
        self.dispose()

    def _default_local_executor(self) -> Executor:
        return LocalExecutor(timeout=self.settings.timeout)

    def _default_ssh_executor(self, config: SSHConfig) -> SSHExecutor:
        return SSHExecutor(
            config,
            timeout=self.settings.timeout,
            strict_host_keys=self.settings.strict_host_keys,
        )

    def _load(self) -> None:
        for record in self.store.load():
            if record.get("type") != ConnectionKind.SSH.value or not record.get(
                "config",
            ):
                continue
            try:
                config = SSHConfig.from_dict(record["config"])
            except (KeyError, TypeError, ValueError):
                logger.warning("skipping malformed connection record %r", record)
                continue
            if config.id == LOCAL_CONNECTION_ID:
                logger.warning("skipping persisted connection using the local id")
                continue
            connection = Connection.from_ssh_config(config)
            self._connections[connection.id] = connection

    def _save(self) -> None:
        self.store.save(
            [c.to_dict() for c in self._connections.values() if c.ssh_config],
        )

    def _store_secrets(self, config: SSHConfig) -> None:
        if config.password:
            self.credentials.store(password_key(config.id), config.password)
        if config.passphrase:
            self.credentials.store(passphrase_key(config.id), config.passphrase)

    def _evict(self, connection_id: str) -> None:
        executor = self._executors.pop(connection_id, None)
        if executor is not None:
            executor.dispose()

    @property
    def connections(self) -> list[Connection]:
        """Return all connections, the local one first."""
        return list(self._connections.values())

    def get_connection(self, connection_id: str) -> Connection | None:
        """Return the connection registered under *connection_id*, if any."""
        return self._connections.get(connection_id)

    def get_stored_password(self, connection_id: str) -> str | None:
        """Return the stored password of a connection."""
        return self.credentials.get(password_key(connection_id))

    def get_stored_passphrase(self, connection_id: str) -> str | None:
        """Return the stored key passphrase of a connection."""
        return self.credentials.get(passphrase_key(connection_id))

    async def add_connection(self, config: SSHConfig) -> Connection:
        """Register a new SSH connection.

        Secrets are moved to the credential store; the registered and
        persisted record carries none. Adding an id that is already registered
        replaces it, disposing its cached executor first.
        """
        if config.id == LOCAL_CONNECTION_ID:
            msg = f"{LOCAL_CONNECTION_ID!r} is reserved for the local connection"
            raise ValueError(msg)

        async with self._locks[config.id]:
            self._evict(config.id)
            self._store_secrets(config)
            connection = Connection.from_ssh_config(config)
            self._connections[connection.id] = connection
            self._save()
        logger.info("added connection %s (%s)", connection.id, connection.display_name)
        return connection

    async def update_connection(self, config: SSHConfig) -> Connection:
        """Replace an SSH connection's parameters.

        The cached executor is disposed first, so the next use reconnects with
        the new parameters.

        Raises
        ------
        :exc:`exc.ConnectionNotFound`
            No SSH connection is registered under ``config.id``.
        """
        async with self._locks[config.id]:
            existing = self._connections.get(config.id)
            if existing is None or existing.kind is not ConnectionKind.SSH:
                raise exc.ConnectionNotFound(config.id)

            self._evict(config.id)
            self._store_secrets(config)
            connection = Connection.from_ssh_config(config)
            self._connections[connection.id] = connection
            self._save()
        logger.info("updated connection %s", connection.id)
        return connection

    async def remove_connection(self, connection_id: str) -> None:
        """Remove an SSH connection along with its executor and secrets.

        Raises
        ------
        :exc:`exc.CannotRemoveLocalConnection`
            *connection_id* is the local connection.
        :exc:`exc.ConnectionNotFound`
            Nothing is registered under *connection_id*.
        """
        if connection_id == LOCAL_CONNECTION_ID:
            raise exc.CannotRemoveLocalConnection

        # the lock is kept: a queued get_executor may still be waiting on it
        async with self._locks[connection_id]:
            if connection_id not in self._connections:
                raise exc.ConnectionNotFound(connection_id)

            self._evict(connection_id)
            self.credentials.delete(password_key(connection_id))
            self.credentials.delete(passphrase_key(connection_id))
            del self._connections[connection_id]
            self._save()
        logger.info("removed connection %s", connection_id)

    def _resolve_ssh_config(self, connection: Connection) -> SSHConfig:
        assert connection.ssh_config is not None
        config = dataclasses.replace(connection.ssh_config)
        if config.auth_type is AuthType.Password and not config.password:
            config.password = self.get_stored_password(connection.id)
        if config.auth_type is AuthType.PrivateKey and not config.passphrase:
            config.passphrase = self.get_stored_passphrase(connection.id)
        return config

    async def get_executor(self, connection_id: str) -> Executor:
        """Return the executor of a connection, creating it on first use.

        SSH executors connect before they are cached. A failed connect is
        raised to the caller and nothing is cached, so the next call retries.

        Raises
        ------
        :exc:`exc.ConnectionNotFound`
            Nothing is registered under *connection_id*.
        :exc:`exc.MuxifyConnectionError`
            The SSH connection could not be established.
        """
        executor = self._executors.get(connection_id)
        if executor is not None:
            return executor

        if connection_id not in self._connections:
            raise exc.ConnectionNotFound(connection_id)

        async with self._locks[connection_id]:
            executor = self._executors.get(connection_id)
            if executor is not None:
                return executor

            # updated or removed while waiting for the lock
            connection = self._connections.get(connection_id)
            if connection is None:
                raise exc.ConnectionNotFound(connection_id)

            if connection.kind is ConnectionKind.Local:
                executor = self._local_executor_factory()
            else:
                ssh_executor = self._ssh_executor_factory(
                    self._resolve_ssh_config(connection),
                )
                try:
                    await ssh_executor.connect()
                except Exception:
                    ssh_executor.dispose()
                    raise
                executor = ssh_executor

            self._executors[connection_id] = executor
            return executor

    async def execute(self, connection_id: str, command: str) -> CommandResult:
        """Run *command* on a connection."""
        executor = await self.get_executor(connection_id)
        return await executor.execute(command)

    async def test_connection(self, connection_id: str) -> bool:
        """Return True if a test command succeeds on the connection.

        Every failure is reported as False.
        """
        try:
            result = await self.execute(connection_id, TEST_COMMAND)
        except Exception:
            logger.info("connection test failed for %s", connection_id, exc_info=True)
            return False
        return result.returncode == 0

    def dispose(self) -> None:
        """Dispose every cached executor."""
        executors = list(self._executors.values())
        self._executors.clear()
        for executor in executors:
            executor.dispose()


__all__ = ["ConnectionRegistry"]
