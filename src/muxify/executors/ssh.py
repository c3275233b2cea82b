"""SSH executor backed by :mod:`paramiko`."""

from __future__ import annotations

import asyncio
import logging
import typing as t

import paramiko
from paramiko.pkey import UnknownKeyType

from muxify import exc
from muxify.executors.base import CommandResult, Executor, decode_output
from muxify.models import AuthType

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from muxify.models import SSHConfig

logger = logging.getLogger(__name__)

_T = t.TypeVar("_T")


class SSHExecutor(Executor):
    """Execute commands on one remote host over a single SSH session.

    The session is opened on :meth:`connect`, or lazily on the first
    :meth:`execute`. When the server drops the transport, the next
    :meth:`execute` reconnects once before running its command.

    paramiko is blocking, so connect and exec run in worker threads and never
    hold up executors of other connections. Calls on one executor are
    serialized.

    Parameters
    ----------
    config : :class:`muxify.models.SSHConfig`
        Connection parameters, secrets included.
    timeout : float, optional
        Seconds allowed for connecting and for each command.
    strict_host_keys : bool
        Reject hosts missing from ``known_hosts`` instead of adding them.
    client_factory : callable, optional
        Returns a fresh :class:`paramiko.SSHClient`.
    """

    def __init__(
        self,
        config: SSHConfig,
        *,
        timeout: float | None = None,
        strict_host_keys: bool = False,
        client_factory: Callable[[], paramiko.SSHClient] | None = None,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self.strict_host_keys = strict_host_keys
        self._client_factory = client_factory or paramiko.SSHClient
        self._client: paramiko.SSHClient | None = None
        self._lock = asyncio.Lock()
        self.connected = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"{self.config.username}@{self.config.host}:{self.config.port}"
            f"{'' if self.connected else ' disconnected'})"
        )

    @property
    def is_active(self) -> bool:
        """Return True if the SSH transport is up.

        A transport closed by the server flips :attr:`connected` to False.
        """
        if not self.connected or self._client is None:
            return False
        transport = self._client.get_transport()
        if transport is None or not transport.is_active():
            logger.info("ssh transport to %s closed", self.config.host)
            self.connected = False
            return False
        return True

    async def connect(self) -> None:
        """Open an authenticated session unless one is already up.

        Raises
        ------
        :exc:`exc.PrivateKeyUnreadable`
            Key file missing, unreadable or not a private key.
        :exc:`exc.AuthenticationFailed`
            Credentials missing, or rejected by the host or the key file.
        :exc:`exc.ConnectionUnreachable`
            Network or protocol failure.
        :exc:`exc.OperationTimeout`
            Connecting took longer than :attr:`timeout`.
        """
        if self.is_active:
            return

        self._close_client()
        client = self._client_factory()
        self._client = client
        try:
            await self._run_blocking(self._open, client)
        except Exception:
            self._close_client()
            raise

        self.connected = True
        logger.info(
            "connected to %s@%s:%s",
            self.config.username,
            self.config.host,
            self.config.port,
        )

    async def execute(self, command: str) -> CommandResult:
        """Run *command* on the remote host.

        Raises
        ------
        :exc:`exc.MuxifyConnectionError`
            If (re)connecting fails or the transport drops mid-command.
        :exc:`exc.OperationTimeout`
            The command took longer than :attr:`timeout`.
        """
        async with self._lock:
            if not self.is_active:
                await self.connect()
            assert self._client is not None

            try:
                stdout, stderr, returncode = await self._run_blocking(
                    self._exec,
                    self._client,
                    command,
                )
            except (paramiko.SSHException, EOFError, ConnectionError) as e:
                self.connected = False
                msg = f"SSH transport to {self.config.host} failed: {e}"
                raise exc.ConnectionUnreachable(msg) from e

        result = CommandResult(
            cmd=command,
            stdout=stdout,
            stderr=stderr,
            returncode=returncode,
        )
        logger.debug(
            "%s %s -> %s: %s",
            self.config.host,
            command,
            result.returncode,
            result.stdout,
        )
        return result

    def dispose(self) -> None:
        """Close the session. Safe on a never-connected executor."""
        if self._client is not None:
            logger.info("closing ssh session to %s", self.config.host)
        self._close_client()

    def _close_client(self) -> None:
        client, self._client = self._client, None
        self.connected = False
        if client is not None:
            client.close()

    async def _run_blocking(self, func: Callable[..., _T], *args: t.Any) -> _T:
        try:
            if self.timeout is None:
                return await asyncio.to_thread(func, *args)
            async with asyncio.timeout(self.timeout):
                return await asyncio.to_thread(func, *args)
        except TimeoutError as e:
            msg = f"{self.config.host}: timed out after {self.timeout}s"
            raise exc.OperationTimeout(msg) from e

    def _load_private_key(self) -> paramiko.PKey:
        path = self.config.private_key_path
        if not path:
            raise exc.PrivateKeyUnreadable(path)
        passphrase = self.config.passphrase.encode() if self.config.passphrase else None
        try:
            # positional: paramiko 5 renamed the keyword to ``password``
            return paramiko.PKey.from_path(path, passphrase)
        except TypeError as e:
            # cryptography: passphrase missing for an encrypted key, or vice versa
            if "password" not in str(e).lower():
                raise
            msg = f"Passphrase does not match private key {path}: {e}"
            raise exc.AuthenticationFailed(msg) from e
        except ValueError as e:
            if passphrase is not None and _is_encrypted_key(path):
                msg = f"Wrong passphrase for private key {path}"
                raise exc.AuthenticationFailed(msg) from e
            raise exc.PrivateKeyUnreadable(path) from e
        except (OSError, UnknownKeyType, paramiko.SSHException) as e:
            raise exc.PrivateKeyUnreadable(path) from e

    def _open(self, client: paramiko.SSHClient) -> None:
        connect_kwargs: dict[str, t.Any] = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.username,
            "timeout": self.timeout,
            "banner_timeout": self.timeout,
            "auth_timeout": self.timeout,
            "allow_agent": False,
            "look_for_keys": False,
        }
        if self.config.auth_type is AuthType.PrivateKey:
            connect_kwargs["pkey"] = self._load_private_key()
        elif self.config.password:
            connect_kwargs["password"] = self.config.password
        else:
            msg = (
                f"No password stored for "
                f"{self.config.username}@{self.config.host}"
            )
            raise exc.AuthenticationFailed(msg)

        client.load_system_host_keys()
        if self.strict_host_keys:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            client.connect(**connect_kwargs)
        except paramiko.AuthenticationException as e:
            msg = (
                f"Authentication failed for "
                f"{self.config.username}@{self.config.host}: {e}"
            )
            raise exc.AuthenticationFailed(msg) from e
        except TimeoutError:
            raise
        except (paramiko.SSHException, OSError) as e:
            msg = f"Cannot connect to {self.config.host}:{self.config.port}: {e}"
            raise exc.ConnectionUnreachable(msg) from e

    def _exec(
        self,
        client: paramiko.SSHClient,
        command: str,
    ) -> tuple[str, str, int]:
        stdin, stdout, stderr = client.exec_command(command, timeout=self.timeout)
        stdin.close()
        out = stdout.read()
        err = stderr.read()
        returncode = stdout.channel.recv_exit_status()
        return decode_output(out), decode_output(err), returncode


def _is_encrypted_key(path: str) -> bool:
    """Return True if *path* holds a private key that needs a passphrase."""
    try:
        paramiko.PKey.from_path(path)
    except TypeError as e:
        return "password" in str(e).lower()
    except (OSError, ValueError, UnknownKeyType, paramiko.SSHException):
        return False
    return False


__all__ = ["SSHExecutor"]
