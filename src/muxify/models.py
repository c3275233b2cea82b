"""Typed records for connections and tmux objects.

muxify.models
~~~~~~~~~~~~~

Tmux records are snapshots: every listing call in
:class:`muxify.service.TmuxService` builds them fresh from tmux output, nothing
caches them.
"""

from __future__ import annotations

import dataclasses
import enum
import re
import typing as t

from muxify.constants import LOCAL_CONNECTION_ID, LOCAL_CONNECTION_NAME

if t.TYPE_CHECKING:
    import datetime

_TRAILING_DIGITS_RE = re.compile(r"(\d+)$")


class ConnectionKind(enum.Enum):
    """Transport a connection runs commands over."""

    Local = "local"
    SSH = "ssh"


class AuthType(enum.Enum):
    """How an SSH connection authenticates."""

    Password = "password"
    PrivateKey = "privateKey"


@dataclasses.dataclass
class SSHConfig:
    """Parameters of one SSH connection.

    ``password`` and ``passphrase`` live only in memory or in the credential
    store, :meth:`to_dict` never emits them.

    Examples
    --------
    >>> config = SSHConfig(
    ...     id='box', host='example.org', username='me', password='hunter2',
    ... )
    >>> config.display_name
    'me@example.org'
    >>> 'password' in config.to_dict()
    False
    >>> config.without_secrets().password is None
    True
    """

    id: str
    host: str
    username: str
    port: int = 22
    auth_type: AuthType = AuthType.Password
    name: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    private_key_path: str | None = None
    passphrase: str | None = dataclasses.field(default=None, repr=False)

    @property
    def display_name(self) -> str:
        """Return the configured name, or ``user@host``."""
        return self.name or f"{self.username}@{self.host}"

    def without_secrets(self) -> SSHConfig:
        """Return a copy with ``password`` and ``passphrase`` cleared."""
        return dataclasses.replace(self, password=None, passphrase=None)

    def to_dict(self) -> dict[str, t.Any]:
        """Serialize for the persisted connection list, secrets excluded."""
        data: dict[str, t.Any] = {
            "id": self.id,
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "authType": self.auth_type.value,
        }
        if self.name is not None:
            data["name"] = self.name
        if self.private_key_path is not None:
            data["privateKeyPath"] = self.private_key_path
        return data

    @classmethod
    def from_dict(cls, data: t.Mapping[str, t.Any]) -> SSHConfig:
        """Build from a persisted record.

        Raises
        ------
        KeyError
            If ``id``, ``host`` or ``username`` is missing.
        ValueError
            If ``authType`` or ``port`` is not valid.
        """
        return cls(
            id=str(data["id"]),
            host=str(data["host"]),
            username=str(data["username"]),
            port=int(data.get("port", 22)),
            auth_type=AuthType(data.get("authType", AuthType.Password.value)),
            name=data.get("name"),
            private_key_path=data.get("privateKeyPath"),
        )


@dataclasses.dataclass
class Connection:
    """A registered connection, local or SSH."""

    id: str
    kind: ConnectionKind
    display_name: str
    ssh_config: SSHConfig | None = None

    @classmethod
    def local(cls) -> Connection:
        """Return the built-in local connection."""
        return cls(
            id=LOCAL_CONNECTION_ID,
            kind=ConnectionKind.Local,
            display_name=LOCAL_CONNECTION_NAME,
        )

    @classmethod
    def from_ssh_config(cls, config: SSHConfig) -> Connection:
        """Register *config* as an SSH connection, secrets stripped."""
        return cls(
            id=config.id,
            kind=ConnectionKind.SSH,
            display_name=config.display_name,
            ssh_config=config.without_secrets(),
        )

    def to_dict(self) -> dict[str, t.Any]:
        """Serialize for the persisted connection list."""
        data: dict[str, t.Any] = {
            "id": self.id,
            "type": self.kind.value,
            "name": self.display_name,
        }
        if self.ssh_config is not None:
            data["config"] = self.ssh_config.to_dict()
        return data


@dataclasses.dataclass(slots=True)
class TmuxPane:
    """Snapshot of a tmux pane."""

    id: str
    index: int
    active: bool
    current_path: str
    current_command: str
    width: int
    height: int
    window_index: int
    session_name: str
    connection_id: str

    @property
    def target(self) -> str:
        """Pane ids are stable across renames, so they address the pane."""
        return self.id

    @property
    def sequence(self) -> int:
        """Return the numeric suffix of the pane id.

        >>> pane_sequence('%12')
        12
        """
        return pane_sequence(self.id)


@dataclasses.dataclass(slots=True)
class TmuxWindow:
    """Snapshot of a tmux window."""

    id: str
    index: int
    name: str
    active: bool
    session_name: str
    connection_id: str
    panes: list[TmuxPane] = dataclasses.field(default_factory=list)

    @property
    def target(self) -> str:
        """Return ``session:index``, the target tmux uses for windows."""
        return f"{self.session_name}:{self.index}"


@dataclasses.dataclass(slots=True)
class TmuxSession:
    """Snapshot of a tmux session. Sessions are addressed by name."""

    id: str
    name: str
    attached: bool
    window_count: int
    connection_id: str
    created_at: datetime.datetime | None = None
    windows: list[TmuxWindow] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True, slots=True)
class PaneRef:
    """A pane on a given connection, as passed in from a consumer."""

    connection_id: str
    pane_id: str


def pane_sequence(pane_id: str) -> int:
    """Return the trailing number of an opaque pane id such as ``%3``.

    Ids without a trailing number sort first.

    >>> pane_sequence('%3')
    3
    >>> pane_sequence('bogus')
    -1
    """
    match = _TRAILING_DIGITS_RE.search(pane_id)
    if match is None:
        return -1
    return int(match.group(1))
