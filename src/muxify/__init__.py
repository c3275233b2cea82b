"""muxify, manage tmux sessions on local and SSH hosts over one async API."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .config import Settings
from .credentials import KeyringCredentialStore
from .models import (
    AuthType,
    Connection,
    ConnectionKind,
    PaneRef,
    SSHConfig,
    TmuxPane,
    TmuxSession,
    TmuxWindow,
)
from .registry import ConnectionRegistry
from .service import TmuxService
from .storage import JSONConnectionStore

__all__ = (
    "AuthType",
    "Connection",
    "ConnectionKind",
    "ConnectionRegistry",
    "JSONConnectionStore",
    "KeyringCredentialStore",
    "PaneRef",
    "SSHConfig",
    "Settings",
    "TmuxPane",
    "TmuxService",
    "TmuxSession",
    "TmuxWindow",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
)
