"""Runtime settings for muxify, read from the environment.

muxify.config
~~~~~~~~~~~~~

=========================== =============================================
Environment variable        Meaning
=========================== =============================================
``MUXIFY_CONFIG_DIR``       Directory holding ``connections.json``
``MUXIFY_COMMAND_TIMEOUT``  Seconds before connect/exec gives up, ``0`` off
``MUXIFY_KEYRING_SERVICE``  Service name secrets are stored under
``MUXIFY_TMUX_CONF``        tmux config file edited by mouse mode toggles
``MUXIFY_STRICT_HOST_KEYS`` ``1``/``true`` rejects unknown SSH host keys
=========================== =============================================
"""

from __future__ import annotations

import dataclasses
import logging
import os
import pathlib

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 30.0
DEFAULT_KEYRING_SERVICE = "muxify"
DEFAULT_TMUX_CONF = "~/.tmux.conf"


def _env_flag(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if not value:
        return None
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    logger.warning("ignoring unrecognized value %r for %s", raw, name)
    return None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring non-numeric value %r for %s", raw, name)
        return default


def default_config_dir() -> pathlib.Path:
    """Return ``$XDG_CONFIG_HOME/muxify``, falling back to ``~/.config``."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = pathlib.Path(xdg) if xdg else pathlib.Path.home() / ".config"
    return base / "muxify"


@dataclasses.dataclass(frozen=True)
class Settings:
    """Settings shared by the registry, executors and tmux service.

    Examples
    --------
    >>> settings = Settings(config_dir=pathlib.Path('/tmp/muxify'))
    >>> settings.connections_path
    PosixPath('/tmp/muxify/connections.json')
    >>> settings.timeout is not None
    True
    >>> Settings(command_timeout=0).timeout is None
    True
    """

    config_dir: pathlib.Path = dataclasses.field(default_factory=default_config_dir)
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    keyring_service: str = DEFAULT_KEYRING_SERVICE
    tmux_conf: str = DEFAULT_TMUX_CONF
    strict_host_keys: bool = False

    @property
    def connections_path(self) -> pathlib.Path:
        """Path of the persisted SSH connection list."""
        return self.config_dir / "connections.json"

    @property
    def timeout(self) -> float | None:
        """Return the command timeout, ``None`` when disabled."""
        if self.command_timeout <= 0:
            return None
        return self.command_timeout

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``MUXIFY_*`` environment variables."""
        config_dir = os.environ.get("MUXIFY_CONFIG_DIR")
        strict = _env_flag("MUXIFY_STRICT_HOST_KEYS")
        return cls(
            config_dir=(
                pathlib.Path(config_dir).expanduser()
                if config_dir
                else default_config_dir()
            ),
            command_timeout=_env_float(
                "MUXIFY_COMMAND_TIMEOUT",
                DEFAULT_COMMAND_TIMEOUT,
            ),
            keyring_service=os.environ.get(
                "MUXIFY_KEYRING_SERVICE",
                DEFAULT_KEYRING_SERVICE,
            ),
            tmux_conf=os.environ.get("MUXIFY_TMUX_CONF", DEFAULT_TMUX_CONF),
            strict_host_keys=bool(strict),
        )
