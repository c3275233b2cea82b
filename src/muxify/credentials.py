"""Secret storage for SSH passwords and key passphrases.

muxify.credentials
~~~~~~~~~~~~~~~~~~

Secrets are addressed by a key combining the secret kind and the connection
id, so a connection's password and passphrase never collide:

>>> password_key('box')
'ssh.password.box'
>>> passphrase_key('box')
'ssh.passphrase.box'
"""

from __future__ import annotations

import logging
import typing as t

import keyring
import keyring.errors

from muxify.config import DEFAULT_KEYRING_SERVICE

logger = logging.getLogger(__name__)

PASSWORD_PREFIX = "ssh.password."
PASSPHRASE_PREFIX = "ssh.passphrase."


def password_key(connection_id: str) -> str:
    """Return the credential key of a connection's password."""
    return f"{PASSWORD_PREFIX}{connection_id}"


def passphrase_key(connection_id: str) -> str:
    """Return the credential key of a connection's key passphrase."""
    return f"{PASSPHRASE_PREFIX}{connection_id}"


@t.runtime_checkable
class CredentialStore(t.Protocol):
    """Protocol for secret stores."""

    def store(self, key: str, value: str) -> None: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...


class KeyringCredentialStore(CredentialStore):
    """Store secrets in the system keyring.

    Every secret is saved under one keyring *service*, with the credential key
    as the keyring username.
    """

    def __init__(self, service: str = DEFAULT_KEYRING_SERVICE) -> None:
        self.service = service

    def store(self, key: str, value: str) -> None:
        """Save *value* under *key*, replacing any previous value."""
        keyring.set_password(self.service, key, value)
        logger.debug("stored secret %s in keyring service %s", key, self.service)

    def get(self, key: str) -> str | None:
        """Return the secret stored under *key*, if any."""
        return keyring.get_password(self.service, key)

    def delete(self, key: str) -> None:
        """Delete the secret stored under *key*. Absent keys are ignored."""
        try:
            keyring.delete_password(self.service, key)
        except keyring.errors.PasswordDeleteError:
            logger.debug("no secret %s to delete", key)


__all__ = [
    "CredentialStore",
    "KeyringCredentialStore",
    "passphrase_key",
    "password_key",
]
