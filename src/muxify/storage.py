"""Persistence of the non-secret SSH connection list.

muxify.storage
~~~~~~~~~~~~~~

"""

from __future__ import annotations

import json
import logging
import os
import pathlib
import tempfile
import typing as t

from muxify.constants import CONNECTIONS_STORAGE_KEY

logger = logging.getLogger(__name__)

StrPath: t.TypeAlias = "str | os.PathLike[str]"
ConnectionRecord = dict[str, t.Any]


@t.runtime_checkable
class ConnectionStore(t.Protocol):
    """Protocol for stores of persisted connection records."""

    def load(self) -> list[ConnectionRecord]: ...

    def save(self, records: list[ConnectionRecord]) -> None: ...


class JSONConnectionStore(ConnectionStore):
    """Keep connection records in a JSON document on disk.

    The document is an object, records are kept as a list under *key* so the
    file can hold other data next to them.

    Examples
    --------
    >>> store = JSONConnectionStore(tmp_path / 'connections.json')
    >>> store.load()
    []
    >>> store.save([{'id': 'box', 'type': 'ssh'}])
    >>> store.load()
    [{'id': 'box', 'type': 'ssh'}]
    """

    def __init__(self, path: StrPath, key: str = CONNECTIONS_STORAGE_KEY) -> None:
        self.path = pathlib.Path(path)
        self.key = key

    @property
    def backup_path(self) -> pathlib.Path:
        """Where an unreadable document is moved before it is overwritten."""
        return self.path.with_name(f"{self.path.name}.bak")

    def _read_document(self, *, backup: bool = False) -> dict[str, t.Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("%s is not valid JSON, ignoring it: %s", self.path, e)
        else:
            if isinstance(document, dict):
                return document
            logger.warning("%s does not hold a JSON object, ignoring it", self.path)

        if backup:
            self.path.replace(self.backup_path)
            logger.warning("moved unreadable %s to %s", self.path, self.backup_path)
        return {}

    def load(self) -> list[ConnectionRecord]:
        """Return the stored records, skipping any that are not objects."""
        records = self._read_document().get(self.key, [])
        if not isinstance(records, list):
            logger.warning("%s: %s is not a list, ignoring it", self.path, self.key)
            return []

        valid: list[ConnectionRecord] = []
        for record in records:
            if isinstance(record, dict):
                valid.append(record)
            else:
                logger.warning("%s: skipping malformed record %r", self.path, record)
        return valid

    def save(self, records: list[ConnectionRecord]) -> None:
        """Replace the stored records, writing the file atomically.

        A document that cannot be read back is moved to :attr:`backup_path`
        rather than lost.
        """
        document = self._read_document(backup=True)
        document[self.key] = records

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(document, fp, indent=2)
                fp.write("\n")
            pathlib.Path(tmp_name).replace(self.path)
        except BaseException:
            pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("saved %d connection(s) to %s", len(records), self.path)


__all__ = ["ConnectionRecord", "ConnectionStore", "JSONConnectionStore"]
