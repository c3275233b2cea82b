"""Conftest.py (root-level).

Fixtures live at the root so pytest's doctest plugin can use them for the
modules under ``src/`` as well as for ``tests/``.
"""

from __future__ import annotations

import typing as t

import pytest
from _pytest.doctest import DoctestItem

from muxify.config import Settings
from muxify.registry import ConnectionRegistry
from muxify.service import TmuxService
from muxify.testing import (
    MemoryConnectionStore,
    MemoryCredentialStore,
    MockExecutor,
    MockSSHExecutorFactory,
)

if t.TYPE_CHECKING:
    import pathlib
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem):
        doctest_namespace["tmp_path"] = request.getfixturevalue("tmp_path")
        doctest_namespace["request"] = request


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
    """Keep the developer's muxify settings and config home out of tests."""
    for name in (
        "MUXIFY_CONFIG_DIR",
        "MUXIFY_COMMAND_TIMEOUT",
        "MUXIFY_KEYRING_SERVICE",
        "MUXIFY_TMUX_CONF",
        "MUXIFY_STRICT_HOST_KEYS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def settings(tmp_path: pathlib.Path) -> Settings:
    """Return settings pointing at a per-test config directory."""
    return Settings(config_dir=tmp_path / "muxify", command_timeout=5.0)


@pytest.fixture
def credentials() -> MemoryCredentialStore:
    """Return an empty in-memory credential store."""
    return MemoryCredentialStore()


@pytest.fixture
def connection_store() -> MemoryConnectionStore:
    """Return an empty in-memory connection store."""
    return MemoryConnectionStore()


@pytest.fixture
def local_executor() -> MockExecutor:
    """Return the scripted executor serving the local connection."""
    return MockExecutor()


@pytest.fixture
def ssh_factory() -> MockSSHExecutorFactory:
    """Return the scripted SSH executor factory."""
    return MockSSHExecutorFactory()


@pytest.fixture
def registry(
    credentials: MemoryCredentialStore,
    connection_store: MemoryConnectionStore,
    settings: Settings,
    local_executor: MockExecutor,
    ssh_factory: MockSSHExecutorFactory,
) -> Iterator[ConnectionRegistry]:
    """Return a registry wired to in-memory stores and mock executors."""
    registry = ConnectionRegistry(
        credentials=credentials,
        store=connection_store,
        settings=settings,
        ssh_executor_factory=ssh_factory,
        local_executor_factory=lambda: local_executor,
    )
    yield registry
    registry.dispose()


@pytest.fixture
def service(registry: ConnectionRegistry) -> TmuxService:
    """Return a tmux service over the mock registry."""
    return TmuxService(registry)
