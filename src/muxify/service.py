"""Query and mutate tmux state on any registered connection.

muxify.service
~~~~~~~~~~~~~~

:class:`TmuxService` turns tmux operations into shell commands, runs them
through :class:`muxify.registry.ConnectionRegistry` and parses the output into
:mod:`muxify.models` records.

Listings redirect tmux's stderr to ``/dev/null``: when no tmux server is
running they return empty lists instead of raising. Mutations raise a
:exc:`muxify.exc.TmuxOperationError` subclass when tmux exits non-zero.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import typing as t

from muxify import exc
from muxify.constants import (
    RESIZE_ADJUSTMENT_DIRECTION_FLAG_MAP,
    SPLIT_DIRECTION_FLAG_MAP,
    ResizeAdjustmentDirection,
    SplitDirection,
)
from muxify.formats import (
    PANE_FORMAT,
    SESSION_FORMAT,
    WINDOW_FORMAT,
    parse_panes,
    parse_sessions,
    parse_windows,
)
from muxify.models import pane_sequence

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from muxify.executors import CommandResult
    from muxify.models import PaneRef, TmuxPane, TmuxSession, TmuxWindow
    from muxify.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

#: Command used by :meth:`TmuxService.is_available`
LOCATE_TMUX_COMMAND = "command -v tmux"

MOUSE_ON_LINE = "set -g mouse on"
MOUSE_ON_PATTERN = "^set.*-g.*mouse.*on"

_DISCARD_STDERR = " 2>/dev/null"
_IGNORE_FAILURE = " 2>/dev/null || true"


def order_window_indices(indices: Iterable[int]) -> list[int]:
    """Return window indices in the order they can be killed safely.

    tmux renumbers the windows after a killed one, so the highest index goes
    first. Duplicates are dropped.

    >>> order_window_indices([1, 3, 2, 3])
    [3, 2, 1]
    """
    return sorted(set(indices), reverse=True)


def order_pane_ids(pane_ids: Iterable[str]) -> list[str]:
    """Return pane ids by descending numeric suffix.

    >>> order_pane_ids(['%3', '%1', '%2'])
    ['%3', '%2', '%1']
    """
    return sorted(dict.fromkeys(pane_ids), key=pane_sequence, reverse=True)


def shell_path(path: str) -> str:
    """Quote *path* for the shell while keeping a leading ``~/`` expandable.

    >>> shell_path('~/.tmux.conf')
    '~/.tmux.conf'
    >>> shell_path('~/my conf')
    "~/'my conf'"
    >>> shell_path('/etc/tmux.conf')
    '/etc/tmux.conf'
    """
    if path == "~":
        return path
    if path.startswith("~/"):
        return "~/" + shlex.quote(path[2:])
    return shlex.quote(path)


class TmuxService:
    """tmux operations addressed by connection id.

    Parameters
    ----------
    registry : :class:`muxify.registry.ConnectionRegistry`
        Supplies the executor of each connection.
    tmux_bin : str
        tmux executable on the target, looked up on its ``PATH`` by default.
    tmux_conf : str, optional
        tmux config file edited by the mouse mode toggles. Defaults to
        ``registry.settings.tmux_conf``.

    Examples
    --------
    >>> from muxify.testing import MockExecutor, make_registry, result
    >>> executor = MockExecutor(script={
    ...     "tmux list-sessions -F '#{session_id}:#{session_name}:"
    ...     "#{session_attached}:#{session_windows}:#{session_created}' 2>/dev/null":
    ...         result(stdout='$0:main:1:2:1700000000'),
    ... })
    >>> service = TmuxService(make_registry(local=executor))
    >>> [(s.name, s.attached, s.window_count) for s in
    ...  asyncio.run(service.list_sessions('local'))]
    [('main', True, 2)]
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        tmux_bin: str = "tmux",
        tmux_conf: str | None = None,
    ) -> None:
        self.registry = registry
        self.tmux_bin = tmux_bin
        self.tmux_conf = (
            tmux_conf if tmux_conf is not None else registry.settings.tmux_conf
        )

    def build_command(self, *args: str | int, discard_stderr: bool = False) -> str:
        """Return the shell command running tmux with *args*.

        >>> from muxify.testing import make_registry
        >>> TmuxService(make_registry()).build_command('kill-session', '-t', 'my app')
        "tmux kill-session -t 'my app'"
        """
        command = shlex.join([self.tmux_bin, *(str(a) for a in args)])
        if discard_stderr:
            command += _DISCARD_STDERR
        return command

    async def _run(
        self,
        connection_id: str,
        *args: str | int,
        discard_stderr: bool = False,
    ) -> CommandResult:
        command = self.build_command(*args, discard_stderr=discard_stderr)
        logger.debug("[%s] %s", connection_id, command)
        return await self.registry.execute(connection_id, command)

    async def _mutate(
        self,
        connection_id: str,
        error: type[exc.TmuxOperationError],
        operation: str,
        *args: str | int,
    ) -> CommandResult:
        result = await self._run(connection_id, *args)
        if result.returncode != 0:
            logger.warning(
                "[%s] %s failed (%s): %s",
                connection_id,
                operation,
                result.returncode,
                result.stderr,
            )
            raise error(operation, result.stderr)
        return result

    """
    Queries
    """

    async def is_available(self, connection_id: str) -> bool:
        """Return True if a tmux binary is installed on the connection."""
        try:
            result = await self.registry.execute(connection_id, LOCATE_TMUX_COMMAND)
        except Exception:
            logger.info("tmux lookup failed for %s", connection_id, exc_info=True)
            return False
        return result.returncode == 0 and bool(result.stdout)

    async def list_sessions(self, connection_id: str) -> list[TmuxSession]:
        """Return the sessions of the connection's tmux server.

        Returns an empty list if no server is running.
        """
        result = await self._run(
            connection_id,
            "list-sessions",
            "-F",
            SESSION_FORMAT,
            discard_stderr=True,
        )
        if result.returncode != 0 or not result.stdout:
            return []
        return parse_sessions(result.stdout, connection_id)

    async def list_windows(
        self,
        connection_id: str,
        session_name: str,
    ) -> list[TmuxWindow]:
        """Return the windows of session *session_name*."""
        result = await self._run(
            connection_id,
            "list-windows",
            "-t",
            session_name,
            "-F",
            WINDOW_FORMAT,
            discard_stderr=True,
        )
        if result.returncode != 0 or not result.stdout:
            return []
        return parse_windows(result.stdout, connection_id, session_name)

    async def list_panes(
        self,
        connection_id: str,
        session_name: str,
        window_index: int,
    ) -> list[TmuxPane]:
        """Return the panes of window ``session_name:window_index``."""
        result = await self._run(
            connection_id,
            "list-panes",
            "-t",
            f"{session_name}:{window_index}",
            "-F",
            PANE_FORMAT,
            discard_stderr=True,
        )
        if result.returncode != 0 or not result.stdout:
            return []
        return parse_panes(result.stdout, connection_id, session_name, window_index)

    async def get_tree(self, connection_id: str) -> list[TmuxSession]:
        """Return all sessions with their windows and panes filled in.

        Panes are listed by window index, which is how ``list-panes`` targets
        windows. Sessions, and the windows within a session, are fetched
        concurrently.
        """
        sessions = await self.list_sessions(connection_id)

        async def fill(session: TmuxSession) -> None:
            session.windows = await self.list_windows(connection_id, session.name)
            panes = await asyncio.gather(
                *(
                    self.list_panes(connection_id, session.name, window.index)
                    for window in session.windows
                ),
            )
            for window, window_panes in zip(session.windows, panes, strict=True):
                window.panes = window_panes

        await asyncio.gather(*(fill(session) for session in sessions))
        return sessions

    def get_attach_command(self, session_name: str) -> str:
        """Return the shell command attaching a terminal to *session_name*.

        >>> from muxify.testing import make_registry
        >>> TmuxService(make_registry()).get_attach_command('main')
        'tmux attach-session -t main'
        """
        return self.build_command("attach-session", "-t", session_name)

    """
    Sessions
    """

    async def create_session(
        self,
        connection_id: str,
        name: str | None = None,
    ) -> TmuxSession | None:
        """Create a detached session and return it.

        Without *name* tmux picks one, and the last listed session is
        returned. With *name*, returns the session of that name, or None if
        the refreshed listing does not contain it.
        """
        args: list[str] = ["new-session", "-d"]
        if name:
            args += ["-s", name]
        await self._mutate(connection_id, exc.SessionError, "create session", *args)

        sessions = await self.list_sessions(connection_id)
        if name:
            return next((s for s in sessions if s.name == name), None)
        return sessions[-1] if sessions else None

    async def kill_session(self, connection_id: str, session_name: str) -> None:
        """Kill session *session_name*."""
        await self._mutate(
            connection_id,
            exc.SessionError,
            "kill session",
            "kill-session",
            "-t",
            session_name,
        )

    async def kill_sessions(
        self,
        connection_id: str,
        session_names: Iterable[str],
    ) -> None:
        """Kill several sessions in the given order.

        Sessions are addressed by name, which tmux never reassigns, so order
        does not matter.
        """
        for session_name in dict.fromkeys(session_names):
            await self.kill_session(connection_id, session_name)

    async def rename_session(
        self,
        connection_id: str,
        old_name: str,
        new_name: str,
    ) -> None:
        """Rename session *old_name* to *new_name*."""
        await self._mutate(
            connection_id,
            exc.SessionError,
            "rename session",
            "rename-session",
            "-t",
            old_name,
            new_name,
        )

    """
    Windows
    """

    async def create_window(
        self,
        connection_id: str,
        session_name: str,
        window_name: str | None = None,
    ) -> None:
        """Create a window in session *session_name*."""
        args: list[str] = ["new-window", "-t", session_name]
        if window_name:
            args += ["-n", window_name]
        await self._mutate(connection_id, exc.WindowError, "create window", *args)

    async def kill_window(
        self,
        connection_id: str,
        session_name: str,
        window_index: int,
    ) -> None:
        """Kill window ``session_name:window_index``."""
        await self._mutate(
            connection_id,
            exc.WindowError,
            "kill window",
            "kill-window",
            "-t",
            f"{session_name}:{window_index}",
        )

    async def kill_windows(
        self,
        connection_id: str,
        session_name: str,
        window_indices: Iterable[int],
    ) -> None:
        """Kill several windows of one session, highest index first.

        Stops at the first failure; windows above it are already gone.
        """
        for window_index in order_window_indices(window_indices):
            await self.kill_window(connection_id, session_name, window_index)

    async def rename_window(
        self,
        connection_id: str,
        session_name: str,
        window_index: int,
        new_name: str,
    ) -> None:
        """Rename window ``session_name:window_index``."""
        await self._mutate(
            connection_id,
            exc.WindowError,
            "rename window",
            "rename-window",
            "-t",
            f"{session_name}:{window_index}",
            new_name,
        )

    async def select_window(
        self,
        connection_id: str,
        session_name: str,
        window_index: int,
    ) -> None:
        """Make window ``session_name:window_index`` the active one."""
        await self._mutate(
            connection_id,
            exc.WindowError,
            "select window",
            "select-window",
            "-t",
            f"{session_name}:{window_index}",
        )

    """
    Panes
    """

    async def split_pane(
        self,
        connection_id: str,
        target: str,
        direction: SplitDirection,
    ) -> None:
        """Split *target*, a pane id or a ``session:index`` window target."""
        if direction is SplitDirection.Horizontal:
            operation = "split pane horizontally"
        else:
            operation = "split pane vertically"
        await self._mutate(
            connection_id,
            exc.PaneError,
            operation,
            "split-window",
            SPLIT_DIRECTION_FLAG_MAP[direction],
            "-t",
            target,
        )

    async def split_pane_horizontal(self, connection_id: str, target: str) -> None:
        """Split *target* into left and right panes."""
        await self.split_pane(connection_id, target, SplitDirection.Horizontal)

    async def split_pane_vertical(self, connection_id: str, target: str) -> None:
        """Split *target* into top and bottom panes."""
        await self.split_pane(connection_id, target, SplitDirection.Vertical)

    async def kill_pane(self, connection_id: str, pane_id: str) -> None:
        """Kill pane *pane_id*."""
        await self._mutate(
            connection_id,
            exc.PaneError,
            "kill pane",
            "kill-pane",
            "-t",
            pane_id,
        )

    async def kill_panes(self, connection_id: str, pane_ids: Iterable[str]) -> None:
        """Kill several panes, highest id suffix first.

        Stops at the first failure.
        """
        for pane_id in order_pane_ids(pane_ids):
            await self.kill_pane(connection_id, pane_id)

    async def select_pane(self, connection_id: str, pane_id: str) -> None:
        """Make pane *pane_id* the active one."""
        await self._mutate(
            connection_id,
            exc.PaneError,
            "select pane",
            "select-pane",
            "-t",
            pane_id,
        )

    async def select_pane_ref(self, ref: PaneRef) -> None:
        """Select the pane a consumer refers to."""
        await self.select_pane(ref.connection_id, ref.pane_id)

    async def swap_pane(
        self,
        connection_id: str,
        source_pane_id: str,
        target_pane_id: str,
    ) -> None:
        """Swap the positions of two panes."""
        await self._mutate(
            connection_id,
            exc.PaneError,
            "swap pane",
            "swap-pane",
            "-s",
            source_pane_id,
            "-t",
            target_pane_id,
        )

    async def resize_pane(
        self,
        connection_id: str,
        pane_id: str,
        adjustment_direction: ResizeAdjustmentDirection | None = None,
        adjustment: int | None = None,
        *,
        height: str | int | None = None,
        width: str | int | None = None,
        zoom: bool = False,
    ) -> None:
        """Resize pane *pane_id*.

        Three types of resizing are available:

        1. Adjustments: ``adjustment_direction`` and ``adjustment``.
        2. Manual resizing: ``height`` and / or ``width``, in cells or
           percent such as ``"30%"``.
        3. Zoom toggle: ``zoom``.

        Raises
        ------
        :exc:`exc.PaneAdjustmentDirectionRequiresAdjustment`,
        :exc:`exc.RequiresDigitOrPercentage`,
        :exc:`exc.PaneError`
        """
        tmux_args: tuple[str, ...] = ()

        if adjustment_direction:
            if adjustment is None:
                raise exc.PaneAdjustmentDirectionRequiresAdjustment
            tmux_args += (
                RESIZE_ADJUSTMENT_DIRECTION_FLAG_MAP[adjustment_direction],
                str(adjustment),
            )
        elif height or width:
            for flag, size in (("-y", height), ("-x", width)):
                if not size:
                    continue
                if (
                    isinstance(size, str)
                    and not size.isdigit()
                    and not (size.endswith("%") and size[:-1].isdigit())
                ):
                    raise exc.RequiresDigitOrPercentage
                tmux_args += (flag, str(size))
        elif zoom:
            tmux_args += ("-Z",)

        await self._mutate(
            connection_id,
            exc.PaneError,
            "resize pane",
            "resize-pane",
            "-t",
            pane_id,
            *tmux_args,
        )

    """
    Options
    """

    async def is_mouse_mode_enabled(self, connection_id: str) -> bool:
        """Return True if the global ``mouse`` option is on."""
        result = await self._run(
            connection_id,
            "show-options",
            "-g",
            "mouse",
            discard_stderr=True,
        )
        return result.stdout.split() == ["mouse", "on"]

    async def enable_mouse_mode(self, connection_id: str) -> None:
        """Turn mouse mode on, persistently and in the running server.

        ``set -g mouse on`` is appended to the tmux config unless a matching
        line is already there. Reloading the config and setting the live
        option are best effort.

        Raises
        ------
        :exc:`exc.MouseModeError`
            The config line could not be appended.
        """
        conf = shell_path(self.tmux_conf)
        check = await self.registry.execute(
            connection_id,
            f"grep -q {shlex.quote(MOUSE_ON_PATTERN)} {conf}{_DISCARD_STDERR}"
            " && echo exists || echo not_exists",
        )
        if check.stdout.strip() == "not_exists":
            append = await self.registry.execute(
                connection_id,
                f"echo {shlex.quote(MOUSE_ON_LINE)} >> {conf}",
            )
            if append.returncode != 0:
                raise exc.MouseModeError("add mouse setting to config", append.stderr)

        await self.registry.execute(
            connection_id,
            f"{self.build_command('source-file')} {conf}{_IGNORE_FAILURE}",
        )
        await self.registry.execute(
            connection_id,
            self.build_command("set-option", "-g", "mouse", "on") + _IGNORE_FAILURE,
        )
        logger.info("[%s] mouse mode enabled", connection_id)

    async def disable_mouse_mode(self, connection_id: str) -> None:
        """Turn mouse mode off, persistently and in the running server.

        Both steps are best effort.
        """
        conf = shell_path(self.tmux_conf)
        await self.registry.execute(
            connection_id,
            f"sed -i {shlex.quote(f'/{MOUSE_ON_PATTERN}/d')} {conf}{_IGNORE_FAILURE}",
        )
        await self.registry.execute(
            connection_id,
            self.build_command("set-option", "-g", "mouse", "off") + _IGNORE_FAILURE,
        )
        logger.info("[%s] mouse mode disabled", connection_id)


__all__ = [
    "TmuxService",
    "order_pane_ids",
    "order_window_indices",
    "shell_path",
]
