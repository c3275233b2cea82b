"""Constant variables for muxify."""

from __future__ import annotations

import enum

#: Fixed id of the built-in local connection
LOCAL_CONNECTION_ID = "local"

#: Display name of the built-in local connection
LOCAL_CONNECTION_NAME = "Local"

#: Key the persisted SSH connection list is stored under
CONNECTIONS_STORAGE_KEY = "muxify.connections"

#: Command run by :meth:`ConnectionRegistry.test_connection`
TEST_COMMAND = 'echo "test"'

#: Exit code reported by :class:`LocalExecutor` when a command times out
TIMEOUT_EXIT_CODE = 124


class ResizeAdjustmentDirection(enum.Enum):
    """Used for *adjustment* in ``resize_pane``."""

    Up = "UP"
    Down = "DOWN"
    Left = "LEFT"
    Right = "RIGHT"


RESIZE_ADJUSTMENT_DIRECTION_FLAG_MAP: dict[ResizeAdjustmentDirection, str] = {
    ResizeAdjustmentDirection.Up: "-U",
    ResizeAdjustmentDirection.Down: "-D",
    ResizeAdjustmentDirection.Left: "-L",
    ResizeAdjustmentDirection.Right: "-R",
}


class SplitDirection(enum.Enum):
    """Used for :meth:`TmuxService.split_pane`."""

    Horizontal = "HORIZONTAL"
    Vertical = "VERTICAL"


SPLIT_DIRECTION_FLAG_MAP: dict[SplitDirection, str] = {
    SplitDirection.Horizontal: "-h",
    SplitDirection.Vertical: "-v",
}
