"""Provide exceptions used by muxify.

muxify.exc
~~~~~~~~~~

Exceptions fall in three families:

- connection errors, raised by the registry and the executors when a
  transport cannot be created or used;
- :exc:`TmuxOperationError` and its subclasses, raised by
  :class:`muxify.service.TmuxService` when a mutating tmux command exits
  non-zero;
- argument errors, which are also :exc:`ValueError`.

A tmux command exiting non-zero is *not* an exception at the executor level,
see :class:`muxify.executors.CommandResult`.
"""

from __future__ import annotations


class MuxifyError(Exception):
    """Root exception for muxify."""


class MuxifyConnectionError(MuxifyError):
    """Base exception for connection and transport errors."""


class ConnectionNotFound(MuxifyConnectionError):
    """Raised if no connection is registered under the requested id."""

    def __init__(self, connection_id: str, *args: object) -> None:
        super().__init__(f"Connection not found: {connection_id}")
        self.connection_id = connection_id


class CannotRemoveLocalConnection(MuxifyConnectionError):
    """Raised on an attempt to remove the built-in local connection."""

    def __init__(self, *args: object) -> None:
        super().__init__("Cannot remove the local connection")


class PrivateKeyUnreadable(MuxifyConnectionError):
    """Raised if a configured private key file cannot be read."""

    def __init__(self, path: str | None, *args: object) -> None:
        super().__init__(f"Cannot read private key: {path}")
        self.path = path


class AuthenticationFailed(MuxifyConnectionError):
    """Raised if the remote host rejects the supplied credentials."""


class ConnectionUnreachable(MuxifyConnectionError):
    """Raised if the remote host cannot be reached or the transport drops."""


class OperationTimeout(MuxifyError):
    """Raised when an operation exceeds the configured timeout."""


class TmuxOperationError(MuxifyError):
    """Raised when a mutating tmux command exits non-zero.

    The message is tmux's captured stderr, or ``Failed to <operation>`` when
    tmux printed nothing.
    """

    def __init__(self, operation: str, stderr: str = "", *args: object) -> None:
        message = stderr or f"Failed to {operation}"
        super().__init__(message)
        self.operation = operation
        self.stderr = stderr


class SessionError(TmuxOperationError):
    """Any type of session related error."""


class WindowError(TmuxOperationError):
    """Any type of window related error."""


class PaneError(TmuxOperationError):
    """Any type of pane related error."""


class MouseModeError(TmuxOperationError):
    """Raised if the mouse setting cannot be written to the tmux config."""


class AdjustmentDirectionRequiresAdjustment(MuxifyError, ValueError):
    """If *adjustment_direction* is set, *adjustment* must be set."""

    def __init__(self) -> None:
        super().__init__("adjustment_direction requires adjustment")


class PaneAdjustmentDirectionRequiresAdjustment(
    AdjustmentDirectionRequiresAdjustment,
):
    """ValueError for :meth:`muxify.service.TmuxService.resize_pane`."""


class RequiresDigitOrPercentage(MuxifyError, ValueError):
    """Requires digit (int or str digit) or a percentage."""

    def __init__(self) -> None:
        super().__init__("Requires digit (int or str digit) or a percentage.")


__all__ = sorted(
    {
        "AdjustmentDirectionRequiresAdjustment",
        "AuthenticationFailed",
        "CannotRemoveLocalConnection",
        "ConnectionNotFound",
        "ConnectionUnreachable",
        "MouseModeError",
        "MuxifyConnectionError",
        "MuxifyError",
        "OperationTimeout",
        "PaneAdjustmentDirectionRequiresAdjustment",
        "PaneError",
        "PrivateKeyUnreadable",
        "RequiresDigitOrPercentage",
        "SessionError",
        "TmuxOperationError",
        "WindowError",
    }
)
