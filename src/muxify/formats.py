"""Format strings for tmux listings and parsers for their output.

muxify.formats
~~~~~~~~~~~~~~

Listings ask tmux for one line per object with fields joined by
:data:`FORMAT_SEPARATOR`. Lines with fewer fields than required are dropped,
later fields are optional.

>>> windows = parse_windows('@0:0:bash:1\\n@1:1:vim:0', 'local', 'main')
>>> [(w.index, w.name, w.active) for w in windows]
[(0, 'bash', True), (1, 'vim', False)]
"""

from __future__ import annotations

import datetime
import logging

from muxify.models import TmuxPane, TmuxSession, TmuxWindow

logger = logging.getLogger(__name__)

FORMAT_SEPARATOR = ":"

SESSION_FIELDS: tuple[str, ...] = (
    "session_id",
    "session_name",
    "session_attached",
    "session_windows",
    "session_created",
)
SESSION_REQUIRED_FIELDS = 4

WINDOW_FIELDS: tuple[str, ...] = (
    "window_id",
    "window_index",
    "window_name",
    "window_active",
)
WINDOW_REQUIRED_FIELDS = 4
# window names may contain the separator
WINDOW_NAME_POSITION = 2

PANE_FIELDS: tuple[str, ...] = (
    "pane_id",
    "pane_index",
    "pane_active",
    "pane_current_path",
    "pane_current_command",
    "pane_width",
    "pane_height",
)
PANE_REQUIRED_FIELDS = 7
# paths may contain the separator
PANE_PATH_POSITION = 3

DEFAULT_PANE_PATH = "~"


def build_format(fields: tuple[str, ...]) -> str:
    """Return a tmux ``-F`` format string for *fields*.

    >>> build_format(('window_id', 'window_name'))
    '#{window_id}:#{window_name}'
    """
    return FORMAT_SEPARATOR.join(f"#{{{field}}}" for field in fields)


SESSION_FORMAT = build_format(SESSION_FIELDS)
WINDOW_FORMAT = build_format(WINDOW_FIELDS)
PANE_FORMAT = build_format(PANE_FIELDS)


def split_fields(
    line: str,
    count: int,
    variable: int | None = None,
) -> list[str]:
    """Split *line* on the separator.

    When the line has more than *count* fields and *variable* is given, the
    surplus is folded back into the field at position *variable*.

    >>> split_fields('@1:2:a:b:1', 4, variable=2)
    ['@1', '2', 'a:b', '1']
    >>> split_fields('@1:2', 4, variable=2)
    ['@1', '2']
    """
    parts = line.split(FORMAT_SEPARATOR)
    if variable is None or len(parts) <= count:
        return parts
    surplus = len(parts) - count
    end = variable + surplus + 1
    return [
        *parts[:variable],
        FORMAT_SEPARATOR.join(parts[variable:end]),
        *parts[end:],
    ]


def to_int(value: str) -> int:
    """Parse an integer field, 0 if it is not numeric.

    >>> to_int('42'), to_int(''), to_int('x')
    (42, 0, 0)
    """
    try:
        return int(value)
    except ValueError:
        return 0


def to_flag(value: str) -> bool:
    """Return True iff a tmux flag field is exactly ``"1"``."""
    return value == "1"


def to_timestamp(value: str) -> datetime.datetime | None:
    """Convert a tmux epoch field to an aware datetime."""
    if not value:
        return None
    try:
        return datetime.datetime.fromtimestamp(int(value), tz=datetime.timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _lines(output: str) -> list[str]:
    return [line for line in output.split("\n") if line.strip()]


def parse_sessions(output: str, connection_id: str) -> list[TmuxSession]:
    """Parse ``list-sessions`` output formatted with :data:`SESSION_FORMAT`."""
    sessions: list[TmuxSession] = []
    for line in _lines(output):
        parts = split_fields(line, len(SESSION_FIELDS))
        if len(parts) < SESSION_REQUIRED_FIELDS:
            logger.debug("dropping malformed session line %r", line)
            continue
        sessions.append(
            TmuxSession(
                id=parts[0],
                name=parts[1],
                attached=to_flag(parts[2]),
                window_count=to_int(parts[3]),
                connection_id=connection_id,
                created_at=to_timestamp(parts[4]) if len(parts) > 4 else None,
            ),
        )
    return sessions


def parse_windows(
    output: str,
    connection_id: str,
    session_name: str,
) -> list[TmuxWindow]:
    """Parse ``list-windows`` output formatted with :data:`WINDOW_FORMAT`."""
    windows: list[TmuxWindow] = []
    for line in _lines(output):
        parts = split_fields(line, len(WINDOW_FIELDS), variable=WINDOW_NAME_POSITION)
        if len(parts) < WINDOW_REQUIRED_FIELDS:
            logger.debug("dropping malformed window line %r", line)
            continue
        windows.append(
            TmuxWindow(
                id=parts[0],
                index=to_int(parts[1]),
                name=parts[2],
                active=to_flag(parts[3]),
                session_name=session_name,
                connection_id=connection_id,
            ),
        )
    return windows


def parse_panes(
    output: str,
    connection_id: str,
    session_name: str,
    window_index: int,
) -> list[TmuxPane]:
    """Parse ``list-panes`` output formatted with :data:`PANE_FORMAT`."""
    panes: list[TmuxPane] = []
    for line in _lines(output):
        parts = split_fields(line, len(PANE_FIELDS), variable=PANE_PATH_POSITION)
        if len(parts) < PANE_REQUIRED_FIELDS:
            logger.debug("dropping malformed pane line %r", line)
            continue
        panes.append(
            TmuxPane(
                id=parts[0],
                index=to_int(parts[1]),
                active=to_flag(parts[2]),
                current_path=parts[3] or DEFAULT_PANE_PATH,
                current_command=parts[4] or "",
                width=to_int(parts[5]),
                height=to_int(parts[6]),
                window_index=window_index,
                session_name=session_name,
                connection_id=connection_id,
            ),
        )
    return panes
