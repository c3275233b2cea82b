"""Tests for muxify.service against scripted executors."""

from __future__ import annotations

import typing as t

import pytest

from muxify import exc
from muxify.constants import ResizeAdjustmentDirection
from muxify.formats import PANE_FORMAT, SESSION_FORMAT, WINDOW_FORMAT
from muxify.models import PaneRef, SSHConfig
from muxify.service import TmuxService, order_pane_ids, order_window_indices
from muxify.testing import MockExecutor, MockSSHExecutorFactory, error, result

if t.TYPE_CHECKING:
    from muxify.registry import ConnectionRegistry

LIST_SESSIONS = f"tmux list-sessions -F '{SESSION_FORMAT}' 2>/dev/null"


def list_windows(session: str) -> str:
    return f"tmux list-windows -t {session} -F '{WINDOW_FORMAT}' 2>/dev/null"


def list_panes(target: str) -> str:
    return f"tmux list-panes -t {target} -F '{PANE_FORMAT}' 2>/dev/null"


# ============================================================================
# Queries
# ============================================================================


class AvailabilityFixture(t.NamedTuple):
    """Fixture for tmux availability checks."""

    test_id: str
    response: t.Any
    expected: bool


AVAILABILITY_FIXTURES: list[AvailabilityFixture] = [
    AvailabilityFixture(
        test_id="installed",
        response=result(stdout="/usr/bin/tmux"),
        expected=True,
    ),
    AvailabilityFixture(
        test_id="missing",
        response=result(returncode=1),
        expected=False,
    ),
    AvailabilityFixture(
        test_id="empty_output",
        response=result(),
        expected=False,
    ),
    AvailabilityFixture(
        test_id="transport_error",
        response=exc.ConnectionUnreachable("reset"),
        expected=False,
    ),
    AvailabilityFixture(
        test_id="unexpected_os_error",
        response=OSError(5, "Input/output error"),
        expected=False,
    ),
]


@pytest.mark.parametrize(
    list(AvailabilityFixture._fields),
    AVAILABILITY_FIXTURES,
    ids=[test.test_id for test in AVAILABILITY_FIXTURES],
)
@pytest.mark.asyncio
async def test_is_available(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    response: t.Any,
    expected: bool,
) -> None:
    """tmux is available only if ``command -v`` prints a path."""
    local_executor.script["command -v tmux"] = response
    assert await service.is_available("local") is expected


@pytest.mark.asyncio
async def test_is_available_unknown_connection(service: TmuxService) -> None:
    """Unknown connections report tmux as unavailable."""
    assert await service.is_available("nope") is False


@pytest.mark.asyncio
async def test_list_sessions(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Sessions are listed with the session format and stderr discarded."""
    local_executor.script[LIST_SESSIONS] = result(
        stdout="$0:main:1:2:1700000000\n$1:work:0:1:1700000100",
    )

    sessions = await service.list_sessions("local")

    assert local_executor.commands == [LIST_SESSIONS]
    assert [(s.name, s.attached, s.window_count) for s in sessions] == [
        ("main", True, 2),
        ("work", False, 1),
    ]


class EmptyListingFixture(t.NamedTuple):
    """Fixture for listings that yield nothing."""

    test_id: str
    response: t.Any


EMPTY_LISTING_FIXTURES: list[EmptyListingFixture] = [
    EmptyListingFixture(
        test_id="no_server_running",
        response=result(returncode=1),
    ),
    EmptyListingFixture(test_id="empty_output", response=result()),
    EmptyListingFixture(
        test_id="non_zero_with_output",
        response=result(stdout="$0:main:1:2", returncode=1),
    ),
]


@pytest.mark.parametrize(
    list(EmptyListingFixture._fields),
    EMPTY_LISTING_FIXTURES,
    ids=[test.test_id for test in EMPTY_LISTING_FIXTURES],
)
@pytest.mark.asyncio
async def test_listings_empty(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    response: t.Any,
) -> None:
    """Listings return empty lists instead of raising."""
    local_executor.responder = lambda command: response

    assert await service.list_sessions("local") == []
    assert await service.list_windows("local", "main") == []
    assert await service.list_panes("local", "main", 0) == []


@pytest.mark.asyncio
async def test_listing_unknown_connection(service: TmuxService) -> None:
    """Registry errors propagate through listings."""
    with pytest.raises(exc.ConnectionNotFound):
        await service.list_sessions("nope")


@pytest.mark.asyncio
async def test_list_windows_and_panes(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Windows target the session, panes target ``session:index``."""
    local_executor.script[list_windows("main")] = result(
        stdout="@0:0:bash:1\n@1:1:vim:0",
    )
    local_executor.script[list_panes("main:1")] = result(
        stdout="%2:0:1:/srv:vim:80:24",
    )

    windows = await service.list_windows("local", "main")
    panes = await service.list_panes("local", "main", 1)

    assert [(w.index, w.name, w.active) for w in windows] == [
        (0, "bash", True),
        (1, "vim", False),
    ]
    (pane,) = panes
    assert (pane.id, pane.window_index, pane.session_name) == ("%2", 1, "main")


@pytest.mark.asyncio
async def test_get_tree(service: TmuxService, local_executor: MockExecutor) -> None:
    """The tree nests windows in sessions and panes in windows."""
    local_executor.script.update(
        {
            LIST_SESSIONS: result(stdout="$0:main:1:2\n$1:work:0:1"),
            list_windows("main"): result(stdout="@0:0:bash:1\n@1:1:vim:0"),
            list_windows("work"): result(stdout="@2:3:logs:1"),
            list_panes("main:0"): result(stdout="%0:0:1:/:bash:80:24"),
            list_panes("main:1"): result(
                stdout="%1:0:1:/:vim:40:24\n%3:1:0:/:zsh:40:24",
            ),
            list_panes("work:3"): result(stdout="%2:0:1:/var/log:tail:80:24"),
        },
    )

    tree = await service.get_tree("local")

    shape = {
        session.name: {
            window.index: [pane.id for pane in window.panes]
            for window in session.windows
        }
        for session in tree
    }
    assert shape == {
        "main": {0: ["%0"], 1: ["%1", "%3"]},
        "work": {3: ["%2"]},
    }


@pytest.mark.asyncio
async def test_get_tree_without_server(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """No running server means an empty tree."""
    local_executor.script[LIST_SESSIONS] = result(returncode=1)
    assert await service.get_tree("local") == []
    assert local_executor.commands == [LIST_SESSIONS]


def test_get_attach_command(service: TmuxService) -> None:
    """Attach commands quote the session name."""
    assert service.get_attach_command("main") == "tmux attach-session -t main"
    assert service.get_attach_command("my app") == "tmux attach-session -t 'my app'"


# ============================================================================
# Mutations
# ============================================================================


class MutationFixture(t.NamedTuple):
    """Fixture for single-command tmux mutations."""

    test_id: str
    method: str
    args: tuple[t.Any, ...]
    expected_command: str
    expected_error: type[exc.TmuxOperationError]
    expected_message: str


MUTATION_FIXTURES: list[MutationFixture] = [
    MutationFixture(
        test_id="kill_session",
        method="kill_session",
        args=("main",),
        expected_command="tmux kill-session -t main",
        expected_error=exc.SessionError,
        expected_message="Failed to kill session",
    ),
    MutationFixture(
        test_id="rename_session",
        method="rename_session",
        args=("main", "my app"),
        expected_command="tmux rename-session -t main 'my app'",
        expected_error=exc.SessionError,
        expected_message="Failed to rename session",
    ),
    MutationFixture(
        test_id="create_window_named",
        method="create_window",
        args=("main", "logs"),
        expected_command="tmux new-window -t main -n logs",
        expected_error=exc.WindowError,
        expected_message="Failed to create window",
    ),
    MutationFixture(
        test_id="create_window_unnamed",
        method="create_window",
        args=("main",),
        expected_command="tmux new-window -t main",
        expected_error=exc.WindowError,
        expected_message="Failed to create window",
    ),
    MutationFixture(
        test_id="kill_window",
        method="kill_window",
        args=("main", 2),
        expected_command="tmux kill-window -t main:2",
        expected_error=exc.WindowError,
        expected_message="Failed to kill window",
    ),
    MutationFixture(
        test_id="rename_window",
        method="rename_window",
        args=("main", 2, "editor"),
        expected_command="tmux rename-window -t main:2 editor",
        expected_error=exc.WindowError,
        expected_message="Failed to rename window",
    ),
    MutationFixture(
        test_id="select_window",
        method="select_window",
        args=("main", 2),
        expected_command="tmux select-window -t main:2",
        expected_error=exc.WindowError,
        expected_message="Failed to select window",
    ),
    MutationFixture(
        test_id="split_pane_horizontal",
        method="split_pane_horizontal",
        args=("%1",),
        expected_command="tmux split-window -h -t %1",
        expected_error=exc.PaneError,
        expected_message="Failed to split pane horizontally",
    ),
    MutationFixture(
        test_id="split_pane_vertical_window_target",
        method="split_pane_vertical",
        args=("main:0",),
        expected_command="tmux split-window -v -t main:0",
        expected_error=exc.PaneError,
        expected_message="Failed to split pane vertically",
    ),
    MutationFixture(
        test_id="kill_pane",
        method="kill_pane",
        args=("%4",),
        expected_command="tmux kill-pane -t %4",
        expected_error=exc.PaneError,
        expected_message="Failed to kill pane",
    ),
    MutationFixture(
        test_id="select_pane",
        method="select_pane",
        args=("%4",),
        expected_command="tmux select-pane -t %4",
        expected_error=exc.PaneError,
        expected_message="Failed to select pane",
    ),
    MutationFixture(
        test_id="swap_pane",
        method="swap_pane",
        args=("%1", "%2"),
        expected_command="tmux swap-pane -s %1 -t %2",
        expected_error=exc.PaneError,
        expected_message="Failed to swap pane",
    ),
    MutationFixture(
        test_id="resize_pane_adjustment",
        method="resize_pane",
        args=("%1", ResizeAdjustmentDirection.Up, 5),
        expected_command="tmux resize-pane -t %1 -U 5",
        expected_error=exc.PaneError,
        expected_message="Failed to resize pane",
    ),
    MutationFixture(
        test_id="resize_pane_right",
        method="resize_pane",
        args=("%1", ResizeAdjustmentDirection.Right, 10),
        expected_command="tmux resize-pane -t %1 -R 10",
        expected_error=exc.PaneError,
        expected_message="Failed to resize pane",
    ),
]


@pytest.mark.parametrize(
    list(MutationFixture._fields),
    MUTATION_FIXTURES,
    ids=[test.test_id for test in MUTATION_FIXTURES],
)
@pytest.mark.asyncio
async def test_mutation_command(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    method: str,
    args: tuple[t.Any, ...],
    expected_command: str,
    expected_error: type[exc.TmuxOperationError],
    expected_message: str,
) -> None:
    """Each mutation issues exactly one quoted tmux command."""
    await getattr(service, method)("local", *args)
    assert local_executor.commands == [expected_command]


@pytest.mark.parametrize(
    list(MutationFixture._fields),
    MUTATION_FIXTURES,
    ids=[test.test_id for test in MUTATION_FIXTURES],
)
@pytest.mark.asyncio
async def test_mutation_error_carries_stderr(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    method: str,
    args: tuple[t.Any, ...],
    expected_command: str,
    expected_error: type[exc.TmuxOperationError],
    expected_message: str,
) -> None:
    """A non-zero exit raises the operation's error with tmux's stderr."""
    local_executor.script[expected_command] = error(stderr="can't find pane: %9")

    with pytest.raises(expected_error, match="can't find pane: %9") as excinfo:
        await getattr(service, method)("local", *args)

    assert excinfo.value.stderr == "can't find pane: %9"


@pytest.mark.parametrize(
    list(MutationFixture._fields),
    MUTATION_FIXTURES,
    ids=[test.test_id for test in MUTATION_FIXTURES],
)
@pytest.mark.asyncio
async def test_mutation_error_generic_message(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    method: str,
    args: tuple[t.Any, ...],
    expected_command: str,
    expected_error: type[exc.TmuxOperationError],
    expected_message: str,
) -> None:
    """Without stderr the error names the failed operation."""
    local_executor.script[expected_command] = error(stderr="")

    with pytest.raises(expected_error) as excinfo:
        await getattr(service, method)("local", *args)

    assert str(excinfo.value) == expected_message


@pytest.mark.asyncio
async def test_select_pane_ref(
    service: TmuxService,
    registry: ConnectionRegistry,
    ssh_factory: MockSSHExecutorFactory,
) -> None:
    """A pane reference selects the pane on its own connection."""
    remote = MockExecutor()
    ssh_factory.executors["box"] = remote
    await registry.add_connection(
        SSHConfig(id="box", host="example.org", username="me"),
    )

    await service.select_pane_ref(PaneRef(connection_id="box", pane_id="%7"))

    assert remote.commands == ["tmux select-pane -t %7"]


class ResizeFixture(t.NamedTuple):
    """Fixture for absolute and zoom resizes."""

    test_id: str
    kwargs: dict[str, t.Any]
    expected_command: str


RESIZE_FIXTURES: list[ResizeFixture] = [
    ResizeFixture(
        test_id="height_cells",
        kwargs={"height": 20},
        expected_command="tmux resize-pane -t %1 -y 20",
    ),
    ResizeFixture(
        test_id="width_percent",
        kwargs={"width": "30%"},
        expected_command="tmux resize-pane -t %1 -x 30%",
    ),
    ResizeFixture(
        test_id="height_and_width",
        kwargs={"height": "10", "width": 80},
        expected_command="tmux resize-pane -t %1 -y 10 -x 80",
    ),
    ResizeFixture(
        test_id="zoom",
        kwargs={"zoom": True},
        expected_command="tmux resize-pane -t %1 -Z",
    ),
]


@pytest.mark.parametrize(
    list(ResizeFixture._fields),
    RESIZE_FIXTURES,
    ids=[test.test_id for test in RESIZE_FIXTURES],
)
@pytest.mark.asyncio
async def test_resize_pane_absolute(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    kwargs: dict[str, t.Any],
    expected_command: str,
) -> None:
    """Absolute sizes accept cells or percentages."""
    await service.resize_pane("local", "%1", **kwargs)
    assert local_executor.commands == [expected_command]


@pytest.mark.asyncio
async def test_resize_pane_validation(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Invalid arguments raise before any command is issued."""
    with pytest.raises(exc.PaneAdjustmentDirectionRequiresAdjustment):
        await service.resize_pane("local", "%1", ResizeAdjustmentDirection.Left)
    with pytest.raises(exc.RequiresDigitOrPercentage):
        await service.resize_pane("local", "%1", height="tall")
    with pytest.raises(ValueError):
        await service.resize_pane("local", "%1", width="%")

    assert local_executor.commands == []


# ============================================================================
# Sessions
# ============================================================================


@pytest.mark.asyncio
async def test_create_session_named(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """A named session is looked up by name in the refreshed listing."""
    local_executor.script[LIST_SESSIONS] = result(
        stdout="$0:main:1:1\n$1:my app:0:1\n$2:zzz:0:1",
    )

    session = await service.create_session("local", "my app")

    assert local_executor.commands == [
        "tmux new-session -d -s 'my app'",
        LIST_SESSIONS,
    ]
    assert session is not None
    assert session.id == "$1"


@pytest.mark.asyncio
async def test_create_session_unnamed(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Without a name the last listed session is returned."""
    local_executor.script[LIST_SESSIONS] = result(stdout="$0:main:1:1\n$3:4:0:1")

    session = await service.create_session("local")

    assert local_executor.commands[0] == "tmux new-session -d"
    assert session is not None
    assert session.name == "4"


@pytest.mark.asyncio
async def test_create_session_missing_from_listing(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """A named session absent from the listing yields None."""
    local_executor.script[LIST_SESSIONS] = result(stdout="$0:main:1:1")
    assert await service.create_session("local", "work") is None


@pytest.mark.asyncio
async def test_create_session_error(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """tmux refusing the session raises SessionError with its stderr."""
    local_executor.script["tmux new-session -d -s main"] = error(
        stderr="duplicate session: main",
    )

    with pytest.raises(exc.SessionError, match="duplicate session: main"):
        await service.create_session("local", "main")

    assert local_executor.commands == ["tmux new-session -d -s main"]


# ============================================================================
# Batches
# ============================================================================


class OrderFixture(t.NamedTuple):
    """Fixture for batch kill ordering."""

    test_id: str
    given: list[t.Any]
    expected: list[t.Any]


WINDOW_ORDER_FIXTURES: list[OrderFixture] = [
    OrderFixture(test_id="ascending", given=[0, 1, 2], expected=[2, 1, 0]),
    OrderFixture(test_id="shuffled", given=[3, 10, 1], expected=[10, 3, 1]),
    OrderFixture(test_id="duplicates", given=[2, 2, 1], expected=[2, 1]),
    OrderFixture(test_id="empty", given=[], expected=[]),
]

PANE_ORDER_FIXTURES: list[OrderFixture] = [
    OrderFixture(
        test_id="shuffled",
        given=["%3", "%1", "%2"],
        expected=["%3", "%2", "%1"],
    ),
    OrderFixture(
        test_id="numeric_not_lexical",
        given=["%9", "%10", "%2"],
        expected=["%10", "%9", "%2"],
    ),
    OrderFixture(test_id="duplicates", given=["%1", "%1"], expected=["%1"]),
]


@pytest.mark.parametrize(
    list(OrderFixture._fields),
    WINDOW_ORDER_FIXTURES,
    ids=[test.test_id for test in WINDOW_ORDER_FIXTURES],
)
def test_order_window_indices(
    test_id: str,
    given: list[int],
    expected: list[int],
) -> None:
    """Windows are killed highest index first."""
    assert order_window_indices(given) == expected


@pytest.mark.parametrize(
    list(OrderFixture._fields),
    PANE_ORDER_FIXTURES,
    ids=[test.test_id for test in PANE_ORDER_FIXTURES],
)
def test_order_pane_ids(test_id: str, given: list[str], expected: list[str]) -> None:
    """Panes are killed by descending numeric id suffix."""
    assert order_pane_ids(given) == expected


@pytest.mark.asyncio
async def test_kill_panes_order(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """One kill-pane per pane, highest suffix first."""
    await service.kill_panes("local", ["%3", "%1", "%2"])

    assert local_executor.commands == [
        "tmux kill-pane -t %3",
        "tmux kill-pane -t %2",
        "tmux kill-pane -t %1",
    ]


@pytest.mark.asyncio
async def test_kill_windows_order(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Windows are killed from the highest index down."""
    await service.kill_windows("local", "main", [0, 2, 1])

    assert local_executor.commands == [
        "tmux kill-window -t main:2",
        "tmux kill-window -t main:1",
        "tmux kill-window -t main:0",
    ]


@pytest.mark.asyncio
async def test_kill_panes_stops_at_first_failure(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """A failed kill aborts the rest of the batch."""
    local_executor.script["tmux kill-pane -t %2"] = error(stderr="can't find pane: %2")

    with pytest.raises(exc.PaneError):
        await service.kill_panes("local", ["%1", "%2", "%3"])

    assert local_executor.commands == [
        "tmux kill-pane -t %3",
        "tmux kill-pane -t %2",
    ]


@pytest.mark.asyncio
async def test_kill_sessions_keeps_order(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Sessions are killed in the given order."""
    await service.kill_sessions("local", ["b", "a", "c"])

    assert local_executor.commands == [
        "tmux kill-session -t b",
        "tmux kill-session -t a",
        "tmux kill-session -t c",
    ]


# ============================================================================
# Mouse mode
# ============================================================================

MOUSE_CHECK = (
    "grep -q '^set.*-g.*mouse.*on' ~/.tmux.conf 2>/dev/null"
    " && echo exists || echo not_exists"
)
MOUSE_APPEND = "echo 'set -g mouse on' >> ~/.tmux.conf"
MOUSE_SOURCE = "tmux source-file ~/.tmux.conf 2>/dev/null || true"
MOUSE_ON = "tmux set-option -g mouse on 2>/dev/null || true"
MOUSE_OFF = "tmux set-option -g mouse off 2>/dev/null || true"
MOUSE_REMOVE = "sed -i '/^set.*-g.*mouse.*on/d' ~/.tmux.conf 2>/dev/null || true"


class MouseStateFixture(t.NamedTuple):
    """Fixture for ``show-options -g mouse`` output."""

    test_id: str
    response: t.Any
    expected: bool


MOUSE_STATE_FIXTURES: list[MouseStateFixture] = [
    MouseStateFixture(test_id="on", response=result(stdout="mouse on"), expected=True),
    MouseStateFixture(
        test_id="off",
        response=result(stdout="mouse off"),
        expected=False,
    ),
    MouseStateFixture(
        test_id="no_server",
        response=result(returncode=1),
        expected=False,
    ),
]


@pytest.mark.parametrize(
    list(MouseStateFixture._fields),
    MOUSE_STATE_FIXTURES,
    ids=[test.test_id for test in MOUSE_STATE_FIXTURES],
)
@pytest.mark.asyncio
async def test_is_mouse_mode_enabled(
    service: TmuxService,
    local_executor: MockExecutor,
    test_id: str,
    response: t.Any,
    expected: bool,
) -> None:
    """Mouse mode is on only when tmux reports ``on``."""
    local_executor.script["tmux show-options -g mouse 2>/dev/null"] = response
    assert await service.is_mouse_mode_enabled("local") is expected


@pytest.mark.asyncio
async def test_enable_mouse_mode_appends_once(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """The config line is appended only when missing."""
    local_executor.script[MOUSE_CHECK] = result(stdout="not_exists")

    await service.enable_mouse_mode("local")

    assert local_executor.commands == [
        MOUSE_CHECK,
        MOUSE_APPEND,
        MOUSE_SOURCE,
        MOUSE_ON,
    ]

    local_executor.commands.clear()
    local_executor.script[MOUSE_CHECK] = result(stdout="exists")

    await service.enable_mouse_mode("local")

    assert MOUSE_APPEND not in local_executor.commands
    assert local_executor.commands == [MOUSE_CHECK, MOUSE_SOURCE, MOUSE_ON]


@pytest.mark.asyncio
async def test_enable_mouse_mode_append_failure(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """A config that cannot be written raises MouseModeError."""
    local_executor.script[MOUSE_CHECK] = result(stdout="not_exists")
    local_executor.script[MOUSE_APPEND] = error(stderr="Permission denied")

    with pytest.raises(exc.MouseModeError, match="Permission denied"):
        await service.enable_mouse_mode("local")

    assert MOUSE_ON not in local_executor.commands


@pytest.mark.asyncio
async def test_enable_mouse_mode_best_effort_reload(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Reload and live-option failures do not raise."""
    local_executor.script[MOUSE_CHECK] = result(stdout="exists")
    local_executor.script[MOUSE_SOURCE] = error()
    local_executor.script[MOUSE_ON] = error()

    await service.enable_mouse_mode("local")


@pytest.mark.asyncio
async def test_disable_mouse_mode(
    service: TmuxService,
    local_executor: MockExecutor,
) -> None:
    """Disabling removes the config line and turns the option off."""
    local_executor.script[MOUSE_REMOVE] = error()

    await service.disable_mouse_mode("local")

    assert local_executor.commands == [MOUSE_REMOVE, MOUSE_OFF]


@pytest.mark.asyncio
async def test_mouse_mode_custom_conf(
    registry: ConnectionRegistry,
    local_executor: MockExecutor,
) -> None:
    """Config paths are quoted while ``~/`` keeps expanding."""
    service = TmuxService(registry, tmux_conf="~/my conf/tmux.conf")

    await service.disable_mouse_mode("local")

    assert local_executor.commands[0] == (
        "sed -i '/^set.*-g.*mouse.*on/d' ~/'my conf/tmux.conf' 2>/dev/null || true"
    )
