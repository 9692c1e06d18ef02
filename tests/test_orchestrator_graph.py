"""Unit tests for individual orchestrator graph nodes and routing."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from branch_lint.models import LintConfig, OutcomeStatus, ToolResult
from branch_lint.orchestrator.exceptions import GraphBuildError
from branch_lint.orchestrator.graph import (
    build_graph,
    fail_node,
    locate_config_file,
    make_diff_node,
    make_env_node,
    make_run_node,
    no_files_node,
    outcome_from_state,
    route_after_diff,
    route_after_env,
    route_after_run,
)
from branch_lint.orchestrator.state import make_initial_state
from branch_lint.stages.exceptions import SpawnError, ToolTimeoutError
from branch_lint.utils.git_cmd import GitCommandError


def _state(**overrides):
    state = make_initial_state("/tmp/repo", "main", "feature")
    state.update(overrides)
    return state


# ---------------------------------------------------------------------------
# diff_node
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_diff_node_returns_files():
    resolver = MagicMock()
    resolver.changed_files = AsyncMock(return_value=["/tmp/repo/a.py"])
    node = make_diff_node(resolver, ".py")

    update = await node(_state())

    assert update == {"files": ["/tmp/repo/a.py"]}
    resolver.changed_files.assert_awaited_once_with(
        "/tmp/repo", "main", "feature", extension=".py"
    )


@pytest.mark.asyncio
async def test_diff_node_error_marks_failed():
    resolver = MagicMock()
    resolver.changed_files = AsyncMock(side_effect=RuntimeError("disk gone"))
    node = make_diff_node(resolver, ".py")

    update = await node(_state())

    assert update["status"] == OutcomeStatus.FAILED
    assert "disk gone" in update["errors"][0]


# ---------------------------------------------------------------------------
# env_node
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_env_node_locates_config_and_merges_extra_env():
    config = LintConfig(extra_env={"PYLINTHOME": "/cache"})
    node = make_env_node(config)
    with patch(
        "branch_lint.orchestrator.graph.find_file_in_git",
        new=AsyncMock(return_value=["/tmp/repo/.pylintrc", "/tmp/repo/sub/.pylintrc"]),
    ), patch(
        "branch_lint.orchestrator.graph.resolve_environment",
        return_value={"PATH": "/bin", "PYLINTHOME": "/cache"},
    ) as mock_resolve:
        update = await node(_state(files=["/tmp/repo/a.py"]))

    assert update["config_path"] == "/tmp/repo/.pylintrc"
    assert update["env"] == {"PATH": "/bin", "PYLINTHOME": "/cache"}
    mock_resolve.assert_called_once_with("/tmp/repo", {"PYLINTHOME": "/cache"})


@pytest.mark.asyncio
async def test_locate_config_file_failure_is_not_fatal():
    with patch(
        "branch_lint.orchestrator.graph.find_file_in_git",
        new=AsyncMock(side_effect=GitCommandError(["ls-files"], 128, "not a repo")),
    ):
        assert await locate_config_file("/tmp/repo", ".pylintrc") is None


@pytest.mark.asyncio
async def test_locate_config_file_disabled_skips_lookup():
    with patch(
        "branch_lint.orchestrator.graph.find_file_in_git", new=AsyncMock()
    ) as mock_find:
        assert await locate_config_file("/tmp/repo", None) is None
    mock_find.assert_not_awaited()


@pytest.mark.asyncio
async def test_env_node_environment_error_marks_failed():
    node = make_env_node(LintConfig(config_file_name=None))
    with patch(
        "branch_lint.orchestrator.graph.resolve_environment",
        side_effect=PermissionError("denied"),
    ):
        update = await node(_state(files=["/tmp/repo/a.py"]))
    assert update["status"] == OutcomeStatus.FAILED
    assert "denied" in update["errors"][0]


# ---------------------------------------------------------------------------
# run_node
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_node_nonzero_exit_is_succeeded():
    runner = MagicMock()
    runner.run = AsyncMock(return_value=ToolResult(code=2, stdout="findings"))
    node = make_run_node(runner)

    update = await node(
        _state(files=["/tmp/repo/a.py"], config_path="/tmp/repo/.pylintrc", env={"A": "1"})
    )

    assert update["status"] == OutcomeStatus.SUCCEEDED
    assert update["tool_result"].code == 2
    runner.run.assert_awaited_once_with(
        ["/tmp/repo/a.py"],
        cwd="/tmp/repo",
        config_path="/tmp/repo/.pylintrc",
        env={"A": "1"},
    )


@pytest.mark.asyncio
async def test_run_node_spawn_error_marks_failed():
    runner = MagicMock()
    runner.run = AsyncMock(side_effect=SpawnError("pylint", FileNotFoundError("pylint")))
    update = await make_run_node(runner)(_state(files=["a.py"]))
    assert update["status"] == OutcomeStatus.FAILED
    assert "pylint" in update["errors"][0]


@pytest.mark.asyncio
async def test_run_node_timeout_marks_cancelled():
    runner = MagicMock()
    runner.run = AsyncMock(side_effect=ToolTimeoutError("pylint", 5))
    update = await make_run_node(runner)(_state(files=["a.py"]))
    assert update["status"] == OutcomeStatus.CANCELLED


# ---------------------------------------------------------------------------
# Terminal nodes and routing
# ---------------------------------------------------------------------------


def test_no_files_node_sets_status():
    assert no_files_node(_state()) == {"status": OutcomeStatus.NO_FILES}


def test_fail_node_logs_branch_context(caplog):
    with caplog.at_level("ERROR", logger="branch_lint.orchestrator.graph"):
        update = fail_node(_state(errors=["run_node error: boom"]))
    assert update == {"status": OutcomeStatus.FAILED}
    assert "main...feature" in caplog.text
    assert "boom" in caplog.text


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"errors": ["x"]}, "fail"),
        ({"files": []}, "no_files"),
        ({"files": ["/tmp/repo/a.py"]}, "resolve_env"),
    ],
)
def test_route_after_diff(overrides, expected):
    assert route_after_diff(_state(**overrides)) == expected


def test_route_after_env():
    assert route_after_env(_state()) == "run"
    assert route_after_env(_state(errors=["x"])) == "fail"


@pytest.mark.parametrize(
    "status, expected",
    [
        (OutcomeStatus.SUCCEEDED, "done"),
        (OutcomeStatus.CANCELLED, "done"),
        (OutcomeStatus.FAILED, "fail"),
    ],
)
def test_route_after_run(status, expected):
    assert route_after_run(_state(status=status)) == expected


def test_outcome_from_state_uses_last_error():
    outcome = outcome_from_state(
        _state(status=OutcomeStatus.FAILED, errors=["first", "second"])
    )
    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.error == "second"
    assert outcome.base_branch == "main"


def test_outcome_from_state_without_status_is_failed():
    assert outcome_from_state(_state()).status == OutcomeStatus.FAILED


# ---------------------------------------------------------------------------
# build_graph
# ---------------------------------------------------------------------------


def test_build_graph_compiles():
    graph = build_graph(MagicMock(), MagicMock(), LintConfig())
    assert hasattr(graph, "ainvoke")


def test_build_graph_wraps_errors():
    with patch(
        "branch_lint.orchestrator.graph.StateGraph", side_effect=RuntimeError("bad")
    ):
        with pytest.raises(GraphBuildError):
            build_graph(MagicMock(), MagicMock(), LintConfig())
