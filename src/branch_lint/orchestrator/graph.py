"""LangGraph orchestrator for the diff-scoped lint pipeline.

Wires BranchDiffResolver, config lookup, environment resolution and
ToolRunner into a StateGraph:

  START -> diff_node -> {no_files_node, env_node, fail_node}
  env_node -> {run_node, fail_node}
  run_node -> {END, fail_node}
"""

import logging
from pathlib import Path
from typing import Callable

from langgraph.graph import END, START, StateGraph

from branch_lint.models import BranchRef, LintConfig, OutcomeStatus, PipelineOutcome
from branch_lint.orchestrator.exceptions import GraphBuildError
from branch_lint.orchestrator.state import LintState, make_initial_state
from branch_lint.stages.diff_resolver import BranchDiffResolver
from branch_lint.stages.exceptions import ToolTimeoutError
from branch_lint.stages.tool_runner import ToolRunner
from branch_lint.utils.git_cmd import GitCommandError, find_file_in_git
from branch_lint.utils.python_env import resolve_environment

logger = logging.getLogger(__name__)


def _branch_name(branch: BranchRef | str) -> str:
    return branch.name if isinstance(branch, BranchRef) else branch


def _comparison(state: LintState) -> str:
    return f"{state['base_branch']}...{state['compare_branch']}"


async def locate_config_file(repo_path: str, file_name: str | None) -> str | None:
    """First tracked file matching file_name, or None.

    Lookup failures are logged and treated as "no config file".
    """
    if not file_name:
        return None
    try:
        matches = await find_file_in_git(repo_path, file_name)
    except (GitCommandError, OSError) as exc:
        logger.warning("Config lookup for %s failed: %s", file_name, exc)
        return None
    return matches[0] if matches else None


def make_diff_node(
    resolver: BranchDiffResolver, extension: str
) -> Callable[[LintState], dict]:
    """Factory: returns a node that resolves changed files between the branches.

    On error: returns {"errors": [str], "status": FAILED}
    """

    async def diff_node(state: LintState) -> dict:
        logger.info("Resolving changed files for %s", _comparison(state))
        try:
            files = await resolver.changed_files(
                state["repo_path"],
                state["base_branch"],
                state["compare_branch"],
                extension=extension,
            )
            return {"files": files}
        except Exception as exc:
            return {
                "errors": [f"diff_node error: {exc}"],
                "status": OutcomeStatus.FAILED,
            }

    return diff_node


def no_files_node(state: LintState) -> dict:
    logger.info("No %s files to analyse", _comparison(state))
    return {"status": OutcomeStatus.NO_FILES}


def make_env_node(config: LintConfig) -> Callable[[LintState], dict]:
    """Factory: returns a node that locates the config file and builds the env.

    The config file is optional. Environment resolution starts from the
    repository root and applies config.extra_env last.

    On error: returns {"errors": [str], "status": FAILED}
    """

    async def env_node(state: LintState) -> dict:
        try:
            config_path = await locate_config_file(
                state["repo_path"], config.config_file_name
            )
            env = resolve_environment(state["repo_path"], config.extra_env)
            return {"config_path": config_path, "env": env}
        except Exception as exc:
            return {
                "errors": [f"env_node error: {exc}"],
                "status": OutcomeStatus.FAILED,
            }

    return env_node


def make_run_node(runner: ToolRunner) -> Callable[[LintState], dict]:
    """Factory: returns a node that runs the analysis tool.

    Any exit code from the tool counts as SUCCEEDED. A timeout yields
    CANCELLED; spawn and other errors yield FAILED.
    """

    async def run_node(state: LintState) -> dict:
        try:
            result = await runner.run(
                state["files"],
                cwd=state["repo_path"],
                config_path=state["config_path"],
                env=state["env"],
            )
            return {"tool_result": result, "status": OutcomeStatus.SUCCEEDED}
        except ToolTimeoutError as exc:
            logger.warning("Analysis of %s cancelled: %s", _comparison(state), exc)
            return {
                "errors": [f"run_node cancelled: {exc}"],
                "status": OutcomeStatus.CANCELLED,
            }
        except Exception as exc:
            return {
                "errors": [f"run_node error: {exc}"],
                "status": OutcomeStatus.FAILED,
            }

    return run_node


def fail_node(state: LintState) -> dict:
    errors = state.get("errors", [])
    logger.error(
        "Failed to run analysis on branch comparison %s: %s",
        _comparison(state),
        errors[-1] if errors else "unknown error",
    )
    return {"status": OutcomeStatus.FAILED}


def route_after_diff(state: LintState) -> str:
    if state.get("errors"):
        return "fail"
    if not state.get("files"):
        return "no_files"
    return "resolve_env"


def route_after_env(state: LintState) -> str:
    return "fail" if state.get("errors") else "run"


def route_after_run(state: LintState) -> str:
    if state.get("status") in (OutcomeStatus.SUCCEEDED, OutcomeStatus.CANCELLED):
        return "done"
    return "fail"


def build_graph(
    resolver: BranchDiffResolver,
    runner: ToolRunner,
    config: LintConfig,
):
    """Build and compile the pipeline StateGraph.

    Args:
        resolver: Branch diff resolver instance.
        runner: Tool runner instance.
        config: Pipeline configuration (extension, config file, extra env).

    Returns:
        CompiledStateGraph ready to ainvoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(LintState)

        graph.add_node("diff_node", make_diff_node(resolver, config.extension))
        graph.add_node("no_files_node", no_files_node)
        graph.add_node("env_node", make_env_node(config))
        graph.add_node("run_node", make_run_node(runner))
        graph.add_node("fail_node", fail_node)

        graph.add_edge(START, "diff_node")
        graph.add_conditional_edges(
            "diff_node",
            route_after_diff,
            {
                "no_files": "no_files_node",
                "resolve_env": "env_node",
                "fail": "fail_node",
            },
        )
        graph.add_conditional_edges(
            "env_node",
            route_after_env,
            {"run": "run_node", "fail": "fail_node"},
        )
        graph.add_conditional_edges(
            "run_node",
            route_after_run,
            {"done": END, "fail": "fail_node"},
        )
        graph.add_edge("no_files_node", END)
        graph.add_edge("fail_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build pipeline graph: {exc}") from exc


def outcome_from_state(state: LintState) -> PipelineOutcome:
    """Convert a final graph state into a PipelineOutcome."""
    errors = state.get("errors", [])
    status = state.get("status") or OutcomeStatus.FAILED
    return PipelineOutcome(
        status=status,
        base_branch=state["base_branch"],
        compare_branch=state["compare_branch"],
        files=list(state.get("files", [])),
        config_path=state.get("config_path"),
        tool_result=state.get("tool_result"),
        error=errors[-1] if errors else None,
    )


def _make_stages(
    config: LintConfig,
    resolver: BranchDiffResolver | None,
    runner: ToolRunner | None,
) -> tuple[BranchDiffResolver, ToolRunner]:
    if resolver is None:
        resolver = BranchDiffResolver(extension=config.extension)
    if runner is None:
        runner = ToolRunner(
            executable=config.executable,
            report_args=config.report_args,
            timeout_seconds=config.timeout_seconds,
        )
    return resolver, runner


async def run_analysis(
    repo_path: str | Path,
    base: BranchRef | str,
    compare: BranchRef | str,
    config: LintConfig | None = None,
    *,
    resolver: BranchDiffResolver | None = None,
    runner: ToolRunner | None = None,
) -> PipelineOutcome:
    """Run the analysis tool on files compare changed since leaving base.

    Args:
        repo_path: Repository working tree root.
        base: Base branch.
        compare: Branch whose changes are analysed.
        config: Pipeline configuration; defaults to LintConfig().
        resolver: Optional resolver override.
        runner: Optional runner override.

    Returns:
        PipelineOutcome; tool findings are SUCCEEDED with a non-zero code.

    Raises:
        GraphBuildError: If the pipeline graph cannot be built.
    """
    config = config or LintConfig()
    resolver, runner = _make_stages(config, resolver, runner)
    graph = build_graph(resolver, runner, config)

    state = make_initial_state(
        repo_path=str(Path(repo_path).resolve()),
        base_branch=_branch_name(base),
        compare_branch=_branch_name(compare),
    )
    final_state = await graph.ainvoke(state)
    return outcome_from_state(final_state)


async def preview_changed_files(
    repo_path: str | Path,
    base: BranchRef | str,
    compare: BranchRef | str,
    config: LintConfig | None = None,
    *,
    resolver: BranchDiffResolver | None = None,
) -> list[str]:
    """Files run_analysis would hand to the tool, without running it."""
    config = config or LintConfig()
    if resolver is None:
        resolver = BranchDiffResolver(extension=config.extension)
    return await resolver.changed_files(
        str(Path(repo_path).resolve()),
        _branch_name(base),
        _branch_name(compare),
        extension=config.extension,
    )
