"""State definition for the LangGraph lint pipeline."""

import operator
from typing import Annotated, TypedDict

from branch_lint.models import OutcomeStatus, ToolResult


class LintState(TypedDict):
    """State for the lint pipeline graph.

    errors accumulates across nodes; every other field is overwritten.
    """

    # Input
    repo_path: str
    base_branch: str
    compare_branch: str

    # Diff resolution
    files: list[str]

    # Environment resolution
    config_path: str | None
    env: dict[str, str] | None

    # Tool run
    tool_result: ToolResult | None
    status: OutcomeStatus | None

    # Error accumulation
    errors: Annotated[list[str], operator.add]


def make_initial_state(
    repo_path: str,
    base_branch: str,
    compare_branch: str,
) -> LintState:
    """Create the initial state for one pipeline run.

    Args:
        repo_path: Absolute path to the repository root.
        base_branch: Branch the comparison branch is measured against.
        compare_branch: Branch whose changes are analysed.
    """
    return {
        "repo_path": repo_path,
        "base_branch": base_branch,
        "compare_branch": compare_branch,
        "files": [],
        "config_path": None,
        "env": None,
        "tool_result": None,
        "status": None,
        "errors": [],
    }
