"""LangGraph orchestrator package for the lint pipeline."""

from branch_lint.orchestrator.exceptions import GraphBuildError, OrchestratorError
from branch_lint.orchestrator.graph import build_graph, preview_changed_files, run_analysis
from branch_lint.orchestrator.state import LintState, make_initial_state

__all__ = [
    "GraphBuildError",
    "LintState",
    "OrchestratorError",
    "build_graph",
    "make_initial_state",
    "preview_changed_files",
    "run_analysis",
]
