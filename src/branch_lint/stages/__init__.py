"""Pipeline stages: branch diff resolution and tool execution."""

from branch_lint.stages.exceptions import (
    SpawnError,
    StageError,
    ToolRunError,
    ToolTimeoutError,
)
from branch_lint.stages.diff_resolver import BranchDiffResolver
from branch_lint.stages.tool_runner import NO_FILES_MESSAGE, ToolRunner

__all__ = [
    "BranchDiffResolver",
    "NO_FILES_MESSAGE",
    "SpawnError",
    "StageError",
    "ToolRunError",
    "ToolRunner",
    "ToolTimeoutError",
]
