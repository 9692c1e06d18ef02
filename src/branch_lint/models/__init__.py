"""Data models for branch-lint."""

from branch_lint.models.config_models import ConfigError, LintConfig
from branch_lint.models.diff_models import BranchRef, ChangeKind, ChangeSet, FileChange
from branch_lint.models.report_models import OutcomeStatus, PipelineOutcome, ToolResult

__all__ = [
    "BranchRef",
    "ChangeKind",
    "ChangeSet",
    "ConfigError",
    "FileChange",
    "LintConfig",
    "OutcomeStatus",
    "PipelineOutcome",
    "ToolResult",
]
