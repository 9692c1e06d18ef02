"""Result models for tool runs and pipeline outcomes."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ToolResult(BaseModel):
    """Exit code and captured output of one analysis tool invocation."""

    model_config = ConfigDict(frozen=True)

    code: int
    stdout: str = ""
    stderr: str = ""


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"     # Tool ran; its exit code may still report findings
    NO_FILES = "no_files"       # Nothing matched, tool never spawned
    FAILED = "failed"           # Resolution or spawn error
    CANCELLED = "cancelled"     # Tool was stopped before it finished


class PipelineOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    base_branch: str
    compare_branch: str
    files: list[str] = Field(default_factory=list)
    config_path: str | None = None
    tool_result: ToolResult | None = None
    error: str | None = None
    finished_at: datetime = Field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        """True for a completed tool run or a run with nothing to analyse."""
        return self.status in (OutcomeStatus.SUCCEEDED, OutcomeStatus.NO_FILES)

    @property
    def has_findings(self) -> bool:
        return self.tool_result is not None and self.tool_result.code != 0
