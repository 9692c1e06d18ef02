"""Exceptions for pipeline stage operations."""


class StageError(Exception):
    """Base exception for all pipeline stage operations."""


class ToolRunError(StageError):
    """Base exception for analysis tool execution."""


class SpawnError(ToolRunError):
    """Raised when the analysis executable cannot be started."""

    def __init__(self, executable: str, os_error: OSError) -> None:
        self.executable = executable
        self.os_error = os_error
        super().__init__(f"Failed to start '{executable}': {os_error}")


class ToolTimeoutError(ToolRunError):
    """Raised when the analysis tool is killed after exceeding its timeout."""

    def __init__(self, executable: str, timeout_seconds: float) -> None:
        self.executable = executable
        self.timeout_seconds = timeout_seconds
        super().__init__(f"'{executable}' timed out after {timeout_seconds}s")
