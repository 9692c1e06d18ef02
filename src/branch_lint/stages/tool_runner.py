"""Tool Runner: spawns the external analysis tool and captures its output."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from branch_lint.models.config_models import DEFAULT_EXECUTABLE, DEFAULT_REPORT_ARGS
from branch_lint.models.report_models import ToolResult
from branch_lint.stages.exceptions import SpawnError, ToolTimeoutError

logger = logging.getLogger(__name__)

NO_FILES_MESSAGE = "No Python files changed."
ABNORMAL_EXIT_CODE = 1
READ_CHUNK_SIZE = 64 * 1024


async def _drain(stream: asyncio.StreamReader | None, chunks: list[bytes]) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        chunks.append(chunk)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


class ToolRunner:
    """Runs one analysis executable over a list of files.

    Each run() owns its child process and output buffers; a runner
    instance holds configuration only and can be shared.
    """

    def __init__(
        self,
        executable: str = DEFAULT_EXECUTABLE,
        report_args: Sequence[str] = DEFAULT_REPORT_ARGS,
        timeout_seconds: float | None = None,
    ) -> None:
        self.executable = executable
        self.report_args = tuple(report_args)
        self.timeout_seconds = timeout_seconds

    def build_args(
        self,
        files: Sequence[str],
        config_path: str | None = None,
    ) -> list[str]:
        """Report flags, then --rcfile when a config was found, then files."""
        args = list(self.report_args)
        if config_path:
            args.extend(["--rcfile", str(config_path)])
        args.extend(str(f) for f in files)
        return args

    async def run(
        self,
        files: Sequence[str],
        cwd: str | Path,
        config_path: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ToolResult:
        """Run the tool on files and wait for it to exit.

        An empty file list returns a zero-exit result without spawning
        anything. A missing exit code (child killed by a signal) is
        reported as 1.

        Args:
            files: Absolute paths to analyse.
            cwd: Working directory for the child.
            config_path: Tool configuration file, passed as --rcfile.
            env: Complete child environment; inherits ours when None.

        Returns:
            ToolResult with exit code and captured stdout/stderr.

        Raises:
            SpawnError: If the executable cannot be started.
            ToolTimeoutError: If timeout_seconds elapses first; the child
                is killed before this is raised.
        """
        if not files:
            return ToolResult(code=0, stdout=NO_FILES_MESSAGE, stderr="")

        args = self.build_args(files, config_path)
        logger.info("%s arguments: %s", self.executable, " ".join(args))

        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise SpawnError(self.executable, exc) from exc

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []

        async def collect() -> int | None:
            await asyncio.gather(
                _drain(process.stdout, stdout_chunks),
                _drain(process.stderr, stderr_chunks),
            )
            return await process.wait()

        try:
            if self.timeout_seconds is None:
                exit_code = await collect()
            else:
                exit_code = await asyncio.wait_for(collect(), self.timeout_seconds)
        except asyncio.TimeoutError:
            await _kill(process)
            raise ToolTimeoutError(self.executable, self.timeout_seconds) from None
        except asyncio.CancelledError:
            await _kill(process)
            raise

        if exit_code is None or exit_code < 0:
            logger.warning(
                "%s ended without an exit code (%s); reporting %d",
                self.executable,
                exit_code,
                ABNORMAL_EXIT_CODE,
            )
            exit_code = ABNORMAL_EXIT_CODE

        return ToolResult(
            code=exit_code,
            stdout=b"".join(stdout_chunks).decode("utf-8", errors="replace"),
            stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace"),
        )
