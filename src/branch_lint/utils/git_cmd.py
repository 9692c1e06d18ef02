"""Async wrappers around the git queries the pipeline needs."""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from branch_lint.models.diff_models import ChangeKind, FileChange

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"


class GitCommandError(Exception):
    """Raised when a git query cannot run or exits with an unexpected status."""

    def __init__(self, args: list[str], exit_code: int | None, stderr: str = "") -> None:
        self.git_args = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(f"git {' '.join(args)} failed ({exit_code}): {detail}")


class GitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: str
    stderr: str


async def run_git(
    args: list[str],
    cwd: str | Path,
    *,
    expected_codes: Iterable[int] = (0,),
) -> GitResult:
    """Run git with args in cwd and collect its output.

    Raises:
        GitCommandError: If git cannot be started or exits with a code
            outside expected_codes.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            GIT_EXECUTABLE,
            *args,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise GitCommandError(args, None, str(exc)) from exc

    stdout, stderr = await process.communicate()
    result = GitResult(
        exit_code=process.returncode if process.returncode is not None else 1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if result.exit_code not in set(expected_codes):
        raise GitCommandError(args, result.exit_code, result.stderr)
    return result


async def find_file_in_git(repo_path: str | Path, file_name: str) -> list[str]:
    """Absolute paths of tracked files whose path contains file_name."""
    result = await run_git(["ls-files", "-z", f"*{file_name}*"], repo_path)
    return [
        str(Path(repo_path) / relative)
        for relative in result.stdout.split("\0")
        if relative
    ]


async def get_latest_commit_sha(repo_path: str | Path, branch: str) -> str | None:
    """Tip commit of branch, or None if it does not resolve to a commit."""
    result = await run_git(
        ["rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}"],
        repo_path,
        expected_codes=(0, 1, 128),
    )
    sha = result.stdout.strip()
    if result.exit_code != 0 or not sha:
        return None
    return sha


async def get_merge_base(repo_path: str | Path, first: str, second: str) -> str | None:
    """Best common ancestor of two commits, or None for unrelated histories."""
    result = await run_git(
        ["merge-base", first, second],
        repo_path,
        expected_codes=(0, 1),
    )
    sha = result.stdout.strip()
    if result.exit_code != 0 or not sha:
        return None
    return sha


def parse_name_status(output: str) -> list[FileChange]:
    """Parse `git diff --name-status -z` output, keeping git's order.

    Each record is STATUS NUL PATH NUL, except renames and copies which
    carry STATUS NUL OLD_PATH NUL NEW_PATH NUL.
    """
    fields = output.split("\0")
    changes: list[FileChange] = []
    index = 0
    while index < len(fields):
        status = fields[index]
        if not status:
            index += 1
            continue
        kind = ChangeKind.from_status(status)
        if kind in (ChangeKind.RENAMED, ChangeKind.COPIED):
            if index + 2 >= len(fields):
                break
            old_path, new_path = fields[index + 1], fields[index + 2]
            changes.append(FileChange(path=new_path, kind=kind, old_path=old_path))
            index += 3
        else:
            if index + 1 >= len(fields):
                break
            changes.append(FileChange(path=fields[index + 1], kind=kind))
            index += 2
    return changes


async def get_changed_files(
    repo_path: str | Path,
    from_sha: str,
    to_sha: str,
) -> list[FileChange]:
    """File changes between two commits, rename-aware."""
    result = await run_git(
        ["diff", "--name-status", "-z", "-M", "--no-color", from_sha, to_sha, "--"],
        repo_path,
    )
    return parse_name_status(result.stdout)
