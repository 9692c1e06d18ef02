"""Filesystem, environment and git helpers."""

from branch_lint.utils.directory_walker import search
from branch_lint.utils.git_cmd import (
    GitCommandError,
    find_file_in_git,
    get_changed_files,
    get_latest_commit_sha,
    get_merge_base,
    run_git,
)
from branch_lint.utils.python_env import discover_venvs, find_venv, resolve_environment

__all__ = [
    "GitCommandError",
    "discover_venvs",
    "find_file_in_git",
    "find_venv",
    "get_changed_files",
    "get_latest_commit_sha",
    "get_merge_base",
    "resolve_environment",
    "run_git",
    "search",
]
