"""Compose child-process environments for a Python virtual environment."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from branch_lint.utils.directory_walker import search

logger = logging.getLogger(__name__)

# Checked in this order, directly under the base directory
VENV_DIR_NAMES = ("venv", ".venv")
PATH_VAR = "PATH"
VIRTUAL_ENV_VAR = "VIRTUAL_ENV"


def _is_windows(platform: str | None) -> bool:
    return (platform or os.name) in ("nt", "win32", "windows")


def find_venv(base_dir: str | Path) -> str | None:
    """Return the first of base_dir/venv, base_dir/.venv that is a directory."""
    base = Path(base_dir).resolve()
    for name in VENV_DIR_NAMES:
        candidate = base / name
        if candidate.is_dir():
            return str(candidate)
    return None


def discover_venvs(base_dir: str | Path) -> list[str]:
    """List every venv/.venv directory anywhere under base_dir."""
    return search(base_dir, VENV_DIR_NAMES)


def venv_bin_dir(venv_dir: str | Path, platform: str | None = None) -> str:
    """Executables directory of a venv: Scripts on Windows, bin elsewhere."""
    subdir = "Scripts" if _is_windows(platform) else "bin"
    return str(Path(venv_dir) / subdir)


def resolve_environment(
    base_dir: str | Path,
    extra_vars: Mapping[str, str] | None = None,
    *,
    ambient: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> dict[str, str]:
    """Build the environment for a tool run inside base_dir.

    Starts from a copy of the ambient environment. When base_dir holds a
    venv, its executables directory is prepended to PATH and VIRTUAL_ENV
    points at it. extra_vars are applied last and win over both.

    The ambient mapping (os.environ by default) is never modified.

    Args:
        base_dir: Directory whose direct children are checked for a venv.
        extra_vars: Variables to force into the result.
        ambient: Environment to start from; defaults to os.environ.
        platform: os.name-style platform override ("nt" or "posix").

    Returns:
        A new dict suitable as the full environment of a child process.
    """
    env = dict(os.environ if ambient is None else ambient)

    venv_dir = find_venv(base_dir)
    if venv_dir is not None:
        bin_dir = venv_bin_dir(venv_dir, platform)
        separator = ";" if _is_windows(platform) else ":"
        inherited = env.get(PATH_VAR, "")
        env[PATH_VAR] = f"{bin_dir}{separator}{inherited}" if inherited else bin_dir
        env[VIRTUAL_ENV_VAR] = venv_dir
        logger.debug("Using virtual environment %s", venv_dir)
    else:
        logger.debug("No virtual environment found under %s", base_dir)

    if extra_vars:
        env.update(extra_vars)

    return env
