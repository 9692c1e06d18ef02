"""Depth-first search for directories by name."""

import os
from collections.abc import Iterable
from pathlib import Path


def _list_subdirs(directory: Path) -> list[Path]:
    with os.scandir(directory) as entries:
        names = sorted(
            entry.name for entry in entries if entry.is_dir(follow_symlinks=False)
        )
    return [directory / name for name in names]


def search(root: str | Path, names: Iterable[str]) -> list[str]:
    """Find every directory under root whose name is in names.

    Matching directories are still descended into, so nested matches are
    reported too. Results are absolute paths in pre-order: a directory
    comes before anything beneath it, siblings in sorted order.

    Symlinked directories are not followed.

    Args:
        root: Existing directory to search from (not itself a candidate).
        names: Exact, case-sensitive directory names to match.

    Returns:
        Absolute paths of all matching directories.

    Raises:
        NotADirectoryError: If root is not a directory.
        TypeError: If names is a single string rather than a collection.
        ValueError: If names is empty.
        OSError: If any directory in the tree cannot be listed.
    """
    if isinstance(names, str):
        raise TypeError("names must be a collection of directory names, not a str")
    wanted = frozenset(names)
    if not wanted:
        raise ValueError("At least one directory name is required")

    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    results: list[str] = []
    # Explicit stack instead of recursion; children are pushed reversed so
    # the first sibling is visited first.
    pending: list[Path] = list(reversed(_list_subdirs(root_path)))
    while pending:
        current = pending.pop()
        if current.name in wanted:
            results.append(str(current))
        pending.extend(reversed(_list_subdirs(current)))

    return results
