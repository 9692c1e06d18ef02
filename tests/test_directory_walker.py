"""Tests for the directory walker."""

import os
import sys

import pytest

from branch_lint.utils.directory_walker import search


def _mkdirs(root, *relative_paths):
    for relative in relative_paths:
        (root / relative).mkdir(parents=True, exist_ok=True)


def test_search_finds_all_matches_at_any_depth(root):
    """Every directory named like a target is returned, however deep."""
    _mkdirs(
        root,
        "venv",
        "pkg/sub/venv",
        "pkg/.venv",
        "other/deeper/still/.venv",
        "unrelated/dir",
    )
    result = search(root, {"venv", ".venv"})
    expected = {
        str(root / "venv"),
        str(root / "pkg/sub/venv"),
        str(root / "pkg/.venv"),
        str(root / "other/deeper/still/.venv"),
    }
    assert set(result) == expected
    assert len(result) == len(expected)


def test_search_descends_into_matching_directories(root):
    """A match is not a pruning point: nested matches are reported too."""
    _mkdirs(root, "venv/lib/venv")
    result = search(root, {"venv"})
    assert result == [str(root / "venv"), str(root / "venv/lib/venv")]


def test_search_parent_before_children(root):
    """Pre-order: a directory's subtree follows it before the next sibling."""
    _mkdirs(root, "a/x/target", "a/target", "b/target")
    result = search(root, {"target", "a"})
    assert result == [
        str(root / "a"),
        str(root / "a/target"),
        str(root / "a/x/target"),
        str(root / "b/target"),
    ]


def test_search_ignores_files_with_matching_names(root):
    """Only directories match; a regular file named 'venv' is skipped."""
    (root / "venv").write_text("not a dir")
    assert search(root, {"venv"}) == []


def test_search_is_case_sensitive(root):
    _mkdirs(root, "Venv")
    assert search(root, {"venv"}) == []


def test_search_does_not_report_root(root):
    """The root itself is never a candidate."""
    root = root / "venv"
    root.mkdir()
    assert search(root, {"venv"}) == []


def test_search_returns_absolute_paths(root, monkeypatch):
    _mkdirs(root, "pkg/venv")
    monkeypatch.chdir(root)
    result = search("pkg", {"venv"})
    assert result == [str(root / "pkg" / "venv")]
    assert os.path.isabs(result[0])


def test_search_empty_names_raises(root):
    with pytest.raises(ValueError):
        search(root, set())


def test_search_bare_string_names_raises(root):
    """A lone "venv" would otherwise match directories named v, e and n."""
    _mkdirs(root, "v", "venv")
    with pytest.raises(TypeError):
        search(root, "venv")


def test_search_missing_root_raises(root):
    with pytest.raises(NotADirectoryError):
        search(root / "missing", {"venv"})


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
def test_search_does_not_follow_symlink_cycles(root):
    """A symlink pointing back up the tree does not cause endless descent."""
    _mkdirs(root, "pkg/venv")
    (root / "pkg" / "loop").symlink_to(root, target_is_directory=True)
    assert search(root, {"venv"}) == [str(root / "pkg/venv")]


@pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permission bits are not enforced",
)
def test_search_unreadable_directory_aborts(root):
    """A directory that cannot be listed fails the whole walk."""
    locked = root / "locked"
    _mkdirs(root, "locked/venv")
    locked.chmod(0)
    try:
        with pytest.raises(PermissionError):
            search(root, {"venv"})
    finally:
        locked.chmod(0o755)
