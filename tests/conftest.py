import subprocess
import sys
from pathlib import Path

import pytest

GIT_IDENTITY = [
    "-c", "user.name=Test User",
    "-c", "user.email=test@example.com",
    "-c", "commit.gpgsign=false",
]


def git(repo: Path, *args: str) -> str:
    """Run git in repo with a fixed identity, returning stdout."""
    result = subprocess.run(
        ["git", *GIT_IDENTITY, *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def write(repo: Path, relative_path: str, content: str = "x = 1\n") -> Path:
    path = repo / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def commit_all(repo: Path, message: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository on branch main with one initial commit."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    write(repo, "README.md", "# repo\n")
    write(repo, "b.py", "b = 1\n")
    commit_all(repo, "initial")
    return repo.resolve()


@pytest.fixture
def diverged_repo(git_repo):
    """main and feature diverged from a shared commit.

    feature: adds a.py, modifies b.py, adds notes.txt
    main (after divergence): adds c.py
    """
    repo = git_repo
    git(repo, "checkout", "-q", "-b", "feature")
    write(repo, "a.py", "a = 1\n")
    write(repo, "b.py", "b = 2\n")
    write(repo, "notes.txt", "not python\n")
    commit_all(repo, "feature work")

    git(repo, "checkout", "-q", "main")
    write(repo, "c.py", "c = 1\n")
    commit_all(repo, "main moves on")
    return repo


@pytest.fixture
def fake_tool(tmp_path):
    """Factory for a Python script standing in for the analysis tool.

    Returns (executable, report_args) for ToolRunner: the interpreter plus
    the script path, so the runner's own arguments land in sys.argv.
    """

    def _make(body: str) -> tuple[str, list[str]]:
        script = tmp_path / f"tool_{abs(hash(body))}.py"
        script.write_text("import os, sys\n" + body + "\n")
        return sys.executable, [str(script)]

    return _make


@pytest.fixture
def root(tmp_path):
    """tmp_path with symlinks resolved, matching what the walker reports."""
    return tmp_path.resolve()
