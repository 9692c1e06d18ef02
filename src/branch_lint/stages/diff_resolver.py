"""Branch Diff Resolver: files a branch changed since it left its base."""

import logging
from pathlib import Path

from branch_lint.models.diff_models import BranchRef, ChangeKind, ChangeSet
from branch_lint.utils.git_cmd import (
    GitCommandError,
    get_changed_files,
    get_latest_commit_sha,
    get_merge_base,
)

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".py"


def _as_branch(branch: BranchRef | str) -> BranchRef:
    return branch if isinstance(branch, BranchRef) else BranchRef(name=branch)


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    return extension if extension.startswith(".") else f".{extension}"


class BranchDiffResolver:
    """Resolves the files changed on a comparison branch since its merge-base.

    The diff runs from merge-base(base, compare) to the tip of compare, so
    commits that landed on base after the branches diverged never show up.
    Nothing is cached between calls since branch tips move.
    """

    def __init__(self, extension: str = DEFAULT_EXTENSION) -> None:
        self.extension = _normalize_extension(extension)

    async def change_set(
        self,
        repo_path: str,
        base: BranchRef | str,
        compare: BranchRef | str,
    ) -> ChangeSet | None:
        """Compute the merge-base change set for compare against base.

        Returns None, rather than raising, when either branch does not
        resolve, the histories share no ancestor, or a git query fails.
        """
        base_ref = _as_branch(base)
        compare_ref = _as_branch(compare)

        try:
            compare_sha = await get_latest_commit_sha(repo_path, compare_ref.name)
            if compare_sha is None:
                logger.debug("Branch %s not found in %s", compare_ref.name, repo_path)
                return None
            compare_ref = compare_ref.with_commit(compare_sha)

            base_sha = await get_latest_commit_sha(repo_path, base_ref.name)
            if base_sha is None:
                logger.debug("Branch %s not found in %s", base_ref.name, repo_path)
                return None
            base_ref = base_ref.with_commit(base_sha)

            merge_base = await get_merge_base(
                repo_path, base_ref.commit_sha, compare_ref.commit_sha
            )
            if merge_base is None:
                logger.info(
                    "No merge-base between %s and %s", base_ref.name, compare_ref.name
                )
                return None

            files = await get_changed_files(repo_path, merge_base, compare_ref.commit_sha)
        except GitCommandError as exc:
            logger.warning(
                "Diff query %s...%s failed: %s", base_ref.name, compare_ref.name, exc
            )
            return None

        return ChangeSet(merge_base=merge_base, tip=compare_ref.commit_sha, files=files)

    async def changed_files(
        self,
        repo_path: str,
        base: BranchRef | str,
        compare: BranchRef | str,
        extension: str | None = None,
    ) -> list[str]:
        """Absolute paths of files with the target extension changed on compare.

        Besides the extension filter, deleted files are left out since there
        is nothing left at the tip to analyse.
        Order follows the diff; duplicates are dropped.

        Args:
            repo_path: Repository working tree root.
            base: Branch the comparison branch diverged from.
            compare: Branch whose changes are collected.
            extension: Overrides the resolver's extension (case-insensitive,
                leading "." optional).

        Returns:
            Absolute file paths, empty when nothing applies.
        """
        changes = await self.change_set(repo_path, base, compare)
        if changes is None:
            return []

        suffix = _normalize_extension(extension) if extension else self.extension
        root = Path(repo_path).resolve()
        seen: set[str] = set()
        files: list[str] = []
        for change in changes.files:
            if change.kind == ChangeKind.DELETED:
                continue
            if not change.path.lower().endswith(suffix):
                continue
            absolute = str(root / change.path)
            if absolute not in seen:
                seen.add(absolute)
                files.append(absolute)
        return files
