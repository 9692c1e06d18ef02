"""Models for branch references and file-level change sets."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    """Kind of change git reports for a single path."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"
    UNMERGED = "unmerged"
    UNKNOWN = "unknown"

    @classmethod
    def from_status(cls, status: str) -> "ChangeKind":
        """Map a git --name-status letter (e.g. "M", "R100") to a ChangeKind."""
        return _STATUS_LETTERS.get(status[:1].upper(), cls.UNKNOWN)


_STATUS_LETTERS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
    "R": ChangeKind.RENAMED,
    "C": ChangeKind.COPIED,
    "T": ChangeKind.TYPE_CHANGED,
    "U": ChangeKind.UNMERGED,
}


class BranchRef(BaseModel):
    """A branch name plus its tip commit, once resolved.

    The commit is resolved per operation; branches move, so a resolved
    BranchRef must not be reused for a later run.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    commit_sha: str | None = None

    def with_commit(self, commit_sha: str) -> "BranchRef":
        return self.model_copy(update={"commit_sha": commit_sha})


class FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str                     # Relative to repo root (new path for renames)
    kind: ChangeKind
    old_path: str | None = None   # Source path for renames/copies


class ChangeSet(BaseModel):
    """Changes between a merge-base and a branch tip, in git diff order."""

    model_config = ConfigDict(frozen=True)

    merge_base: str
    tip: str
    files: list[FileChange] = Field(default_factory=list)
