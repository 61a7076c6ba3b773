"""Change records harvested from version control.

A ChangeSource answers two questions for the reconciler: which commit
last touched the changelog, and which commits came after a given
reference. GitChangeSource answers them from a GitRepository.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from change_tag_push.vcs.git import SHORT_SHA_LENGTH

if TYPE_CHECKING:
    from pathlib import Path

    from change_tag_push.vcs.git import Commit, GitRepository


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """One log entry: commit reference and subject line."""

    commit: str
    subject: str

    @property
    def short_ref(self) -> str:
        return self.commit[:SHORT_SHA_LENGTH]

    @classmethod
    def from_commit(cls, commit: Commit) -> ChangeRecord:
        return cls(commit=commit.sha, subject=commit.subject)


ChangeFormatter = Callable[[ChangeRecord], str]


def format_change(record: ChangeRecord) -> str:
    """Default change line: ``"<subject> - <short ref>"``."""
    return f"{record.subject} - {record.short_ref}"


class ChangeSource(Protocol):
    """Source of change records."""

    def last_changelog_reference(self) -> str | None:
        """Reference of the last commit that touched the changelog, if any."""
        ...

    def log_since(self, ref: str | None) -> list[ChangeRecord]:
        """Change records after ``ref``; the whole history when ref is None."""
        ...


class GitChangeSource:
    """ChangeSource backed by a git repository.

    Args:
        repo: Repository to read the log from
        changelog_path: Path of the changelog file in the working tree
    """

    def __init__(self, repo: GitRepository, changelog_path: Path) -> None:
        self.repo = repo
        self.changelog_path = changelog_path

    def last_changelog_reference(self) -> str | None:
        last = self.repo.log_last(self.changelog_path, 1)
        return last[0].sha if last else None

    def log_since(self, ref: str | None) -> list[ChangeRecord]:
        return [ChangeRecord.from_commit(c) for c in self.repo.log_since(ref)]
