"""Release workflow: changelog, commit, tag and push.

ReleaseWorkflow runs the steps in a fixed order and stops at the first
failure or declined confirmation. Nothing is rolled back: once the
changelog is written it stays modified in the working tree.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from change_tag_push.core.changelog import ChangelogDocument, Pending
from change_tag_push.core.changes import GitChangeSource
from change_tag_push.core.reconcile import DateDirective, ReleaseReconciler
from change_tag_push.exceptions import (
    ChangelogEntryMissingAfterEditError,
    DirtyWorkingTreeError,
    TagAlreadyExistsError,
    UserAbortedError,
)

if TYPE_CHECKING:
    from pathlib import Path

    from change_tag_push.config.models import ChangeTagPushConfig
    from change_tag_push.core.changelog import SectionVersion
    from change_tag_push.core.reconcile import ReconcileResult
    from change_tag_push.vcs.git import GitRepository

logger = logging.getLogger(__name__)


class Interaction(Protocol):
    """Operator interaction used by the workflow."""

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question."""
        ...

    def edit(self, path: Path) -> None:
        """Let the operator edit a file; returns when the editor exits."""
        ...

    def show_diff(self, diff: str) -> None:
        """Display a diff."""
        ...


class ReleaseWorkflow:
    """Drive one release from changelog update to push.

    Args:
        repo: Repository to release from
        interaction: Prompts, editor and diff display
        config: Project configuration
        project_name: Used for the default changelog preamble
    """

    def __init__(
        self,
        repo: GitRepository,
        interaction: Interaction,
        config: ChangeTagPushConfig,
        *,
        project_name: str | None = None,
    ) -> None:
        self.repo = repo
        self.interaction = interaction
        self.config = config
        self.project_name = project_name

    def run(
        self,
        version_spec: str,
        *,
        since: str | None = None,
        date_directive: DateDirective = True,
    ) -> ReconcileResult:
        """Run the release.

        Returns:
            The reconcile result; its version is Pending for ``next``

        Raises:
            ChangeTagPushError: On any failure; UserAbortedError when the
                operator declines to commit or push
        """
        changelog_cfg = self.config.changelog
        work_tree = self.repo.work_tree
        changes_file = work_tree / changelog_cfg.path

        if not self.config.git.allow_dirty and not self.repo.is_clean():
            raise DirtyWorkingTreeError(
                "Repository has uncommitted changes. "
                "Commit or stash them, or use --allow-dirty."
            )

        document = ChangelogDocument.load(changes_file, next_token=changelog_cfg.next_token)
        reconciler = ReleaseReconciler(
            document,
            GitChangeSource(self.repo, changes_file),
            date_format=changelog_cfg.date_format,
        )
        result = reconciler.reconcile(version_spec, since=since, date_directive=date_directive)
        version = result.version

        if not result.is_pending and self.repo.ref_exists(str(version)):
            raise TagAlreadyExistsError(
                f"Tag {version} already exists in repo! You must use a new version."
            )

        document.set_preamble(self._preamble(work_tree.name))
        document.write(changes_file, changelog_cfg.wrap_columns)
        logger.info("Raw commit log for %s added to %s", version, changes_file)

        if self.interaction.confirm("Summarize for human readability?"):
            self.interaction.edit(changes_file)
        if self.interaction.confirm("Review git diff?"):
            self.interaction.show_diff(self.repo.diff(changes_file))

        edited = ChangelogDocument.load(changes_file, next_token=changelog_cfg.next_token)
        if edited.find_section(version) is None:
            raise ChangelogEntryMissingAfterEditError(
                f"{changes_file.name} no longer contains an entry for {version}!"
            )

        self._commit_and_tag(version, changes_file)

        branch = self.repo.current_branch()
        remote = self.config.git.remote or "origin"
        if not self.interaction.confirm(f"Push {version} and the {branch} branch to {remote}?"):
            raise UserAbortedError(f"Not pushed; the commit for {version} is local only")
        self.repo.push(follow_tags=True, remote=self.config.git.remote)
        return result

    def _preamble(self, directory_name: str) -> str:
        if self.config.changelog.preamble:
            return self.config.changelog.preamble
        return f"Release history for {self.project_name or directory_name}"

    def _commit_and_tag(self, version: SectionVersion, changes_file: Path) -> None:
        is_pending = isinstance(version, Pending)
        tag_text = "" if is_pending else f" and tag current tree as {version}"
        if not self.interaction.confirm(f"Commit {changes_file.name}{tag_text}?"):
            raise UserAbortedError("Abort!")

        label = "next version" if is_pending else str(version)
        self.repo.add(changes_file)
        self.repo.commit(f"Updated {changes_file.name} for {label}", changes_file)
        if not is_pending:
            message = self.config.git.tag_message.format(version=version)
            self.repo.tag_annotated(str(version), message)
