"""Tests for the release workflow ordering contract."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, call

import pytest

from change_tag_push.config.models import ChangeTagPushConfig, GitConfig
from change_tag_push.core.changelog import ChangelogDocument, Pending
from change_tag_push.core.version import Version
from change_tag_push.core.workflow import ReleaseWorkflow
from change_tag_push.exceptions import (
    ChangelogEntryMissingAfterEditError,
    DirtyWorkingTreeError,
    TagAlreadyExistsError,
    UserAbortedError,
)
from change_tag_push.vcs.git import Commit, GitRepository

if TYPE_CHECKING:
    from pathlib import Path


class FakeInteraction:
    """Scripted answers; prompts not listed in ``decline`` are confirmed."""

    def __init__(
        self,
        decline: tuple[str, ...] = (),
        on_edit: Callable[[Path], None] | None = None,
    ) -> None:
        self.decline = decline
        self.on_edit = on_edit
        self.prompts: list[str] = []
        self.edited: list[Path] = []
        self.diffs: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return not any(prompt.startswith(d) for d in self.decline)

    def edit(self, path: Path) -> None:
        self.edited.append(path)
        if self.on_edit is not None:
            self.on_edit(path)

    def show_diff(self, diff: str) -> None:
        self.diffs.append(diff)


@pytest.fixture
def repo(tmp_path: Path, sample_commits: list[Commit]) -> MagicMock:
    """A mock GitRepository rooted at tmp_path/example."""
    work_tree = tmp_path / "example"
    work_tree.mkdir()
    (work_tree / "Changes").write_text("Release history for example\n\nv1.0.0  2024-01-01\n - init\n")

    mock = MagicMock(spec=GitRepository)
    mock.work_tree = work_tree
    mock.is_clean.return_value = True
    mock.ref_exists.return_value = False
    mock.log_last.return_value = [sample_commits[-1]]
    mock.log_since.return_value = sample_commits
    mock.current_branch.return_value = "main"
    mock.diff.return_value = "+ - Add frobnicator"
    return mock


def _changes(repo: MagicMock) -> ChangelogDocument:
    return ChangelogDocument.load(repo.work_tree / "Changes")


class TestReleaseWorkflow:
    """Tests for ReleaseWorkflow.run()."""

    def test_full_release(self, repo: MagicMock):
        interaction = FakeInteraction()
        workflow = ReleaseWorkflow(repo, interaction, ChangeTagPushConfig())

        result = workflow.run("minor", date_directive="2024-06-01")

        changes_file = repo.work_tree / "Changes"
        assert result.version == Version(1, 1, 0)
        assert len(result.records) == 2
        section = _changes(repo).find_section("v1.1.0")
        assert section.date == "2024-06-01"
        assert section.changes == [
            "Fix crash on empty input - f00dfee",
            "Add frobnicator - deadbee",
        ]
        assert interaction.edited == [changes_file]
        assert interaction.diffs == ["+ - Add frobnicator"]
        repo.log_since.assert_called_once_with("deadbeef7654321")
        repo.ref_exists.assert_called_once_with("v1.1.0")

        mutations = [c for c in repo.method_calls if c[0] in {"add", "commit", "tag_annotated", "push"}]
        assert mutations == [
            call.add(changes_file),
            call.commit("Updated Changes for v1.1.0", changes_file),
            call.tag_annotated("v1.1.0", "v1.1.0"),
            call.push(follow_tags=True, remote=None),
        ]

    def test_prompt_order(self, repo: MagicMock):
        interaction = FakeInteraction()
        ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("patch")

        assert interaction.prompts == [
            "Summarize for human readability?",
            "Review git diff?",
            "Commit Changes and tag current tree as v1.0.1?",
            "Push v1.0.1 and the main branch to origin?",
        ]

    def test_optional_steps_can_be_skipped(self, repo: MagicMock):
        interaction = FakeInteraction(decline=("Summarize", "Review"))
        ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("patch")

        assert interaction.edited == []
        assert interaction.diffs == []
        repo.push.assert_called_once()

    def test_dirty_tree(self, repo: MagicMock):
        repo.is_clean.return_value = False
        before = (repo.work_tree / "Changes").read_text()

        with pytest.raises(DirtyWorkingTreeError):
            ReleaseWorkflow(repo, FakeInteraction(), ChangeTagPushConfig()).run("patch")

        assert (repo.work_tree / "Changes").read_text() == before

    def test_allow_dirty(self, repo: MagicMock):
        repo.is_clean.return_value = False
        config = ChangeTagPushConfig(git=GitConfig(allow_dirty=True))

        ReleaseWorkflow(repo, FakeInteraction(), config).run("patch")

        repo.is_clean.assert_not_called()
        repo.commit.assert_called_once()

    def test_existing_tag(self, repo: MagicMock):
        repo.ref_exists.return_value = True
        before = (repo.work_tree / "Changes").read_text()

        with pytest.raises(TagAlreadyExistsError, match="v2.0.0"):
            ReleaseWorkflow(repo, FakeInteraction(), ChangeTagPushConfig()).run("major")

        assert (repo.work_tree / "Changes").read_text() == before

    def test_next_skips_tagging(self, repo: MagicMock):
        interaction = FakeInteraction()
        result = ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("next")

        changes_file = repo.work_tree / "Changes"
        assert result.version == Pending()
        assert _changes(repo).sections[-1].is_pending
        assert _changes(repo).sections[-1].date is None
        repo.ref_exists.assert_not_called()
        repo.tag_annotated.assert_not_called()
        repo.commit.assert_called_once_with("Updated Changes for next version", changes_file)
        assert "Commit Changes?" in interaction.prompts

    def test_decline_commit(self, repo: MagicMock):
        """Declining the commit aborts with the file written but nothing committed."""
        interaction = FakeInteraction(decline=("Commit",))

        with pytest.raises(UserAbortedError):
            ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("patch")

        assert _changes(repo).find_section("v1.0.1") is not None
        repo.add.assert_not_called()
        repo.commit.assert_not_called()
        repo.tag_annotated.assert_not_called()
        repo.push.assert_not_called()

    def test_decline_push(self, repo: MagicMock):
        interaction = FakeInteraction(decline=("Push",))

        with pytest.raises(UserAbortedError):
            ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("patch")

        repo.tag_annotated.assert_called_once()
        repo.push.assert_not_called()

    def test_entry_deleted_while_editing(self, repo: MagicMock):
        def delete_release(path: Path) -> None:
            path.write_text("Release history for example\n\nv1.0.0  2024-01-01\n - init\n")

        interaction = FakeInteraction(on_edit=delete_release)

        with pytest.raises(ChangelogEntryMissingAfterEditError, match="v1.0.1"):
            ReleaseWorkflow(repo, interaction, ChangeTagPushConfig()).run("patch")

        repo.commit.assert_not_called()

    def test_new_changelog_gets_preamble(self, repo: MagicMock):
        (repo.work_tree / "Changes").unlink()
        repo.log_last.return_value = []

        ReleaseWorkflow(repo, FakeInteraction(), ChangeTagPushConfig(), project_name="demo").run(
            "v0.1.0"
        )

        doc = _changes(repo)
        assert doc.preamble == "Release history for demo"
        repo.log_since.assert_called_once_with(None)

    def test_preamble_defaults_to_directory_name(self, repo: MagicMock):
        (repo.work_tree / "Changes").unlink()

        ReleaseWorkflow(repo, FakeInteraction(), ChangeTagPushConfig()).run("v0.1.0")

        assert _changes(repo).preamble == "Release history for example"

    def test_tag_message_template(self, repo: MagicMock):
        config = ChangeTagPushConfig(git=GitConfig(tag_message="Release {version}", remote="up"))

        ReleaseWorkflow(repo, FakeInteraction(), config).run("patch")

        repo.tag_annotated.assert_called_once_with("v1.0.1", "Release v1.0.1")
        repo.push.assert_called_once_with(follow_tags=True, remote="up")

    def test_zero_trial_tags_existing_header(self, repo: MagicMock):
        """An explicit v1.0.0.0 reuses the v1.0.0 section and its tag name."""
        result = ReleaseWorkflow(repo, FakeInteraction(), ChangeTagPushConfig()).run(
            "v1.0.0.0", date_directive=False
        )

        assert str(result.version) == "v1.0.0"
        assert str(_changes(repo).sections[-1].version) == "v1.0.0"
        repo.ref_exists.assert_called_once_with("v1.0.0")
        repo.tag_annotated.assert_called_once_with("v1.0.0", "v1.0.0")
