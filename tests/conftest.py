"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from change_tag_push.core.changes import ChangeRecord
from change_tag_push.vcs.git import Commit

if TYPE_CHECKING:
    from pathlib import Path


class FakeChangeSource:
    """In-memory ChangeSource recording the references it was asked for."""

    def __init__(
        self,
        records: list[ChangeRecord] | None = None,
        last_reference: str | None = "c0ffee0000000000",
    ) -> None:
        self.records = list(records or [])
        self.last_reference = last_reference
        self.requested: list[str | None] = []

    def last_changelog_reference(self) -> str | None:
        return self.last_reference

    def log_since(self, ref: str | None) -> list[ChangeRecord]:
        self.requested.append(ref)
        return list(self.records)


@pytest.fixture
def make_source():
    """Factory for FakeChangeSource instances."""
    return FakeChangeSource


@pytest.fixture
def fake_source() -> FakeChangeSource:
    return FakeChangeSource([ChangeRecord(commit="abc1234def5678", subject="init")])


@pytest.fixture
def empty_source() -> FakeChangeSource:
    return FakeChangeSource([])


@pytest.fixture
def sample_commits() -> list[Commit]:
    """Commits as returned by git log, newest first."""
    date = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    return [
        Commit("f00dfeed1234567", "Fix crash on empty input", "Ann", "ann@example.com", date),
        Commit("deadbeef7654321", "Add frobnicator", "Bob", "bob@example.com", date),
    ]


@pytest.fixture
def sample_changelog() -> str:
    return (
        "Release history for example\n"
        "\n"
        "v1.2.0  2024-03-01\n"
        " - Add frobnicator - deadbee\n"
        " - Fix crash on empty input - f00dfee\n"
        "\n"
        "v1.1.0  2024-02-01\n"
        " - Improve docs - 1234567\n"
        "\n"
        "v1.0.0  2024-01-01\n"
        " - init - abc1234\n"
    )


def _git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout


@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Identity for commits made by the code under test."""
    for key, value in {
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
    }.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def temp_git_repo(tmp_path: Path, git_env: None) -> Path:
    """A git repository with one commit that adds the Changes file."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "example"
    repo.mkdir()
    _git(repo, "init", "--quiet")
    _git(repo, "config", "commit.gpgsign", "false")
    _git(repo, "config", "tag.gpgsign", "false")
    (repo / "Changes").write_text("Release history for example\n\nv1.0.0  2024-01-01\n - init\n")
    _git(repo, "add", "Changes")
    _git(repo, "commit", "--quiet", "-m", "Add Changes")
    return repo


@pytest.fixture
def temp_git_repo_with_pyproject(temp_git_repo: Path) -> Path:
    (temp_git_repo / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.change-tag-push.changelog]
wrap_columns = 80
"""
    )
    return temp_git_repo


@pytest.fixture
def git():
    """Run git in a directory: ``git(path, "log")``."""
    return _git
