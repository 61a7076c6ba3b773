"""Git repository operations.

GitRepository runs the ``git`` executable as a subprocess and captures
its output. Every failing command raises RepositoryCommandFailedError
with the exit status and captured output of the underlying process.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from change_tag_push.exceptions import RepositoryCommandFailedError

logger = logging.getLogger(__name__)

# Unit and record separators keep subjects with arbitrary text parseable.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%x1f".join(["%H", "%an", "%ae", "%aI", "%s"]) + "%x1e"

SHORT_SHA_LENGTH = 7


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit from ``git log``.

    Attributes:
        sha: Full commit hash
        subject: First line of the commit message
        author_name: Author name
        author_email: Author email
        date: Author date
    """

    sha: str
    subject: str
    author_name: str
    author_email: str
    date: datetime

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]


class GitRepository:
    """A git working tree.

    Args:
        path: Any directory inside the working tree
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else Path.cwd()

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        command = ["git", *args]
        logger.debug("Running %s", " ".join(command))
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=check,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise RepositoryCommandFailedError(
                "git not found. Is git installed and on PATH?",
                command=command,
            ) from e
        except subprocess.CalledProcessError as e:
            raise RepositoryCommandFailedError(
                f"'{' '.join(command)}' failed with exit code {e.returncode}",
                command=command,
                returncode=e.returncode,
                stdout=e.stdout,
                stderr=e.stderr,
            ) from e

    @property
    def work_tree(self) -> Path:
        """Top-level directory of the working tree."""
        return Path(self._run("rev-parse", "--show-toplevel").stdout.strip())

    def is_clean(self) -> bool:
        """True when tracked files have no uncommitted changes."""
        result = self._run("status", "--porcelain", "--untracked-files=no")
        return result.stdout.strip() == ""

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

    def has_commits(self) -> bool:
        result = self._run("rev-parse", "--verify", "--quiet", "HEAD", check=False)
        return result.returncode == 0

    def log_since(self, ref: str | None) -> list[Commit]:
        """Commits reachable from HEAD but not from ``ref``, newest first.

        Args:
            ref: Commit reference; None returns the whole history of HEAD
        """
        if ref is None and not self.has_commits():
            return []
        revision = f"{ref}..HEAD" if ref else "HEAD"
        result = self._run("log", f"--format={_LOG_FORMAT}", revision)
        return _parse_log(result.stdout)

    def log_last(self, path: Path | str, n: int = 1) -> list[Commit]:
        """The last ``n`` commits touching ``path``, newest first."""
        if not self.has_commits():
            return []
        result = self._run("log", f"-n{n}", f"--format={_LOG_FORMAT}", "--", str(path))
        return _parse_log(result.stdout)

    def ref_exists(self, name: str) -> bool:
        """True if a tag (or any ref) with this name exists."""
        result = self._run("show-ref", "--quiet", name, check=False)
        return result.returncode == 0

    def diff(self, path: Path | str) -> str:
        return self._run("diff", "--ignore-all-space", "--", str(path)).stdout

    def add(self, path: Path | str) -> None:
        self._run("add", "--", str(path))

    def commit(self, message: str, path: Path | str) -> None:
        logger.info("Committing %s", path)
        self._run("commit", f"--message={message}", "--", str(path))

    def tag_annotated(self, name: str, message: str) -> None:
        logger.info("Tagging %s", name)
        self._run("tag", "--annotate", f"--message={message}", name)

    def push(self, *, follow_tags: bool = True, remote: str | None = None) -> None:
        args = ["push"]
        if follow_tags:
            args.append("--follow-tags")
        if remote:
            args.append(remote)
        logger.info("Pushing to %s", remote or "default remote")
        self._run(*args)


def _parse_log(output: str) -> list[Commit]:
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        sha, author_name, author_email, date, subject = record.split(_FIELD_SEP, 4)
        commits.append(
            Commit(
                sha=sha,
                subject=subject,
                author_name=author_name,
                author_email=author_email,
                date=datetime.fromisoformat(date),
            )
        )
    return commits
