"""Exception hierarchy for change-tag-push.

Every error raised by the package derives from ChangeTagPushError so
the command line can report any failure with a single handler.
"""

from __future__ import annotations


class ChangeTagPushError(Exception):
    """Base class for all change-tag-push errors."""


# Versions


class VersionError(ChangeTagPushError):
    """Base class for version parsing and resolution errors."""


class InvalidVersionFormatError(VersionError):
    """Text is not a strict vN.N.N or vN.N.N.N version."""


class InvalidBumpKeywordError(VersionError):
    """Token is neither a bump keyword nor an explicit version."""


class InvalidVersionSpecifierError(VersionError):
    """Version specifier is neither a version nor a known keyword."""


class VersionNotMonotonicError(VersionError):
    """Resolved version is lower than the latest released version."""


# Changelog


class ChangelogError(ChangeTagPushError):
    """Base class for changelog errors."""


class MalformedChangelogError(ChangelogError):
    """Changelog text does not follow the supported grammar."""

    def __init__(self, message: str, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class UnknownReleaseTargetError(ChangelogError):
    """No release section exists for the requested version."""


class ImmutableHistoricalDateError(ChangelogError):
    """Attempt to re-date a release that is not the latest one."""


class ChangelogEntryMissingAfterEditError(ChangelogError):
    """The release section disappeared while the file was being edited."""


# Git


class GitError(ChangeTagPushError):
    """Base class for repository errors."""


class RepositoryCommandFailedError(GitError):
    """A git command exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr and self.stderr.strip():
            return f"{message}: {self.stderr.strip()}"
        return message


class DirtyWorkingTreeError(GitError):
    """Working tree has uncommitted changes to tracked files."""


class TagAlreadyExistsError(GitError):
    """A tag for the resolved version already exists."""


# Configuration


class ConfigError(ChangeTagPushError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Requested configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration is not valid TOML or fails validation."""


# Interaction


class EditorError(ChangeTagPushError):
    """The editor could not be started or exited with an error."""


class UserAbortedError(ChangeTagPushError):
    """The operator declined a confirmation step."""
