"""Release version parsing and manipulation.

Versions are strict dotted identifiers with a leading ``v``: three
components (``v1.2.3``) or four, the fourth being a trial release
number (``v1.2.3.1``). Comparison pads missing components with zero,
so ``v1.2.3`` and ``v1.2.3.0`` are equal.

Version specifiers given on the command line are classified once by
:func:`classify_specifier` into an explicit version, a bump keyword,
``current`` or ``next``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import total_ordering

from change_tag_push.exceptions import (
    InvalidBumpKeywordError,
    InvalidVersionFormatError,
    InvalidVersionSpecifierError,
)

_VERSION_RE = re.compile(
    r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?$"
)

NEXT_KEYWORD = "next"
USAGE_HINT = "vN.N.N, vN.N.N.N, or major, minor, patch, trial, current or next"


class BumpType(StrEnum):
    """Relative version increments."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    TRIAL = "trial"
    CURRENT = "current"


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """An immutable release version.

    Attributes:
        major: Major component
        minor: Minor component
        patch: Patch component
        trial: Optional trial component; None when written with three parts
    """

    major: int
    minor: int
    patch: int
    trial: int | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a strict version string.

        Args:
            text: Version text such as ``v1.2.3`` or ``v1.2.3.4``

        Returns:
            Parsed Version

        Raises:
            InvalidVersionFormatError: If text is not a strict version
        """
        match = _VERSION_RE.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise InvalidVersionFormatError(
                f"Version '{text}' isn't strictly formatted (expected vN.N.N or vN.N.N.N)"
            )
        major, minor, patch, trial = match.groups()
        return cls(
            int(major),
            int(minor),
            int(patch),
            int(trial) if trial is not None else None,
        )

    @property
    def key(self) -> tuple[int, int, int, int]:
        """Comparison key with the trial component padded to zero."""
        return (self.major, self.minor, self.patch, self.trial or 0)

    def bump(self, kind: BumpType | str) -> Version:
        """Return the version incremented by ``kind``.

        A zero trial component is dropped by major, minor and patch bumps.

        Raises:
            InvalidBumpKeywordError: If kind is not a bump keyword
        """
        try:
            kind = BumpType(kind)
        except ValueError as e:
            raise InvalidBumpKeywordError(
                f"'{kind}' is not a bump keyword (expected one of "
                f"{', '.join(b.value for b in BumpType)})"
            ) from e

        match kind:
            case BumpType.MAJOR:
                return Version(self.major + 1, 0, 0)
            case BumpType.MINOR:
                return Version(self.major, self.minor + 1, 0)
            case BumpType.PATCH:
                return Version(self.major, self.minor, self.patch + 1)
            case BumpType.TRIAL:
                return Version(self.major, self.minor, self.patch, (self.trial or 0) + 1)
            case BumpType.CURRENT:
                return self

    def __str__(self) -> str:
        base = f"v{self.major}.{self.minor}.{self.patch}"
        if self.trial is None:
            return base
        return f"{base}.{self.trial}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key < other.key

    def __hash__(self) -> int:
        return hash(self.key)


ZERO_VERSION = Version(0, 0, 0)


def parse_version(text: str) -> Version:
    """Parse a strict version string (see :meth:`Version.parse`)."""
    return Version.parse(text)


def is_version(text: str) -> bool:
    """Return True if text is a strict version string."""
    return isinstance(text, str) and _VERSION_RE.match(text.strip()) is not None


def compare_versions(a: Version, b: Version) -> int:
    """Compare two versions.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    if a.key < b.key:
        return -1
    if a.key > b.key:
        return 1
    return 0


def increment_version(base: Version, token: str) -> Version:
    """Increment ``base`` by a bump keyword, or return an explicit version.

    Args:
        base: Version to increment from
        token: Bump keyword or explicit version string

    Returns:
        The explicit version if token parses as one, else the bumped version

    Raises:
        InvalidBumpKeywordError: If token is neither
    """
    if is_version(token):
        return Version.parse(token)
    return base.bump(token)


# Version specifiers


@dataclass(frozen=True, slots=True)
class Explicit:
    """An explicit target version."""

    version: Version


@dataclass(frozen=True, slots=True)
class Bump:
    """Increment the latest version."""

    kind: BumpType


@dataclass(frozen=True, slots=True)
class Current:
    """Reuse the latest version."""


@dataclass(frozen=True, slots=True)
class Next:
    """Target the unreleased placeholder section."""


VersionSpecifier = Explicit | Bump | Current | Next


def classify_specifier(text: str) -> VersionSpecifier:
    """Classify a version specifier given by the user.

    Args:
        text: Explicit version, bump keyword, ``current`` or ``next``

    Returns:
        The matching VersionSpecifier variant

    Raises:
        InvalidVersionSpecifierError: If text is not a valid specifier
    """
    token = text.strip()
    if token == NEXT_KEYWORD:
        return Next()
    if token == BumpType.CURRENT:
        return Current()
    if is_version(token):
        return Explicit(Version.parse(token))
    if token in {b.value for b in BumpType}:
        return Bump(BumpType(token))
    raise InvalidVersionSpecifierError(
        f"Version specifier '{text}' is not valid (e.g. {USAGE_HINT})"
    )
