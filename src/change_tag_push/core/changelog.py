"""Structured changelog document.

The changelog is a plain text file: a free-form preamble followed by one
block per release, newest first::

    Release history for example

    {{$NEXT}}
     - Work in progress - 1a2b3c4

    v1.1.0  2024-03-01
     - Add the frobnicator, which is described by a rather long change line
       that wraps onto a continuation line - 89abcde

Each block starts with a header line holding the version (or the
placeholder token of the unreleased section) and an optional date,
followed by indented change lines. In memory the sections are kept in
chronological order, so the newest release is the last one.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from change_tag_push.core.version import Version, is_version
from change_tag_push.exceptions import InvalidVersionFormatError, MalformedChangelogError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_NEXT_TOKEN = "{{$NEXT}}"
DEFAULT_WRAP_COLUMNS = 132

_BULLET_INDENT = " - "
_CONTINUATION_INDENT = "   "
_HEADER_SEPARATOR = "  "

# Non-indented lines that look like a version header.
_HEADER_CANDIDATE_RE = re.compile(r"^v\d")
_BULLET_RE = re.compile(r"^(\s*)[-*](?:\s+|$)(.*)$")


@dataclass(frozen=True, slots=True)
class Pending:
    """Version of the unreleased placeholder section."""

    token: str = DEFAULT_NEXT_TOKEN

    def __str__(self) -> str:
        return self.token


SectionVersion = Version | Pending


def normalize_change(text: str) -> str:
    """Collapse runs of whitespace in a change line to single spaces.

    Wrapping may break a line inside a run of spaces, and continuation
    lines are joined back with one space, so changes are stored and
    written with whitespace already collapsed.
    """
    return " ".join(text.split())


@dataclass
class ReleaseSection:
    """One release entry of the changelog.

    Attributes:
        version: Released version or the pending placeholder
        date: Release date text, None when unset
        changes: Change lines in insertion order
    """

    version: SectionVersion
    date: str | None = None
    changes: list[str] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.version, Pending)

    def add_changes(self, lines: Iterable[str]) -> None:
        """Append change lines, keeping duplicates."""
        self.changes.extend(normalize_change(line) for line in lines)

    def header(self) -> str:
        if self.date:
            return f"{self.version}{_HEADER_SEPARATOR}{self.date}"
        return str(self.version)

    def serialize(self, columns: int = DEFAULT_WRAP_COLUMNS) -> str:
        """Render the section as text, wrapping change lines at ``columns``."""
        lines = [self.header()]
        for change in self.changes:
            lines.append(
                textwrap.fill(
                    normalize_change(change),
                    width=columns,
                    initial_indent=_BULLET_INDENT,
                    subsequent_indent=_CONTINUATION_INDENT,
                    break_long_words=False,
                    break_on_hyphens=False,
                )
            )
        return "\n".join(lines) + "\n"


def _matches(section: ReleaseSection, version: SectionVersion) -> bool:
    if isinstance(version, Pending):
        return section.is_pending
    return isinstance(section.version, Version) and section.version == version


@dataclass
class ChangelogDocument:
    """In-memory changelog: optional preamble plus release sections.

    Attributes:
        preamble: Free text before the first release, None if absent
        sections: Release sections, oldest first
        next_token: Placeholder token of the unreleased section
    """

    preamble: str | None = None
    sections: list[ReleaseSection] = field(default_factory=list)
    next_token: str = DEFAULT_NEXT_TOKEN

    @classmethod
    def parse(cls, text: str, next_token: str = DEFAULT_NEXT_TOKEN) -> ChangelogDocument:
        """Parse changelog text.

        Args:
            text: Changelog file content
            next_token: Placeholder token of the unreleased section

        Returns:
            Parsed document

        Raises:
            MalformedChangelogError: If a release block has no valid header,
                or a version appears twice
        """
        preamble_lines: list[str] = []
        newest_first: list[ReleaseSection] = []
        section: ReleaseSection | None = None
        bullet_indent = -1

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip()
            if not line.strip():
                if section is None:
                    preamble_lines.append("")
                continue

            indented = line[0] in " \t"
            if not indented:
                header = cls._parse_header(line, next_token, lineno, in_preamble=section is None)
                if header is None:
                    preamble_lines.append(line)
                    continue
                if any(_matches(s, header.version) for s in newest_first):
                    raise MalformedChangelogError(
                        f"duplicate release '{header.version}'", line=lineno
                    )
                section = header
                newest_first.append(section)
                bullet_indent = -1
                continue

            if section is None:
                preamble_lines.append(line)
                continue

            expanded = line.expandtabs()
            indent = len(expanded) - len(expanded.lstrip())
            bullet = _BULLET_RE.match(expanded)
            if bullet is not None and (bullet_indent < 0 or indent <= bullet_indent):
                text_part = normalize_change(bullet.group(2))
                if text_part:
                    section.changes.append(text_part)
                    bullet_indent = indent
                continue
            if section.changes and indent > bullet_indent:
                section.changes[-1] = f"{section.changes[-1]} {normalize_change(expanded)}"
            else:
                section.changes.append(normalize_change(expanded))
                bullet_indent = indent

        preamble = "\n".join(preamble_lines).strip("\n")
        return cls(
            preamble=preamble or None,
            sections=list(reversed(newest_first)),
            next_token=next_token,
        )

    @staticmethod
    def _parse_header(
        line: str,
        next_token: str,
        lineno: int,
        *,
        in_preamble: bool,
    ) -> ReleaseSection | None:
        token, *rest = line.split(None, 1)
        date = rest[0].strip() if rest else None

        if token == next_token:
            return ReleaseSection(version=Pending(next_token), date=date)

        if _HEADER_CANDIDATE_RE.match(token):
            try:
                version = Version.parse(token)
            except InvalidVersionFormatError as e:
                # Before the first release, prose like "v2 rewrote..." is preamble.
                if in_preamble:
                    return None
                raise MalformedChangelogError(str(e), line=lineno) from e
            return ReleaseSection(version=version, date=date)

        if in_preamble:
            return None
        raise MalformedChangelogError(
            f"expected a release header (version or '{next_token}'), got {line!r}",
            line=lineno,
        )

    @classmethod
    def load(cls, path: Path, next_token: str = DEFAULT_NEXT_TOKEN) -> ChangelogDocument:
        """Load a changelog file; a missing or empty file gives an empty document."""
        if not path.is_file():
            logger.info("No changelog at %s, starting a new one", path)
            return cls(next_token=next_token)
        return cls.parse(path.read_text(encoding="utf-8"), next_token=next_token)

    @property
    def pending_section(self) -> ReleaseSection | None:
        return next((s for s in self.sections if s.is_pending), None)

    def latest_version(self, exclude_pending: bool = True) -> SectionVersion | None:
        """Version of the newest section.

        Args:
            exclude_pending: Skip the unreleased placeholder section

        Returns:
            Newest version, or None when there is no qualifying section
        """
        for section in reversed(self.sections):
            if exclude_pending and section.is_pending:
                continue
            return section.version
        return None

    def find_section(self, version: SectionVersion | str) -> ReleaseSection | None:
        """Find the section for a version, the placeholder, or their text form."""
        if isinstance(version, str):
            if version == self.next_token:
                version = Pending(self.next_token)
            elif is_version(version):
                version = Version.parse(version)
            else:
                return None
        return next((s for s in self.sections if _matches(s, version)), None)

    def upsert_section(self, section: ReleaseSection) -> None:
        """Replace the section with the same version, or add it as the newest.

        A new released section goes before a trailing placeholder section.
        """
        for index, existing in enumerate(self.sections):
            if _matches(existing, section.version):
                self.sections[index] = section
                return

        if not section.is_pending and self.sections and self.sections[-1].is_pending:
            self.sections.insert(len(self.sections) - 1, section)
        else:
            self.sections.append(section)

    def set_preamble(self, text: str) -> bool:
        """Set the preamble unless one already exists.

        Returns:
            True if the preamble was set
        """
        if self.preamble:
            return False
        self.preamble = text.strip("\n") or None
        return self.preamble is not None

    def serialize(self, columns: int = DEFAULT_WRAP_COLUMNS) -> str:
        """Render the document, newest release first."""
        blocks: list[str] = []
        if self.preamble:
            blocks.append(self.preamble + "\n")
        blocks.extend(s.serialize(columns) for s in reversed(self.sections))
        return "\n".join(blocks)

    def write(self, path: Path, columns: int = DEFAULT_WRAP_COLUMNS) -> None:
        path.write_text(self.serialize(columns), encoding="utf-8")
        logger.info("Wrote %s", path)
