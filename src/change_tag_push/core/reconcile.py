"""Release reconciliation.

The reconciler resolves a version specifier against the changelog,
finds or creates the release section for it, stamps its date and
appends the commits made since the changelog was last committed.

Nothing is written to disk here. Callers can run further checks (for
example that no tag exists for the version yet) before writing the
document out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from change_tag_push.core.changelog import Pending, ReleaseSection, SectionVersion
from change_tag_push.core.changes import format_change
from change_tag_push.core.version import (
    ZERO_VERSION,
    Bump,
    BumpType,
    Current,
    Explicit,
    Next,
    Version,
    VersionSpecifier,
    classify_specifier,
)
from change_tag_push.exceptions import (
    ImmutableHistoricalDateError,
    UnknownReleaseTargetError,
    VersionNotMonotonicError,
)

if TYPE_CHECKING:
    from change_tag_push.core.changelog import ChangelogDocument
    from change_tag_push.core.changes import ChangeFormatter, ChangeRecord, ChangeSource

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%Y-%m-%d"

# None/False: keep the date; True: today; "...%..": strftime template; else literal.
DateDirective = bool | str | None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def render_date(
    directive: DateDirective,
    now: datetime,
    default_format: str = DEFAULT_DATE_FORMAT,
) -> str | None:
    """Turn a date directive into the date text to store, or None to keep."""
    if directive is None or directive is False:
        return None
    if directive is True:
        return now.strftime(default_format)
    if "%" in directive:
        return now.strftime(directive)
    return directive


@dataclass
class ReconcileResult:
    """Outcome of :meth:`ReleaseReconciler.reconcile`.

    Attributes:
        document: The updated changelog document
        version: Resolved version (or the pending placeholder)
        section: The section the changes were merged into
        records: Change records that were added
    """

    document: ChangelogDocument
    version: SectionVersion
    section: ReleaseSection
    records: list[ChangeRecord] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.version, Pending)


class ReleaseReconciler:
    """Merge change records into the release section of a changelog.

    Args:
        document: Changelog to update in place
        change_source: Where change records come from
        formatter: Turns a ChangeRecord into a change line
        clock: Returns the current time (UTC), used for date directives
        date_format: strftime format used when the directive is True
    """

    def __init__(
        self,
        document: ChangelogDocument,
        change_source: ChangeSource,
        *,
        formatter: ChangeFormatter = format_change,
        clock: Callable[[], datetime] = _utcnow,
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self.document = document
        self.change_source = change_source
        self.formatter = formatter
        self.clock = clock
        self.date_format = date_format

    def latest_version(self) -> Version:
        latest = self.document.latest_version()
        return latest if isinstance(latest, Version) else ZERO_VERSION

    def resolve_version(self, specifier: str | VersionSpecifier) -> SectionVersion:
        """Resolve a specifier to the target version.

        Args:
            specifier: Specifier text or an already classified specifier

        Returns:
            The target Version, or Pending for ``next``

        Raises:
            InvalidVersionSpecifierError: If the specifier text is not valid
            VersionNotMonotonicError: If the version is below the latest one
        """
        if isinstance(specifier, str):
            specifier = classify_specifier(specifier)

        if isinstance(specifier, Next):
            return Pending(self.document.next_token)

        latest = self.latest_version()
        match specifier:
            case Explicit(version=version):
                resolved = version
            case Bump(kind=kind):
                resolved = latest.bump(kind)
            case Current():
                resolved = latest.bump(BumpType.CURRENT)

        if resolved < latest:
            raise VersionNotMonotonicError(
                f"Version {resolved} is lower than the latest existing version {latest}"
            )
        if resolved != latest:
            logger.info("Bumping version from %s to %s", latest, resolved)
        return resolved

    def section_for_version(
        self,
        version: SectionVersion,
        date_directive: DateDirective = None,
        *,
        require_existing: bool = False,
    ) -> ReleaseSection:
        """Find or create the release section for ``version`` and apply the date.

        The placeholder section never gets a date.

        Raises:
            UnknownReleaseTargetError: If no section exists and one is required,
                or the version is not newer than the latest release
            ImmutableHistoricalDateError: If the date of an older release
                would change
        """
        if isinstance(version, Pending):
            pending = self.document.pending_section
            if pending is not None:
                return pending
            if require_existing:
                raise UnknownReleaseTargetError(f"No {version} section in the changelog")
            logger.info("Adding %s section", version)
            return ReleaseSection(version=version)

        latest = self.latest_version()
        section = self.document.find_section(version)
        if section is None:
            if require_existing or not version > latest:
                raise UnknownReleaseTargetError(
                    f"No {version} release in the changelog (latest is {latest})"
                )
            logger.info("Adding %s section", version)
            section = ReleaseSection(version=version)

        date = render_date(date_directive, self.clock(), self.date_format)
        if date is not None:
            if version < latest:
                raise ImmutableHistoricalDateError(
                    f"Can't alter date of non-latest version {version} (latest is {latest})"
                )
            section.date = date
        return section

    def reconcile(
        self,
        specifier: str | VersionSpecifier,
        *,
        since: str | None = None,
        date_directive: DateDirective = True,
        require_existing: bool = False,
    ) -> ReconcileResult:
        """Resolve the version and merge new change records into its section.

        Args:
            specifier: Version specifier
            since: Reference to read the log from; defaults to the last
                commit that touched the changelog
            date_directive: How to set the release date (see render_date)
            require_existing: Fail unless the section already exists

        Returns:
            ReconcileResult with the updated document
        """
        version = self.resolve_version(specifier)
        section = self.section_for_version(
            version,
            date_directive,
            require_existing=require_existing,
        )

        reference = since or self.change_source.last_changelog_reference()
        records = self.change_source.log_since(reference)
        section.add_changes(self.formatter(record) for record in records)
        self.document.upsert_section(section)

        logger.info("Added %d change(s) to %s", len(records), section.version)
        # An explicit v1.2.3.0 lands in an existing v1.2.3 section; report that.
        return ReconcileResult(
            document=self.document,
            version=section.version,
            section=section,
            records=records,
        )
