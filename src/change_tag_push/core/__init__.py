"""Core business logic for change-tag-push.

This module contains the fundamental building blocks:
- Version parsing, comparison and bumping
- The structured changelog document
- Change records harvested from git
- Release reconciliation and the release workflow
"""

from __future__ import annotations

from change_tag_push.core.changelog import ChangelogDocument, Pending, ReleaseSection
from change_tag_push.core.changes import ChangeRecord, ChangeSource, GitChangeSource, format_change
from change_tag_push.core.reconcile import ReconcileResult, ReleaseReconciler, render_date
from change_tag_push.core.version import (
    BumpType,
    Version,
    VersionSpecifier,
    classify_specifier,
    compare_versions,
    increment_version,
    parse_version,
)
from change_tag_push.core.workflow import Interaction, ReleaseWorkflow

__all__ = [
    # Version
    "BumpType",
    # Changes
    "ChangeRecord",
    "ChangeSource",
    # Changelog
    "ChangelogDocument",
    "GitChangeSource",
    # Workflow
    "Interaction",
    "Pending",
    # Reconciliation
    "ReconcileResult",
    "ReleaseReconciler",
    "ReleaseSection",
    "ReleaseWorkflow",
    "Version",
    "VersionSpecifier",
    "classify_specifier",
    "compare_versions",
    "format_change",
    "increment_version",
    "parse_version",
    "render_date",
]
