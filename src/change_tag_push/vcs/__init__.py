"""Version control integration."""

from __future__ import annotations

from change_tag_push.vcs.git import Commit, GitRepository

__all__ = ["Commit", "GitRepository"]
