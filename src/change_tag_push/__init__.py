"""change-tag-push: update the Changes file from git, then commit, tag and push."""

from __future__ import annotations

__version__ = "1.0.0"
