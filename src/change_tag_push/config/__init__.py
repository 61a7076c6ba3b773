"""Configuration management for change-tag-push."""

from __future__ import annotations

from change_tag_push.config.loader import load_config
from change_tag_push.config.models import (
    ChangelogConfig,
    ChangeTagPushConfig,
    GitConfig,
)

__all__ = [
    "ChangeTagPushConfig",
    "ChangelogConfig",
    "GitConfig",
    "load_config",
]
