"""Configuration models.

Read from the ``[tool.change-tag-push]`` table of pyproject.toml. Every
field has a default, so a project without any configuration works.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from change_tag_push.core.changelog import DEFAULT_NEXT_TOKEN, DEFAULT_WRAP_COLUMNS
from change_tag_push.core.reconcile import DEFAULT_DATE_FORMAT


class ChangelogConfig(BaseModel):
    """Changelog file settings."""

    model_config = ConfigDict(extra="forbid")

    path: Path = Path("Changes")
    preamble: str | None = None
    next_token: str = DEFAULT_NEXT_TOKEN
    wrap_columns: int = Field(default=DEFAULT_WRAP_COLUMNS, ge=20)
    date_format: str = DEFAULT_DATE_FORMAT

    @field_validator("next_token")
    @classmethod
    def _single_token(cls, value: str) -> str:
        if not value or any(c.isspace() for c in value):
            raise ValueError("next_token must be a non-empty token without whitespace")
        return value


class GitConfig(BaseModel):
    """Commit, tag and push settings."""

    model_config = ConfigDict(extra="forbid")

    allow_dirty: bool = False
    remote: str | None = None
    tag_message: str = "{version}"


class ChangeTagPushConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    editor: str | None = None
