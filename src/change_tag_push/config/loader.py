"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from change_tag_push.config.models import ChangeTagPushConfig
from change_tag_push.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_NAME = "change-tag-push"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Load and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.change-tag-push]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_NAME, {})


def load_config(path: Path | None = None) -> ChangeTagPushConfig:
    """Load configuration for the project at ``path``.

    Args:
        path: Project directory or an explicit pyproject.toml file.
              Defaults are used when a directory has no pyproject.toml.

    Raises:
        ConfigNotFoundError: If an explicit file path does not exist
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and path.suffix == ".toml":
        data = load_pyproject_toml(path)
    else:
        try:
            data = load_pyproject_toml(find_pyproject_toml(path))
        except ConfigNotFoundError:
            logger.debug("No pyproject.toml found, using default configuration")
            return ChangeTagPushConfig()

    try:
        return ChangeTagPushConfig.model_validate(extract_tool_config(data))
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_NAME}] configuration:\n{e}") from e


def get_project_name(path: Path | None = None) -> str | None:
    """Project name from ``[project].name`` or ``[tool.poetry].name``, if any."""
    try:
        data = load_pyproject_toml(find_pyproject_toml(path))
    except ConfigNotFoundError:
        return None
    name = data.get("project", {}).get("name") or data.get("tool", {}).get("poetry", {}).get(
        "name"
    )
    return name or None
