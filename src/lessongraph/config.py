"""Typed configuration for a lessongraph run.

Settings come from an optional ``lessongraph.yaml`` (in the content root, or
passed explicitly) and are overridden by CLI flags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lessongraph.errors import ConfigError

CONFIG_FILENAME = "lessongraph.yaml"


class LessongraphConfig(BaseModel):
    """Options for extraction, resolution, sequencing and exit-code policy."""

    model_config = ConfigDict(extra="forbid")

    content_prefixes: List[str] = Field(
        default_factory=lambda: ["content/"],
        description="Path prefixes stripped from prerequisite references before matching.",
    )
    extensions: List[str] = Field(default_factory=lambda: [".md"], description="Lesson file suffixes.")
    exclude: List[str] = Field(
        default_factory=list,
        description="Glob patterns (matched from the right, like PurePath.match) for files that are not lessons.",
    )
    include_drafts: bool = False
    strict: bool = False

    @field_validator("content_prefixes", "exclude", mode="before")
    @classmethod
    def strip_items(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [item.strip() if isinstance(item, str) else item for item in value]
        return value

    @field_validator("extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [
                ("." + item.strip().lstrip(".")).lower() if isinstance(item, str) else item
                for item in value
            ]
        return value

    def with_overrides(self, **overrides: Any) -> "LessongraphConfig":
        """Return a copy with every non-None override applied."""
        update = {key: value for key, value in overrides.items() if value is not None}
        return self.model_copy(update=update)


def load_config(path: Optional[Path] = None, content_root: Optional[Path] = None) -> LessongraphConfig:
    """
    Load configuration from YAML.

    Args:
        path: Explicit config file; must exist when given
        content_root: Searched for lessongraph.yaml when path is None

    Returns:
        LessongraphConfig (defaults when no file is found)

    Raises:
        ConfigError: If the file is missing (explicit path), unreadable or invalid
    """
    if path is None:
        if content_root is None:
            return LessongraphConfig()
        candidate = content_root / CONFIG_FILENAME
        if not candidate.is_file():
            return LessongraphConfig()
        path = candidate
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        return LessongraphConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
