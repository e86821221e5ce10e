"""
Lathe Config - Engine settings

Pydantic model holding the knobs shared by the tree loader, the symbol
index and the manifest updater. Values can come from LATHE_* environment
variables.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator


DEFAULT_IGNORED_DIRS = [
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".gradle",
    "target",
    "build",
    "node_modules",
    "__pycache__",
]


class LatheConfig(BaseModel):
    """Engine configuration."""

    manifest_path: str = Field(default="pom.xml", alias="manifestPath")
    source_suffixes: list[str] = Field(default=[".java", ".kt"], alias="sourceSuffixes")
    ignored_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DIRS),
        alias="ignoredDirs",
    )
    encoding: str = "utf-8"
    log_level: str = Field(default="WARNING", alias="logLevel")

    model_config = {"populate_by_name": True}

    @field_validator("source_suffixes")
    @classmethod
    def normalize_suffixes(cls, v: list[str]) -> list[str]:
        """Accept suffixes with or without the leading dot"""
        return [s if s.startswith(".") else f".{s}" for s in (x.strip() for x in v) if s]

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def from_env(cls) -> "LatheConfig":
        """
        Build a config from environment variables.

        Recognised variables (all optional):
            LATHE_MANIFEST_PATH, LATHE_SOURCE_SUFFIXES (comma-separated),
            LATHE_ENCODING, LATHE_LOG_LEVEL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LATHE_MANIFEST_PATH"):
            kwargs["manifest_path"] = os.environ["LATHE_MANIFEST_PATH"]
        if os.environ.get("LATHE_SOURCE_SUFFIXES"):
            kwargs["source_suffixes"] = os.environ["LATHE_SOURCE_SUFFIXES"].split(",")
        if os.environ.get("LATHE_ENCODING"):
            kwargs["encoding"] = os.environ["LATHE_ENCODING"]
        if os.environ.get("LATHE_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["LATHE_LOG_LEVEL"]
        return cls(**kwargs)
