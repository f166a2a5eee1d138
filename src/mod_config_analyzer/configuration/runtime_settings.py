"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CacheSettings:
    """Local mod cache location and which document sources to use."""

    directory: Path
    skip_local_cache: bool
    local_cache_only: bool


@dataclass(frozen=True)
class GitHubSettings:
    """GitHub access used to fetch the mod database and mod repositories."""

    token: str | None
    mod_database_repo: str
    mod_database_path: str
    allow_list: tuple[str, ...]
    timeout_seconds: int


@dataclass(frozen=True)
class AnalysisSettings:
    """Where analysis results go and how the config type pipelines run."""

    output_directory: Path
    parallelism: int
    write_workbook: bool


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None
    cache: CacheSettings
    github: GitHubSettings
    analysis: AnalysisSettings
