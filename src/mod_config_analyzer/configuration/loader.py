"""Configuration loader service."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import AnalysisSettings, CacheSettings, Configuration, GitHubSettings

DEFAULT_CACHE_DIRECTORY = "mod-cache"
DEFAULT_OUTPUT_DIRECTORY = "analysis"
DEFAULT_MOD_DATABASE_REPO = "ow-mods/ow-mod-db"
DEFAULT_MOD_DATABASE_PATH = "mods.json"

SKIP_LOCAL_CACHE_ENV = "SKIP_LOCAL_CACHE"
LOCAL_CACHE_ONLY_ENV = "LOCAL_CACHE_ONLY"
MOD_ALLOW_LIST_ENV = "MOD_ALLOW_LIST"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(
    config_path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Configuration:
    """Load and validate the configuration file, then apply environment overrides.

    Without a configuration file every setting takes its default and relative
    directories resolve against the current working directory.
    """
    env = os.environ if environ is None else environ
    path: Path | None = None
    parsed: Any = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        text = path.read_text(encoding="utf-8")
        try:
            parsed = yaml.safe_load(text)
        except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
            raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.parent if path is not None else Path.cwd()
    cache = _parse_cache_section(parsed.get("cache"), base_path, env)
    github = _parse_github_section(parsed.get("github"), env)
    analysis = _parse_analysis_section(parsed.get("analysis"), base_path)

    return Configuration(path=path, cache=cache, github=github, analysis=analysis)


def _parse_cache_section(value: Any, base_path: Path, env: Mapping[str, str]) -> CacheSettings:
    section = _optional_mapping(value, "cache")
    directory = _require_non_empty_string(
        section.get("directory", DEFAULT_CACHE_DIRECTORY), "cache.directory"
    )
    skip_local_cache = _env_flag(
        env,
        SKIP_LOCAL_CACHE_ENV,
        _require_bool(section.get("skip_local_cache", False), "cache.skip_local_cache"),
    )
    local_cache_only = _env_flag(
        env,
        LOCAL_CACHE_ONLY_ENV,
        _require_bool(section.get("local_cache_only", False), "cache.local_cache_only"),
    )
    if skip_local_cache and local_cache_only:
        raise ConfigurationError(
            "cache.skip_local_cache and cache.local_cache_only cannot both be enabled."
        )
    return CacheSettings(
        directory=_resolve_path(base_path, directory),
        skip_local_cache=skip_local_cache,
        local_cache_only=local_cache_only,
    )


def _parse_github_section(value: Any, env: Mapping[str, str]) -> GitHubSettings:
    section = _optional_mapping(value, "github")
    token = _optional_string(section.get("token"), "github.token")
    env_token = env.get(GITHUB_TOKEN_ENV, "").strip()
    if env_token:
        token = env_token
    mod_database_repo = _require_non_empty_string(
        section.get("mod_database_repo", DEFAULT_MOD_DATABASE_REPO), "github.mod_database_repo"
    )
    if mod_database_repo.count("/") != 1 or not all(mod_database_repo.split("/")):
        raise ConfigurationError("github.mod_database_repo must look like 'owner/repo'.")
    mod_database_path = _require_non_empty_string(
        section.get("mod_database_path", DEFAULT_MOD_DATABASE_PATH), "github.mod_database_path"
    )
    allow_list = _normalize_string_sequence(section.get("allow_list"), "github.allow_list")
    env_allow_list = env.get(MOD_ALLOW_LIST_ENV)
    if env_allow_list is not None and env_allow_list.strip():
        allow_list = _normalize_string_sequence(env_allow_list.split(","), MOD_ALLOW_LIST_ENV)
    timeout_seconds = _require_positive_int(
        section.get("timeout_seconds", 30), "github.timeout_seconds"
    )
    return GitHubSettings(
        token=token,
        mod_database_repo=mod_database_repo,
        mod_database_path=mod_database_path,
        allow_list=allow_list,
        timeout_seconds=timeout_seconds,
    )


def _parse_analysis_section(value: Any, base_path: Path) -> AnalysisSettings:
    section = _optional_mapping(value, "analysis")
    output_directory = _require_non_empty_string(
        section.get("output_directory", DEFAULT_OUTPUT_DIRECTORY), "analysis.output_directory"
    )
    parallelism = _require_positive_int(section.get("parallelism", 1), "analysis.parallelism")
    write_workbook = _require_bool(section.get("write_workbook", True), "analysis.write_workbook")
    return AnalysisSettings(
        output_directory=_resolve_path(base_path, output_directory),
        parallelism=parallelism,
        write_workbook=write_workbook,
    )


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() == "true"


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
