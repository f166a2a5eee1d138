"""Write fetched documents into the versioned local mod cache."""

from __future__ import annotations

import json
import shutil
import tempfile
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

LATEST_MANIFEST_FILENAME = "manifest.json"
DEFAULT_VERSION = "0.0.0"

_STAGING_PREFIX = ".staging-"


def manifest_version(manifest: Any) -> str:
    """Return the version a manifest declares, or the default version."""
    if isinstance(manifest, Mapping):
        version = manifest.get("version")
        if isinstance(version, str) and is_safe_path_component(version.strip()):
            return version.strip()
    return DEFAULT_VERSION


def is_safe_path_component(name: str) -> bool:
    """Tell whether ``name`` can be used as one cache directory name."""
    return bool(name) and name not in (".", "..") and not any(sep in name for sep in "/\\")


def version_directory(cache_dir: Path, entity_id: str, version: str) -> Path:
    return cache_dir / entity_id / version


def is_version_cached(cache_dir: Path, entity_id: str, version: str) -> bool:
    return version_directory(cache_dir, entity_id, version).is_dir()


def write_cached_document(
    cache_dir: Path,
    entity_id: str,
    version: str,
    relative_path: str,
    document: Any,
) -> Path:
    """Write one document below the entity's version directory.

    ``relative_path`` uses forward slashes and may not leave the version directory.
    """
    return _write_below(
        version_directory(cache_dir, entity_id, version), entity_id, relative_path, document
    )


def write_cached_version(
    cache_dir: Path,
    entity_id: str,
    version: str,
    documents: Mapping[str, Any],
) -> Path:
    """Write all documents of one entity version, replacing what was cached for it.

    Documents go to a staging directory that is moved into place only once every
    write succeeded, so a version directory is never left incomplete.
    """
    entity_dir = cache_dir / entity_id
    entity_dir.mkdir(parents=True, exist_ok=True)
    staging_dir = Path(tempfile.mkdtemp(prefix=_STAGING_PREFIX, dir=entity_dir))
    destination = version_directory(cache_dir, entity_id, version)
    try:
        for relative_path, document in documents.items():
            _write_below(staging_dir, entity_id, relative_path, document)
        if destination.exists():
            shutil.rmtree(destination)
        staging_dir.rename(destination)
    except (OSError, ValueError, TypeError):
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise
    return destination


def write_latest_manifest(cache_dir: Path, entity_id: str, manifest: Any) -> Path:
    """Record the newest manifest of an entity next to its version directories."""
    destination = cache_dir / entity_id / LATEST_MANIFEST_FILENAME
    _write_json(destination, manifest)
    return destination


def _write_below(root: Path, entity_id: str, relative_path: str, document: Any) -> Path:
    parts = PurePosixPath(relative_path).parts
    if not parts or ".." in parts or PurePosixPath(relative_path).is_absolute():
        raise ValueError(f"Invalid cache path for {entity_id}: {relative_path}")
    destination = root.joinpath(*parts)
    _write_json(destination, document)
    return destination


def _write_json(destination: Path, document: Any) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
