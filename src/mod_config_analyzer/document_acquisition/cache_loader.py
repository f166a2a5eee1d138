"""Load cached mod documents from the local file system."""

from __future__ import annotations

import logging
from pathlib import Path

from .cache_writer import LATEST_MANIFEST_FILENAME, manifest_version, version_directory
from .document_parsing import DocumentParseError, read_document
from .document_stores import (
    MANIFEST,
    METADATA_CONFIG_TYPES,
    MULTI_DOCUMENT_CONFIG_TYPES,
    ConfigTypeDefinition,
    DocumentStores,
)

logger = logging.getLogger(__name__)


def load_document_stores_from_cache(cache_dir: Path, stores: DocumentStores) -> int:
    """Load every cached entity into ``stores`` and return how many were loaded.

    The latest manifest of an entity decides which version directory is read.
    Unreadable documents are logged and left out.
    """
    if not cache_dir.is_dir():
        logger.info("No local cache found at %s", cache_dir)
        return 0

    logger.info("Loading mods from local cache %s", cache_dir)
    loaded = 0
    for entity_dir in sorted(path for path in cache_dir.iterdir() if path.is_dir()):
        if _load_entity(cache_dir, entity_dir.name, stores):
            loaded += 1
    logger.info("Loaded %d mods from local cache", loaded)
    return loaded


def _load_entity(cache_dir: Path, entity_id: str, stores: DocumentStores) -> bool:
    manifest_path = cache_dir / entity_id / LATEST_MANIFEST_FILENAME
    if not manifest_path.is_file():
        logger.warning("Skipping cached mod %s without %s", entity_id, LATEST_MANIFEST_FILENAME)
        return False
    try:
        manifest = read_document(manifest_path)
    except DocumentParseError as exc:
        logger.warning("Skipping cached mod %s: %s", entity_id, exc)
        return False
    stores.put_document(MANIFEST, entity_id, manifest)

    mod_dir = version_directory(cache_dir, entity_id, manifest_version(manifest))
    if not mod_dir.is_dir():
        return True

    for definition in METADATA_CONFIG_TYPES:
        document_path = mod_dir / definition.source
        if not document_path.is_file():
            continue
        try:
            stores.put_document(definition, entity_id, read_document(document_path))
        except DocumentParseError as exc:
            logger.warning("Ignoring cached %s of %s: %s", definition.source, entity_id, exc)

    for definition in MULTI_DOCUMENT_CONFIG_TYPES:
        _load_directory(mod_dir, definition, entity_id, stores)
    return True


def _load_directory(
    mod_dir: Path,
    definition: ConfigTypeDefinition,
    entity_id: str,
    stores: DocumentStores,
) -> None:
    config_dirs = [
        path
        for path in sorted(mod_dir.iterdir())
        if path.is_dir() and path.name.lower() == definition.source.lower()
    ]
    for config_dir in config_dirs:
        for document_path in sorted(config_dir.rglob("*")):
            if not document_path.is_file() or document_path.suffix.lower() != ".json":
                continue
            relative_path = document_path.relative_to(mod_dir).as_posix()
            try:
                document = read_document(document_path)
            except DocumentParseError as exc:
                logger.warning("Ignoring cached %s of %s: %s", relative_path, entity_id, exc)
                continue
            stores.put_file_document(definition, entity_id, relative_path, document)
