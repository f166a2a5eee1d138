"""Run the field analysis pipeline of every config type."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from mod_config_analyzer.aggregate_merging import ConfigTypeAggregate, merge_extracted_fields
from mod_config_analyzer.document_acquisition.document_stores import (
    CONFIG_TYPES,
    ConfigTypeDefinition,
    DocumentLayout,
    DocumentStores,
)
from mod_config_analyzer.field_extraction import extract_fields
from mod_config_analyzer.summary_building import (
    ConfigTypeAnalysis,
    build_entity_summary,
    build_field_summary,
)

logger = logging.getLogger(__name__)


def analyze_config_type(
    definition: ConfigTypeDefinition, store: Mapping[str, Any]
) -> ConfigTypeAnalysis:
    """Fold every document of one config type into an aggregate and summarize it.

    ``store`` maps entity id to its document for single-document types and entity
    id to ``{relative path: document}`` for multi-document types. Entities and
    files are visited in sorted order; falsy documents are skipped.
    """
    logger.info("Analyzing %s", definition.name)
    aggregate: ConfigTypeAggregate = {}
    for entity_id in sorted(store):
        for document in _entity_documents(definition, store[entity_id]):
            if not document:
                continue
            merge_extracted_fields(aggregate, entity_id, extract_fields(document, definition.name))

    entity_summary = build_entity_summary(aggregate)
    field_summary = build_field_summary(aggregate)
    logger.info(
        "Analyzed %d mods with %d unique fields for %s",
        len(entity_summary),
        len(field_summary),
        definition.name,
    )
    return ConfigTypeAnalysis(
        config_type_name=definition.name,
        aggregate=aggregate,
        entity_summary=entity_summary,
        field_summary=field_summary,
    )


def analyze_document_stores(
    stores: DocumentStores, *, parallelism: int = 1
) -> tuple[ConfigTypeAnalysis, ...]:
    """Analyze all config types, returning results in config type order."""
    if parallelism <= 1:
        return tuple(
            analyze_config_type(definition, stores.store_for(definition))
            for definition in CONFIG_TYPES
        )
    with ThreadPoolExecutor(max_workers=min(parallelism, len(CONFIG_TYPES))) as executor:
        futures = [
            executor.submit(analyze_config_type, definition, stores.store_for(definition))
            for definition in CONFIG_TYPES
        ]
        return tuple(future.result() for future in futures)


def _entity_documents(definition: ConfigTypeDefinition, entry: Any) -> list[Any]:
    if definition.layout is DocumentLayout.SINGLE:
        return [entry]
    if not entry:
        return []
    return [entry[relative_path] for relative_path in sorted(entry)]
