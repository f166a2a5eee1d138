"""Document stores for the six analyzed config types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DocumentLayout(str, Enum):
    """How many documents one entity contributes to a config type."""

    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class ConfigTypeDefinition:
    """One analyzed config type and where its documents come from.

    ``source`` is the document file name for single-document types and the
    directory name for multi-document types.
    """

    name: str
    layout: DocumentLayout
    source: str


MANIFEST = ConfigTypeDefinition("manifest", DocumentLayout.SINGLE, "manifest.json")
TITLE_SCREEN = ConfigTypeDefinition("title-screen", DocumentLayout.SINGLE, "title-screen.json")
ADDON_MANIFEST = ConfigTypeDefinition(
    "addon-manifest", DocumentLayout.SINGLE, "addon-manifest.json"
)
DEFAULT_CONFIG = ConfigTypeDefinition(
    "default-config", DocumentLayout.SINGLE, "default-config.json"
)
PLANETS = ConfigTypeDefinition("planets", DocumentLayout.MULTI, "planets")
SYSTEMS = ConfigTypeDefinition("systems", DocumentLayout.MULTI, "systems")

CONFIG_TYPES: tuple[ConfigTypeDefinition, ...] = (
    MANIFEST,
    TITLE_SCREEN,
    ADDON_MANIFEST,
    DEFAULT_CONFIG,
    PLANETS,
    SYSTEMS,
)
CONFIG_TYPE_NAMES: tuple[str, ...] = tuple(definition.name for definition in CONFIG_TYPES)

# Metadata documents found next to the manifest, keyed by file name.
METADATA_CONFIG_TYPES: tuple[ConfigTypeDefinition, ...] = (
    TITLE_SCREEN,
    ADDON_MANIFEST,
    DEFAULT_CONFIG,
)
MULTI_DOCUMENT_CONFIG_TYPES: tuple[ConfigTypeDefinition, ...] = (PLANETS, SYSTEMS)

SingleDocumentStore = dict[str, Any]
MultiDocumentStore = dict[str, dict[str, Any]]


@dataclass
class DocumentStores:
    """Documents of every config type for one analysis run, keyed by entity."""

    single: dict[str, SingleDocumentStore] = field(
        default_factory=lambda: {
            definition.name: {}
            for definition in CONFIG_TYPES
            if definition.layout is DocumentLayout.SINGLE
        }
    )
    multi: dict[str, MultiDocumentStore] = field(
        default_factory=lambda: {
            definition.name: {}
            for definition in CONFIG_TYPES
            if definition.layout is DocumentLayout.MULTI
        }
    )

    def put_document(
        self, definition: ConfigTypeDefinition, entity_id: str, document: Any
    ) -> None:
        """Store the single document of ``entity_id``, replacing an older one."""
        if definition.layout is not DocumentLayout.SINGLE:
            raise ValueError(f"{definition.name} stores several documents per entity.")
        self.single[definition.name][entity_id] = document

    def put_file_document(
        self,
        definition: ConfigTypeDefinition,
        entity_id: str,
        relative_path: str,
        document: Any,
    ) -> None:
        """Store one of the documents of ``entity_id`` under its relative file path."""
        if definition.layout is not DocumentLayout.MULTI:
            raise ValueError(f"{definition.name} stores one document per entity.")
        self.multi[definition.name].setdefault(entity_id, {})[relative_path] = document

    def store_for(
        self, definition: ConfigTypeDefinition
    ) -> SingleDocumentStore | MultiDocumentStore:
        if definition.layout is DocumentLayout.SINGLE:
            return self.single[definition.name]
        return self.multi[definition.name]

    def entity_ids(self) -> set[str]:
        entity_ids: set[str] = set()
        for single_store in self.single.values():
            entity_ids.update(single_store)
        for multi_store in self.multi.values():
            entity_ids.update(multi_store)
        return entity_ids

    def drop_entity(self, entity_id: str) -> None:
        """Remove every document of ``entity_id`` from all config types."""
        for single_store in self.single.values():
            single_store.pop(entity_id, None)
        for multi_store in self.multi.values():
            multi_store.pop(entity_id, None)
