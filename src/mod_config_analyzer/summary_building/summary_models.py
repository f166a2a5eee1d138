"""Read-only summary views derived from a config type aggregate."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from mod_config_analyzer.aggregate_merging.aggregate_models import ConfigTypeAggregate
from mod_config_analyzer.field_extraction.field_models import FieldKind


@dataclass(frozen=True)
class EntityFieldUsage:
    """One field used by one entity, with the values that entity used."""

    field_path: str
    field_kind: FieldKind
    values: tuple[str, ...]


@dataclass(frozen=True)
class FieldEntityUsage:
    """One entity contributing to a field."""

    entity_id: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class FieldUsageSummary:
    """Per-entity usage and global distinct values of one field."""

    field_kind: FieldKind
    entities: tuple[FieldEntityUsage, ...]
    distinct_values: tuple[str, ...]


EntitySummary = Mapping[str, tuple[EntityFieldUsage, ...]]
FieldSummary = Mapping[str, FieldUsageSummary]


@dataclass(frozen=True)
class ConfigTypeAnalysis:
    """Finished aggregate of one config type and both views derived from it."""

    config_type_name: str
    aggregate: ConfigTypeAggregate
    entity_summary: EntitySummary
    field_summary: FieldSummary

    @property
    def distinct_value_count(self) -> int:
        return sum(len(usage.distinct_values) for usage in self.field_summary.values())
