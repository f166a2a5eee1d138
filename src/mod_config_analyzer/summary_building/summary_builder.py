"""Derive by-entity and by-field views from a finished aggregate."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from mod_config_analyzer.aggregate_merging.aggregate_models import ConfigTypeAggregate

from .summary_models import (
    EntityFieldUsage,
    EntitySummary,
    FieldEntityUsage,
    FieldSummary,
    FieldUsageSummary,
)


def build_entity_summary(aggregate: ConfigTypeAggregate) -> EntitySummary:
    """Return entity -> fields used by that entity, both sorted."""
    rows_by_entity: dict[str, list[EntityFieldUsage]] = {}
    for field_path, field_aggregate in aggregate.items():
        for entity_id, values in field_aggregate.per_entity_values.items():
            if not values:
                continue
            rows_by_entity.setdefault(entity_id, []).append(
                EntityFieldUsage(
                    field_path=field_path,
                    field_kind=field_aggregate.kind,
                    values=tuple(sorted(values)),
                )
            )
    return MappingProxyType(
        {
            entity_id: tuple(sorted(rows_by_entity[entity_id], key=lambda row: row.field_path))
            for entity_id in sorted(rows_by_entity)
        }
    )


def build_field_summary(aggregate: ConfigTypeAggregate) -> FieldSummary:
    """Return field -> contributing entities and distinct values, all sorted."""
    summary: dict[str, FieldUsageSummary] = {}
    for field_path in sorted(aggregate):
        field_aggregate = aggregate[field_path]
        summary[field_path] = FieldUsageSummary(
            field_kind=field_aggregate.kind,
            entities=tuple(
                FieldEntityUsage(entity_id=entity_id, values=tuple(sorted(values)))
                for entity_id, values in sorted(field_aggregate.per_entity_values.items())
            ),
            distinct_values=tuple(sorted(field_aggregate.all_values)),
        )
    return MappingProxyType(summary)


def entity_summary_to_records(summary: EntitySummary) -> dict[str, list[dict[str, Any]]]:
    """Convert the by-entity view into JSON-ready records."""
    return {
        entity_id: [
            {
                "field_path": row.field_path,
                "field_kind": row.field_kind.value,
                "values": list(row.values),
            }
            for row in rows
        ]
        for entity_id, rows in summary.items()
    }


def field_summary_to_records(summary: FieldSummary) -> dict[str, dict[str, Any]]:
    """Convert the by-field view into JSON-ready records."""
    return {
        field_path: {
            "field_kind": usage.field_kind.value,
            "entities": [
                {"entity_id": entity.entity_id, "values": list(entity.values)}
                for entity in usage.entities
            ],
            "distinct_values": list(usage.distinct_values),
        }
        for field_path, usage in summary.items()
    }
