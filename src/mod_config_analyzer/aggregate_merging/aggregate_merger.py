"""Provenance-preserving merge of extracted fields into a config type aggregate."""

from __future__ import annotations

from collections.abc import Mapping

from mod_config_analyzer.field_extraction.field_models import ObservedField

from .aggregate_models import ConfigTypeAggregate, FieldAggregate


def merge_extracted_fields(
    aggregate: ConfigTypeAggregate,
    entity_id: str,
    extracted: Mapping[str, ObservedField],
) -> None:
    """Fold one document's fields into ``aggregate`` under ``entity_id``.

    The kind of an existing field is never revised. Re-merging the same input is a
    no-op, and an entity may contribute to one field from several documents.
    """
    for field_path, observed in extracted.items():
        field_aggregate = aggregate.get(field_path)
        if field_aggregate is None:
            field_aggregate = FieldAggregate(kind=observed.kind)
            aggregate[field_path] = field_aggregate
        entity_values = field_aggregate.per_entity_values.setdefault(entity_id, set())
        entity_values.update(observed.values)
        field_aggregate.all_values.update(observed.values)
