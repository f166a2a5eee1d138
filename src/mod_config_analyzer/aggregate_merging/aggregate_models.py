"""Aggregate entities shared by every entity of one config type."""

from __future__ import annotations

from dataclasses import dataclass, field

from mod_config_analyzer.field_extraction.field_models import FieldKind


@dataclass
class FieldAggregate:
    """Values observed at one field path, tagged with the entity that contributed them."""

    kind: FieldKind
    per_entity_values: dict[str, set[str]] = field(default_factory=dict)
    all_values: set[str] = field(default_factory=set)


ConfigTypeAggregate = dict[str, FieldAggregate]
