"""Summary building exports."""

from .summary_builder import (
    build_entity_summary,
    build_field_summary,
    entity_summary_to_records,
    field_summary_to_records,
)
from .summary_models import (
    ConfigTypeAnalysis,
    EntityFieldUsage,
    EntitySummary,
    FieldEntityUsage,
    FieldSummary,
    FieldUsageSummary,
)

__all__ = [
    "ConfigTypeAnalysis",
    "EntityFieldUsage",
    "EntitySummary",
    "FieldEntityUsage",
    "FieldSummary",
    "FieldUsageSummary",
    "build_entity_summary",
    "build_field_summary",
    "entity_summary_to_records",
    "field_summary_to_records",
]
