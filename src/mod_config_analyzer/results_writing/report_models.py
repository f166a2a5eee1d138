"""Results writing entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PER_ENTITY_SUMMARY_FILENAME = "per-entity-summary.json"
PER_FIELD_SUMMARY_FILENAME = "per-field-summary.json"
REPORT_FILENAME = "index.html"
WORKBOOK_FILENAME = "field-usage.xlsx"

# field path -> per-field record of one config type, as persisted
FieldSummaryRecords = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class SummaryPaths:
    """Files written for one config type."""

    per_entity_summary: Path
    per_field_summary: Path


@dataclass(frozen=True)
class ReportStatistics:
    """Totals rendered at the top of the HTML report."""

    entity_count: int
    field_count: int
    distinct_value_count: int

    @classmethod
    def from_field_summaries(
        cls, field_summaries: Mapping[str, FieldSummaryRecords]
    ) -> ReportStatistics:
        entity_ids: set[str] = set()
        field_count = 0
        distinct_value_count = 0
        for fields in field_summaries.values():
            field_count += len(fields)
            for record in fields.values():
                entity_ids.update(entity["entity_id"] for entity in record.get("entities", []))
                distinct_value_count += len(record.get("distinct_values", []))
        return cls(
            entity_count=len(entity_ids),
            field_count=field_count,
            distinct_value_count=distinct_value_count,
        )
