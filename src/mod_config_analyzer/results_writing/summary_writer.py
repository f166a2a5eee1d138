"""Persist and reload the per-config-type JSON summaries."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from mod_config_analyzer.summary_building import (
    ConfigTypeAnalysis,
    entity_summary_to_records,
    field_summary_to_records,
)

from .report_models import (
    PER_ENTITY_SUMMARY_FILENAME,
    PER_FIELD_SUMMARY_FILENAME,
    FieldSummaryRecords,
    SummaryPaths,
)

logger = logging.getLogger(__name__)


def write_analysis_summaries(analysis: ConfigTypeAnalysis, output_dir: Path | str) -> SummaryPaths:
    """Write both summaries of one config type below ``output_dir/<config type>``."""
    type_dir = Path(output_dir) / analysis.config_type_name
    type_dir.mkdir(parents=True, exist_ok=True)
    paths = SummaryPaths(
        per_entity_summary=type_dir / PER_ENTITY_SUMMARY_FILENAME,
        per_field_summary=type_dir / PER_FIELD_SUMMARY_FILENAME,
    )
    _write_json(paths.per_entity_summary, entity_summary_to_records(analysis.entity_summary))
    _write_json(paths.per_field_summary, field_summary_to_records(analysis.field_summary))
    logger.debug("Wrote summaries for %s to %s", analysis.config_type_name, type_dir)
    return paths


def load_field_summaries(
    output_dir: Path | str, config_type_names: Sequence[str]
) -> dict[str, FieldSummaryRecords]:
    """Load the persisted per-field summaries, leaving out anything that cannot be read.

    Missing or unparsable files drop their config type. Field records that do not
    have the written shape are dropped one by one.
    """
    summaries: dict[str, FieldSummaryRecords] = {}
    for config_type_name in config_type_names:
        summary_path = Path(output_dir) / config_type_name / PER_FIELD_SUMMARY_FILENAME
        try:
            content = json.loads(summary_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not load summary for %s: %s", config_type_name, exc)
            continue
        if not isinstance(content, Mapping):
            logger.warning("Could not load summary for %s: not a JSON object", config_type_name)
            continue
        records: dict[str, Mapping[str, Any]] = {}
        for field_path, record in content.items():
            if _is_field_record(record):
                records[field_path] = record
            else:
                logger.warning(
                    "Skipping malformed summary record %s of %s", field_path, config_type_name
                )
        summaries[config_type_name] = records
    return summaries


def _is_field_record(record: Any) -> bool:
    if not isinstance(record, Mapping):
        return False
    entities = record.get("entities", [])
    distinct_values = record.get("distinct_values", [])
    if not isinstance(entities, list) or not _is_string_list(distinct_values):
        return False
    return all(
        isinstance(entity, Mapping)
        and isinstance(entity.get("entity_id"), str)
        and _is_string_list(entity.get("values", []))
        for entity in entities
    )


def _is_string_list(values: Any) -> bool:
    return isinstance(values, list) and all(isinstance(value, str) for value in values)


def _write_json(destination: Path, records: Any) -> None:
    destination.write_text(
        json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )
