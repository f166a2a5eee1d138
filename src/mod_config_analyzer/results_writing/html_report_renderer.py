"""Render the browsable HTML report from persisted per-field summaries."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from html import escape
from pathlib import Path
from typing import Any

from .report_models import REPORT_FILENAME, FieldSummaryRecords, ReportStatistics
from .summary_writer import load_field_summaries

logger = logging.getLogger(__name__)

_STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background-color: #0b1220;
            color: #e5e7eb;
            line-height: 1.6;
            padding: 20px;
        }
        .container {
            max-width: 1200px;
            margin: 0 auto;
            background-color: #111827;
            border-radius: 8px;
        }
        .header {
            background: linear-gradient(135deg, #1f2937 0%, #0f172a 100%);
            padding: 30px;
        }
        .header h1 { font-size: 2em; margin-bottom: 10px; }
        .content { padding: 30px; }
        .stats {
            margin-bottom: 30px;
            padding: 20px;
            background-color: #0f172a;
            border-radius: 6px;
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 20px;
        }
        .stat-box { text-align: center; }
        .stat-number { font-size: 2em; font-weight: bold; color: #c4b5fd; }
        .stat-label { color: #cbd5e1; font-size: 0.9em; margin-top: 5px; }
        .config-type { margin-bottom: 30px; border: 1px solid #1f2937; border-radius: 6px; }
        .config-type-header, .field-header {
            cursor: pointer;
            user-select: none;
            display: flex;
            align-items: center;
            gap: 10px;
        }
        .config-type-header {
            padding: 15px 20px;
            border-bottom: 1px solid #1f2937;
            font-weight: 600;
            color: #c4b5fd;
        }
        .config-type-content { padding: 20px; }
        .collapsed + .config-type-content, .field-values.collapsed { display: none; }
        .toggle-icon { display: inline-block; transition: transform 0.2s; }
        .collapsed .toggle-icon { transform: rotate(-90deg); }
        .field {
            margin-bottom: 15px;
            background-color: #0f172a;
            border-left: 3px solid #a78bfa;
            padding: 12px 15px;
            border-radius: 4px;
        }
        .field-name { font-weight: 600; word-break: break-word; }
        .field-kind {
            font-size: 0.8em;
            background-color: #1f2937;
            color: #cbd5e1;
            padding: 2px 8px;
            border-radius: 12px;
        }
        .count { margin-left: auto; font-size: 0.85em; color: #999; }
        .field-values { margin: 8px 0 0 24px; }
        .value-item {
            padding: 8px 12px;
            margin-bottom: 6px;
            background-color: #0d1528;
            border: 1px solid #1f2937;
            border-radius: 4px;
        }
        .value-text { font-family: 'Courier New', monospace; word-break: break-word; }
        .entity-list { display: flex; flex-wrap: wrap; gap: 6px; margin-top: 6px; }
        .entity-badge {
            background-color: #1f2937;
            color: #c4b5fd;
            padding: 2px 10px;
            border-radius: 4px;
            font-size: 0.85em;
        }
"""

_SCRIPT = """
        document.querySelectorAll('.config-type-header').forEach(header => {
            header.addEventListener('click', () => header.classList.toggle('collapsed'));
        });
        document.querySelectorAll('.field-header').forEach(header => {
            header.addEventListener('click', event => {
                event.stopPropagation();
                header.classList.toggle('collapsed');
                header.nextElementSibling.classList.toggle('collapsed');
            });
        });
"""


def render_html_report(output_dir: Path | str, config_type_names: Sequence[str]) -> Path:
    """Write ``index.html`` into ``output_dir`` and return its path.

    Config types whose per-field summary is missing or unreadable are left out of
    the report.
    """
    output_dir = Path(output_dir)
    field_summaries = load_field_summaries(output_dir, config_type_names)
    report_path = output_dir / REPORT_FILENAME
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path.write_text(build_html_document(field_summaries), encoding="utf-8")
    logger.info("Generated HTML report: %s", report_path)
    return report_path


def build_html_document(field_summaries: Mapping[str, FieldSummaryRecords]) -> str:
    statistics = ReportStatistics.from_field_summaries(field_summaries)
    config_types_html = "".join(
        _config_type_html(name, field_summaries[name]) for name in sorted(field_summaries)
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Config Analysis Report</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Config Analysis Report</h1>
            <p>Interactive exploration of mod configuration files</p>
        </div>
        <div class="content">
            <div class="stats">{_statistics_html(statistics)}
            </div>{config_types_html}
        </div>
    </div>
    <script>{_SCRIPT}    </script>
</body>
</html>
"""


def _statistics_html(statistics: ReportStatistics) -> str:
    boxes = (
        (statistics.entity_count, "Mods"),
        (statistics.field_count, "Unique Fields"),
        (statistics.distinct_value_count, "Distinct Values"),
    )
    return "".join(
        f"""
                <div class="stat-box">
                    <div class="stat-number">{number}</div>
                    <div class="stat-label">{label}</div>
                </div>"""
        for number, label in boxes
    )


def _config_type_html(config_type_name: str, fields: FieldSummaryRecords) -> str:
    fields_html = "".join(
        _field_html(field_path, fields[field_path]) for field_path in sorted(fields)
    )
    return f"""
            <div class="config-type">
                <div class="config-type-header">
                    <span class="toggle-icon">&#9660;</span>
                    <span>{escape(config_type_name)}</span>
                    <span class="count">{_plural(len(fields), 'field')}</span>
                </div>
                <div class="config-type-content">{fields_html}
                </div>
            </div>"""


def _field_html(field_path: str, record: Mapping[str, Any]) -> str:
    entities = record.get("entities", [])
    entity_ids = sorted(entity["entity_id"] for entity in entities)
    entity_ids_by_value: dict[str, list[str]] = {}
    for entity in entities:
        for value in entity.get("values", []):
            entity_ids_by_value.setdefault(value, []).append(entity["entity_id"])
    distinct_values = sorted(record.get("distinct_values", []))
    values_html = "".join(
        _value_html(value, sorted(entity_ids_by_value.get(value, [])))
        for value in distinct_values
    )
    field_kind = escape(str(record.get("field_kind", "")))
    counts = f"{_plural(len(entity_ids), 'mod')}, {_plural(len(distinct_values), 'value')}"
    return f"""
                    <div class="field">
                        <div class="field-header collapsed">
                            <span class="toggle-icon">&#9660;</span>
                            <span class="field-name">{escape(field_path)}</span>
                            <span class="field-kind">{field_kind}</span>
                            <span class="count">{counts}</span>
                        </div>
                        <div class="field-values collapsed">
                            <div class="entity-list">{_entity_badges(entity_ids)}</div>{values_html}
                        </div>
                    </div>"""


def _value_html(value: str, entity_ids: Sequence[str]) -> str:
    return f"""
                            <div class="value-item">
                                <span class="value-text">{escape(value)}</span>
                                <span class="count">Used by {_plural(len(entity_ids), 'mod')}</span>
                                <div class="entity-list">{_entity_badges(entity_ids)}</div>
                            </div>"""


def _entity_badges(entity_ids: Sequence[str]) -> str:
    return "".join(
        f'<span class="entity-badge">{escape(entity_id)}</span>' for entity_id in entity_ids
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
