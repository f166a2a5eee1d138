"""Spreadsheet export of the field usage of every config type."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from mod_config_analyzer.summary_building import ConfigTypeAnalysis

SUMMARY_SHEET_NAME = "Summary"
SUMMARY_COLUMNS = ("config_type", "entities", "fields", "distinct_values")
FIELD_COLUMNS = ("field_path", "field_kind", "entity_count", "distinct_value_count", "values")

# Excel rejects sheet titles longer than this
_MAX_SHEET_TITLE_LENGTH = 31
# Excel rejects longer cell contents
_MAX_CELL_LENGTH = 32767
_VALUE_SEPARATOR = "\n"


def write_field_usage_workbook(
    analyses: Sequence[ConfigTypeAnalysis], output_path: Path | str
) -> Path:
    """Write a Summary sheet plus one sheet per config type and return the path."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = SUMMARY_SHEET_NAME

    _write_header(sheet, SUMMARY_COLUMNS)
    for row_index, analysis in enumerate(analyses, start=2):
        row = (
            analysis.config_type_name,
            len(analysis.entity_summary),
            len(analysis.field_summary),
            analysis.distinct_value_count,
        )
        _write_row(sheet, row_index, row)

    for analysis in analyses:
        _write_config_type_sheet(workbook, analysis)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)
    return output_path


def _write_config_type_sheet(workbook: Workbook, analysis: ConfigTypeAnalysis) -> None:
    sheet = workbook.create_sheet(analysis.config_type_name[:_MAX_SHEET_TITLE_LENGTH])
    _write_header(sheet, FIELD_COLUMNS)
    sheet.column_dimensions["A"].width = 40
    sheet.column_dimensions[get_column_letter(len(FIELD_COLUMNS))].width = 60
    for row_index, (field_path, usage) in enumerate(analysis.field_summary.items(), start=2):
        row = (
            _cell_text(field_path),
            usage.field_kind.value,
            len(usage.entities),
            len(usage.distinct_values),
            _cell_text(_VALUE_SEPARATOR.join(usage.distinct_values)),
        )
        _write_row(sheet, row_index, row)
    sheet.freeze_panes = "A2"


def _write_header(sheet: Worksheet, columns: Sequence[str]) -> None:
    for column_index, name in enumerate(columns, start=1):
        sheet.cell(row=1, column=column_index, value=name).style = "Headline 1"
        sheet.column_dimensions[get_column_letter(column_index)].width = max(
            12, min(len(name) + 6, 40)
        )


def _write_row(sheet: Worksheet, row_index: int, row: Sequence[object]) -> None:
    for column_index, value in enumerate(row, start=1):
        cell = sheet.cell(row=row_index, column=column_index, value=value)
        if isinstance(value, str) and value.startswith("="):
            # literal text, not a formula
            cell.data_type = "s"


def _cell_text(text: str) -> str:
    return ILLEGAL_CHARACTERS_RE.sub("", text)[:_MAX_CELL_LENGTH]
