"""Results writing domain exports."""

from .field_workbook_writer import write_field_usage_workbook
from .html_report_renderer import build_html_document, render_html_report
from .report_models import (
    PER_ENTITY_SUMMARY_FILENAME,
    PER_FIELD_SUMMARY_FILENAME,
    REPORT_FILENAME,
    WORKBOOK_FILENAME,
    ReportStatistics,
    SummaryPaths,
)
from .summary_writer import load_field_summaries, write_analysis_summaries

__all__ = [
    "PER_ENTITY_SUMMARY_FILENAME",
    "PER_FIELD_SUMMARY_FILENAME",
    "REPORT_FILENAME",
    "WORKBOOK_FILENAME",
    "ReportStatistics",
    "SummaryPaths",
    "build_html_document",
    "load_field_summaries",
    "render_html_report",
    "write_analysis_summaries",
    "write_field_usage_workbook",
]
