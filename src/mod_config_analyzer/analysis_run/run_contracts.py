"""Analysis run entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mod_config_analyzer.summary_building import ConfigTypeAnalysis


@dataclass(frozen=True)
class AnalysisRequest:
    """Input contract for executing one analysis run.

    Unset values fall back to the configuration file and the environment.
    """

    config_path: str | None = None
    output_dir: str | None = None
    skip_local_cache: bool = False
    local_cache_only: bool = False
    allow_list: tuple[str, ...] = ()
    write_workbook: bool | None = None


@dataclass(frozen=True)
class AnalysisOutcome:
    """Output contract for one completed analysis run."""

    output_dir: Path
    report_path: Path
    workbook_path: Path | None
    entity_count: int
    analyses: tuple[ConfigTypeAnalysis, ...]
