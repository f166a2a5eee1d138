"""Analysis run domain exports."""

from .analysis_driver import analyze_config_type, analyze_document_stores
from .analysis_run_use_case import AnalysisRunError, execute_analysis_run
from .run_contracts import AnalysisOutcome, AnalysisRequest

__all__ = [
    "AnalysisRequest",
    "AnalysisOutcome",
    "AnalysisRunError",
    "analyze_config_type",
    "analyze_document_stores",
    "execute_analysis_run",
]
