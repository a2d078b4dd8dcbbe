"""Pipeline orchestration components for standprompt."""

from standprompt.pipeline.orchestrator import (
    SourceOfTruthOrchestrator,
    calculate_integrity_score,
    format_processing_report,
)

__all__ = [
    "SourceOfTruthOrchestrator",
    "calculate_integrity_score",
    "format_processing_report",
]
