"""End-to-end QA report models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DetailedMetrics(BaseModel):
    """Five sub-metrics, each a percentage in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    form_data_integrity: float
    visual_context_accuracy: float
    prompt_optimization: float
    compression_efficiency: float
    hierarchy_compliance: float


class QAReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Weighted sum of detailed_metrics, rounded to an integer.
    overall_score: int
    passed_tests: list[str] = Field(default_factory=list)
    failed_tests: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    critical_issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    detailed_metrics: DetailedMetrics
