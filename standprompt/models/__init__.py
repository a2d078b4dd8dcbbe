"""Pydantic v2 domain models for standprompt.

All models are frozen; new states are produced with ``model_copy``.
"""

from standprompt.models.compression import (
    CompressionConfig,
    CompressionLevel,
    CompressionResult,
    OverallQuality,
    QualityMetrics,
)
from standprompt.models.dimensions import (
    ConstraintType,
    DimensionalAnalysis,
    DimensionalLayout,
    Efficiency,
    ManufacturingConstraint,
    Severity,
    SpaceUtilization,
)
from standprompt.models.hierarchy import (
    CapturedViews,
    ConflictResolution,
    ConflictType,
    HierarchyReport,
    OrchestrationResult,
    Resolution,
    ScaleAccuracy,
    SourceHierarchy,
    Tier1Report,
    Tier2Report,
    Tier3Report,
    Tier4Report,
    VisualContextRequest,
    VisualContextResult,
)
from standprompt.models.pipeline import PipelineOutput
from standprompt.models.qa import DetailedMetrics, QAReport
from standprompt.models.requirements import FormPriorityRequirements, RequirementValidation
from standprompt.models.specification import Box, ShelfSpec, Specification

__all__ = [
    "Box",
    "CapturedViews",
    "CompressionConfig",
    "CompressionLevel",
    "CompressionResult",
    "ConflictResolution",
    "ConflictType",
    "ConstraintType",
    "DetailedMetrics",
    "DimensionalAnalysis",
    "DimensionalLayout",
    "Efficiency",
    "FormPriorityRequirements",
    "HierarchyReport",
    "ManufacturingConstraint",
    "OrchestrationResult",
    "OverallQuality",
    "PipelineOutput",
    "QAReport",
    "QualityMetrics",
    "RequirementValidation",
    "Resolution",
    "ScaleAccuracy",
    "Severity",
    "ShelfSpec",
    "SourceHierarchy",
    "SpaceUtilization",
    "Specification",
    "Tier1Report",
    "Tier2Report",
    "Tier3Report",
    "Tier4Report",
    "VisualContextRequest",
    "VisualContextResult",
]
