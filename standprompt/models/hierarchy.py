"""Source-of-truth hierarchy models.

The orchestrator merges four tiers in fixed precedence:

    Tier 1  Specification      absolute truth, never overridden
    Tier 2  Visual context     advisory, optional (external collaborator)
    Tier 3  AI enhancements    advisory, optional, currently inert
    Tier 4  Compression        must not destroy Tier-1 facts

Every conflict between tiers is recorded as a :class:`ConflictResolution`
rather than raised.  ``escalation-needed`` means the precedence rules
could not save a Tier-1 fact and a human (or a fallback compressor) must
step in.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from standprompt.models.compression import QualityMetrics
from standprompt.models.specification import Specification


class ConflictType(str, Enum):  # noqa: UP042
    FORM_VS_3D = "form-vs-3d"
    FORM_VS_AI = "form-vs-ai"
    FORM_VS_COMPRESSION = "form-vs-compression"


class Resolution(str, Enum):  # noqa: UP042
    FORM_DATA_WINS = "form-data-wins"
    COMPROMISE = "compromise"
    ESCALATION_NEEDED = "escalation-needed"


class ConflictResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    conflict_type: ConflictType
    conflict_description: str
    resolution: Resolution
    details: str = ""


# ---------------------------------------------------------------------------
# Tier-2 collaborator boundary
# ---------------------------------------------------------------------------

class CapturedViews(BaseModel):
    """Rendered views of the 3D stand scene (image URLs or data URIs)."""

    model_config = ConfigDict(frozen=True)

    front: str = ""
    side: str = ""
    three_quarter: str = ""
    # Height of the human scale figure placed in the scene, in cm.
    human_height: float = 175.0

    def has_any(self) -> bool:
        return bool(self.front or self.side or self.three_quarter)


class VisualContextRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    specification: Specification
    captured_views: CapturedViews
    view_type: str = "front"
    creative_mode: str = "refined"


class ScaleAccuracy(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_confidence: float = Field(ge=0.0, le=1.0)
    # False (or an empty mapping) means the product scale did not match.
    product_scale: bool | dict[str, Any] = False
    human_scale: bool = True
    display_scale: bool = True


class VisualContextResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_images: list[str] = Field(default_factory=list)
    scale_accuracy: ScaleAccuracy


class SourceHierarchy(BaseModel):
    """Inputs for one orchestration run, ordered by precedence."""

    model_config = ConfigDict(frozen=True)

    specification: Specification
    captured_views: CapturedViews | None = None
    # Reserved for AI suggestions; accepted but never applied.
    ai_enhancements: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Hierarchy report
# ---------------------------------------------------------------------------

class Tier1Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    preserved: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    # Requirements missing after Tier-1 application.
    conflicts: list[str] = Field(default_factory=list)


class Tier2Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    integrated: bool = False
    scale_accuracy: float = 0.0
    reference_images: int = 0


class Tier3Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    applied: list[str] = Field(default_factory=list)
    overridden: list[str] = Field(default_factory=list)


class Tier4Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    compression_ratio: float = 1.0
    protected_content_preserved: bool = True
    sections_removed: int = 0


class HierarchyReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier1_form_data: Tier1Report = Field(default_factory=Tier1Report)
    tier2_visual: Tier2Report = Field(default_factory=Tier2Report)
    tier3_ai_enhancements: Tier3Report = Field(default_factory=Tier3Report)
    tier4_compression: Tier4Report = Field(default_factory=Tier4Report)


class OrchestrationResult(BaseModel):
    """Everything the orchestrator hands back to the caller."""

    model_config = ConfigDict(frozen=True)

    final_prompt: str
    hierarchy_report: HierarchyReport
    quality_metrics: QualityMetrics
    compression_report: str
    conflict_resolutions: list[ConflictResolution] = Field(default_factory=list)
    integrity_score: int
    # Tier 1-3 prompt before compression; input for fallback compression.
    pre_compression_prompt: str = ""

    @property
    def needs_escalation(self) -> bool:
        return any(
            c.resolution == Resolution.ESCALATION_NEEDED for c in self.conflict_resolutions
        )
