"""Unit tests for the frozen pydantic domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from standprompt.models.compression import CompressionLevel, OverallQuality, QualityMetrics
from standprompt.models.hierarchy import (
    CapturedViews,
    ConflictResolution,
    ConflictType,
    HierarchyReport,
    OrchestrationResult,
    Resolution,
    ScaleAccuracy,
)
from standprompt.models.pipeline import PipelineOutput
from standprompt.models.specification import Box, Specification
from standprompt.services.dimensional_analyzer import analyze_specification


def _metrics() -> QualityMetrics:
    return QualityMetrics(
        content_density=0.5,
        redundancy_score=0.0,
        form_specificity_score=1.0,
        creative_content_ratio=0.0,
        critical_content_ratio=1.0,
        overall_quality=OverallQuality.HIGH,
        compression_recommendation=CompressionLevel.CONSERVATIVE,
    )


def _result(*resolutions: Resolution) -> OrchestrationResult:
    return OrchestrationResult(
        final_prompt="prompt",
        hierarchy_report=HierarchyReport(),
        quality_metrics=_metrics(),
        compression_report="",
        conflict_resolutions=[
            ConflictResolution(
                conflict_type=ConflictType.FORM_VS_COMPRESSION,
                conflict_description="test",
                resolution=r,
            )
            for r in resolutions
        ],
        integrity_score=100,
    )


# ======================================================================
# Specification
# ======================================================================


class TestSpecification:
    def test_unknown_fields_are_ignored(self) -> None:
        spec = Specification.model_validate({"brand": "Acme", "campaign_id": 42})
        assert spec.brand == "Acme"
        assert not hasattr(spec, "campaign_id")

    def test_is_frozen(self, full_spec: Specification) -> None:
        with pytest.raises(ValidationError):
            full_spec.brand = "Other"

    def test_negative_values_are_absent(self) -> None:
        spec = Specification(product_width=-1, shelf_count=-2, front_face_count=0)
        assert spec.product_width is None
        assert spec.shelf_count is None
        assert spec.front_face_count is None
        assert spec.has_tier1_facts() is False

    def test_negative_product_width_skips_layout(self, scenario_a_spec: Specification) -> None:
        spec = scenario_a_spec.model_copy(update={"product_width": -13})
        spec = Specification.model_validate(spec.model_dump())
        analysis = analyze_specification(spec)
        assert spec.product_box() is None
        assert analysis.layout is None
        assert analysis.utilization is None
        assert analysis.issues == []
        assert analysis.is_physically_valid is True

    def test_wrong_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Specification(shelf_count="many")

    def test_boxes(self, full_spec: Specification) -> None:
        assert full_spec.product_box() == Box(width=8, depth=4, height=20)
        assert full_spec.stand_box().volume == 45 * 35 * 160
        shelf = full_spec.shelf_spec()
        assert (shelf.width, shelf.depth, shelf.count) == (40, 30, 4)

    def test_zero_side_means_unspecified(self) -> None:
        spec = Specification(product_width=10, product_depth=0, product_height=5)
        assert spec.product_box() is None
        assert Specification(shelf_width=10, shelf_depth=10).shelf_spec() is None

    def test_has_tier1_facts(self, full_spec: Specification, empty_spec: Specification) -> None:
        assert full_spec.has_tier1_facts() is True
        assert empty_spec.has_tier1_facts() is False
        assert Specification(stand_base_color="Red").has_tier1_facts() is False
        assert Specification(materials=["Oak"]).has_tier1_facts() is True


# ======================================================================
# Hierarchy
# ======================================================================


class TestHierarchyModels:
    def test_captured_views_has_any(self) -> None:
        assert CapturedViews().has_any() is False
        assert CapturedViews(side="data:image/png;base64,xyz").has_any() is True
        assert CapturedViews().human_height == 175.0

    def test_scale_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ScaleAccuracy(overall_confidence=1.5)

    def test_needs_escalation(self) -> None:
        assert _result().needs_escalation is False
        assert _result(Resolution.FORM_DATA_WINS).needs_escalation is False
        assert _result(
            Resolution.FORM_DATA_WINS, Resolution.ESCALATION_NEEDED
        ).needs_escalation is True

    def test_enum_values(self) -> None:
        assert ConflictType.FORM_VS_3D.value == "form-vs-3d"
        assert ConflictType.FORM_VS_AI.value == "form-vs-ai"
        assert Resolution.ESCALATION_NEEDED.value == "escalation-needed"
        assert CompressionLevel("aggressive") is CompressionLevel.AGGRESSIVE


# ======================================================================
# PipelineOutput
# ======================================================================


class TestPipelineOutput:
    def test_escalation_passes_through(self) -> None:
        result = _result(Resolution.ESCALATION_NEEDED)
        output = PipelineOutput(result=result, final_prompt=result.final_prompt)
        assert output.needs_escalation is True

    def test_fallback_clears_escalation(self) -> None:
        result = _result(Resolution.ESCALATION_NEEDED)
        output = PipelineOutput(result=result, final_prompt="short", fallback_applied=True)
        assert output.needs_escalation is False
        assert output.result.needs_escalation is True

    def test_serializes_to_json(self) -> None:
        output = PipelineOutput(result=_result(Resolution.COMPROMISE), final_prompt="p")
        dumped = output.model_dump(mode="json")
        assert dumped["result"]["conflict_resolutions"][0]["resolution"] == "compromise"
        assert dumped["qa_report"] is None
