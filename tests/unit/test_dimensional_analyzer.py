"""Unit tests for the dimensional analyzer."""

from __future__ import annotations

import pytest

from standprompt.models.dimensions import ConstraintType, Efficiency, Severity
from standprompt.models.specification import Box, ShelfSpec, Specification
from standprompt.services.dimensional_analyzer import (
    analyze_dimensions,
    analyze_specification,
    create_dimension_aware_prompt,
)

POOR_EFFICIENCY_TIP = (
    "Consider reducing stand size or adding more shelves to improve space efficiency"
)


# ======================================================================
# Packing and utilization
# ======================================================================


class TestScenarioA:
    """13 x 2.5 x 5 cm products on a 15 x 15 cm shelf in a 15 x 30 x 30 cm stand."""

    def test_layout_uses_half_centimetre_gap(self, scenario_a_spec: Specification) -> None:
        layout = analyze_specification(scenario_a_spec).layout
        assert layout is not None
        assert layout.shelf_columns == 1
        assert layout.shelf_rows == 4
        assert layout.products_per_shelf == 4
        assert layout.total_product_capacity == 4
        assert layout.product_spacing == 1.0
        assert layout.shelf_spacing == 2.0

    def test_utilization_is_poor(self, scenario_a_spec: Specification) -> None:
        utilization = analyze_specification(scenario_a_spec).utilization
        assert utilization is not None
        assert utilization.shelf_usage_percent == 41
        assert utilization.stand_usage_percent == 5
        assert utilization.wasted_space == 12850
        assert utilization.efficiency == Efficiency.POOR

    def test_physically_valid_with_single_recommendation(
        self, scenario_a_spec: Specification
    ) -> None:
        analysis = analyze_specification(scenario_a_spec)
        assert analysis.is_physically_valid is True
        assert analysis.issues == []
        assert analysis.constraints == []
        assert analysis.recommendations == [POOR_EFFICIENCY_TIP]

    def test_specification_wrapper_matches_direct_call(
        self, scenario_a_spec: Specification
    ) -> None:
        direct = analyze_dimensions(
            scenario_a_spec.product_box(),
            scenario_a_spec.stand_box(),
            scenario_a_spec.shelf_spec(),
        )
        assert analyze_specification(scenario_a_spec) == direct


class TestEfficiencyBuckets:
    def test_dense_stand_is_excellent(self) -> None:
        analysis = analyze_dimensions(
            Box(width=10, depth=10, height=10),
            Box(width=21.5, depth=21.5, height=12),
            ShelfSpec(width=21.5, depth=21.5, count=1),
        )
        assert analysis.layout is not None
        assert analysis.layout.products_per_shelf == 4
        assert analysis.utilization is not None
        assert analysis.utilization.stand_usage_percent == 72
        assert analysis.utilization.efficiency == Efficiency.EXCELLENT


# ======================================================================
# Fit validation
# ======================================================================


class TestBasicFit:
    def test_product_wider_than_shelf(self) -> None:
        analysis = analyze_dimensions(
            Box(width=20, depth=5, height=5),
            Box(width=30, depth=30, height=30),
            ShelfSpec(width=15, depth=15, count=1),
        )
        assert analysis.is_physically_valid is False
        assert "Product width (20cm) exceeds shelf width (15cm)" in analysis.issues
        critical = [c for c in analysis.constraints if c.severity == Severity.CRITICAL]
        assert len(critical) == 1
        assert critical[0].type == ConstraintType.STRUCTURAL
        assert critical[0].suggestion == "Increase shelf width to at least 22cm for proper fit"

    def test_product_deeper_than_shelf(self) -> None:
        analysis = analyze_dimensions(
            Box(width=5, depth=20, height=5),
            Box(width=30, depth=30, height=30),
            ShelfSpec(width=15, depth=15, count=1),
        )
        assert "Product depth (20cm) exceeds shelf depth (15cm)" in analysis.issues

    def test_shelf_larger_than_stand(self) -> None:
        analysis = analyze_dimensions(
            None,
            Box(width=30, depth=20, height=100),
            ShelfSpec(width=35, depth=25, count=2),
        )
        assert analysis.issues == [
            "Shelf width (35cm) exceeds stand width (30cm)",
            "Shelf depth (25cm) exceeds stand depth (20cm)",
        ]
        assert analysis.layout is None

    def test_insufficient_height(self) -> None:
        analysis = analyze_dimensions(
            Box(width=10, depth=10, height=30),
            Box(width=25, depth=25, height=60),
            ShelfSpec(width=20, depth=20, count=3),
        )
        assert "Insufficient height: Need 105cm, have 60cm" in analysis.issues
        height = [c for c in analysis.constraints if c.severity == Severity.HIGH]
        assert any(
            c.suggestion == "Reduce shelf count to 1 or increase stand height" for c in height
        )

    def test_missing_envelopes_skip_checks(self) -> None:
        analysis = analyze_dimensions(None, Box(width=40, depth=40, height=60), None)
        assert analysis.is_physically_valid is True
        assert analysis.layout is None
        assert analysis.utilization is None


class TestZeroTolerance:
    def test_shelf_flush_with_stand_is_not_flagged(self) -> None:
        analysis = analyze_dimensions(
            Box(width=10, depth=10, height=10),
            Box(width=30, depth=30, height=40),
            ShelfSpec(width=30, depth=20, count=1),
        )
        assert analysis.is_physically_valid is True
        assert not any("No tolerance" in c.description for c in analysis.constraints)

    def test_product_flush_with_shelf_is_flagged(self) -> None:
        analysis = analyze_dimensions(
            Box(width=30, depth=10, height=10),
            Box(width=40, depth=30, height=40),
            ShelfSpec(width=30, depth=20, count=1),
        )
        assert analysis.is_physically_valid is True
        tight = [c for c in analysis.constraints if "No tolerance" in c.description]
        assert len(tight) == 1
        assert tight[0].type == ConstraintType.PRACTICAL
        assert tight[0].severity == Severity.MEDIUM


# ======================================================================
# Manufacturing constraints and recommendations
# ======================================================================


class TestManufacturing:
    def test_tall_narrow_stand_is_unstable(self) -> None:
        analysis = analyze_dimensions(None, Box(width=20, depth=20, height=100), None)
        assert any("stability risk" in c.description for c in analysis.constraints)
        assert (
            "Consider a wider base for better visual proportion and stability"
            in analysis.recommendations
        )

    def test_many_shallow_shelves_may_tip(self) -> None:
        analysis = analyze_dimensions(
            None,
            Box(width=60, depth=40, height=150),
            ShelfSpec(width=50, depth=15, count=4),
        )
        tip = [c for c in analysis.constraints if "tipping" in c.description]
        assert len(tip) == 1
        assert tip[0].severity == Severity.HIGH

    def test_tight_shelf_clearance(self) -> None:
        analysis = analyze_dimensions(
            Box(width=10, depth=10, height=18),
            Box(width=40, depth=40, height=80),
            ShelfSpec(width=30, depth=30, count=4),
        )
        assert any(
            c.description == "Insufficient clearance between shelves for product access"
            for c in analysis.constraints
        )

    def test_deep_shelves_recommendation(self) -> None:
        analysis = analyze_dimensions(
            None,
            Box(width=60, depth=40, height=60),
            ShelfSpec(width=50, depth=30, count=1),
        )
        assert (
            "Deep shelves may make back products hard to reach, consider front-facing display"
            in analysis.recommendations
        )

    def test_small_shelf_capacity_recommendation(self) -> None:
        analysis = analyze_dimensions(
            Box(width=10, depth=10, height=10),
            Box(width=40, depth=40, height=40),
            ShelfSpec(width=12, depth=12, count=1),
        )
        assert analysis.layout is not None
        assert analysis.layout.products_per_shelf == 1
        assert (
            "Shelf size could be optimized to hold more products per level"
            in analysis.recommendations
        )


# ======================================================================
# Dimension-aware prompt
# ======================================================================


class TestDimensionAwarePrompt:
    def _prompt(self, spec: Specification, view: str = "front") -> str:
        return create_dimension_aware_prompt(
            "Premium sun care display",
            spec.product_box(),
            spec.stand_box(),
            spec.shelf_spec(),
            view_type=view,
        )

    def test_sections_in_order(self, scenario_a_spec: Specification) -> None:
        prompt = self._prompt(scenario_a_spec)
        headers = [
            "CRITICAL DIMENSIONAL REQUIREMENTS:",
            "STRUCTURAL SPECIFICATION:",
            "PRODUCT ARRANGEMENT:",
            "PROPORTIONAL REQUIREMENTS:",
            "REALISM CONSTRAINTS:",
            "MANUFACTURING REQUIREMENTS:",
            "VIEW SPECIFICATIONS:",
            "DIMENSION VALIDATION:",
        ]
        positions = [prompt.index(h) for h in headers]
        assert positions == sorted(positions)
        assert prompt.startswith("Premium sun care display\n\n")

    def test_quotes_exact_measurements(self, scenario_a_spec: Specification) -> None:
        prompt = self._prompt(scenario_a_spec)
        assert "EXACT DIMENSIONS: 15cm W × 30cm D × 30cm H display stand" in prompt
        assert "1 shelves, each 15cm × 15cm × 28cm high" in prompt
        assert "- Products: 13×2.5×5cm each" in prompt
        assert "- Shelf capacity: 4 products per shelf" in prompt
        assert "- Space utilization: POOR efficiency (5%)" in prompt

    def test_front_view(self, scenario_a_spec: Specification) -> None:
        assert "FRONT VIEW: Show 15cm width × 30cm height" in self._prompt(scenario_a_spec)

    def test_store_view(self, scenario_a_spec: Specification) -> None:
        prompt = self._prompt(scenario_a_spec, "store")
        assert "STORE VIEW: Wide angle showing full 15×30cm footprint" in prompt

    def test_three_quarter_view(self, scenario_a_spec: Specification) -> None:
        prompt = self._prompt(scenario_a_spec, "three-quarter")
        assert "3/4 VIEW: Perspective showing 15cm width, 30cm depth, and 30cm height" in prompt

    def test_unknown_view_raises(self, scenario_a_spec: Specification) -> None:
        with pytest.raises(ValueError, match="Unknown view type"):
            self._prompt(scenario_a_spec, "top-down")

    def test_missing_envelope_returns_base_unchanged(self) -> None:
        result = create_dimension_aware_prompt(
            "Base only", Box(width=1, depth=1, height=1), None, None
        )
        assert result == "Base only"

    def test_tall_stand_gets_anti_tip_line(self, full_spec: Specification) -> None:
        prompt = self._prompt(full_spec)
        assert "- Anti-tip features for tall display safety" in prompt
