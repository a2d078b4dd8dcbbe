"""Dimensional analysis result models.

Produced by :mod:`standprompt.services.dimensional_analyzer`.  Physically
impossible layouts are never rejected; they come back as data in
``issues`` and ``constraints`` so the caller can decide whether to go on.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConstraintType(str, Enum):  # noqa: UP042
    STRUCTURAL = "STRUCTURAL"
    AESTHETIC = "AESTHETIC"
    PRACTICAL = "PRACTICAL"
    SAFETY = "SAFETY"


class Severity(str, Enum):  # noqa: UP042
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Efficiency(str, Enum):  # noqa: UP042
    """Stand space efficiency bucket.

    Thresholds on stand usage: >=70 excellent, >=50 good, >=30 fair,
    anything lower is poor.
    """

    POOR = "POOR"
    FAIR = "FAIR"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"


class ManufacturingConstraint(BaseModel):
    """A severity-tagged note that a geometry is impractical or unsafe to build."""

    model_config = ConfigDict(frozen=True)

    type: ConstraintType
    description: str
    severity: Severity
    # Concrete fix, usually with a number in it ("Increase shelf width to 15cm").
    suggestion: str


class DimensionalLayout(BaseModel):
    """Product packing grid on a single shelf, multiplied out over all shelves."""

    model_config = ConfigDict(frozen=True)

    products_per_shelf: int
    # Products along the shelf depth (back-to-back positions).
    shelf_rows: int
    # Products across the shelf width (front-facing positions).
    shelf_columns: int
    total_product_capacity: int
    # Smallest gap between neighbouring products, in cm, one decimal.
    product_spacing: float
    # Shelf board thickness assumed throughout the analysis.
    shelf_spacing: float = 2.0


class SpaceUtilization(BaseModel):
    model_config = ConfigDict(frozen=True)

    shelf_usage_percent: int
    stand_usage_percent: int
    # Unused stand volume in cubic centimetres.
    wasted_space: int
    efficiency: Efficiency


class DimensionalAnalysis(BaseModel):
    """Full output of the dimensional analyzer."""

    model_config = ConfigDict(frozen=True)

    is_physically_valid: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    # None when product or shelf measurements are absent.
    layout: DimensionalLayout | None = None
    # None when product, shelf or stand measurements are absent.
    utilization: SpaceUtilization | None = None
    constraints: list[ManufacturingConstraint] = Field(default_factory=list)
