"""Dimensional feasibility and packing analysis for display stands.

Answers three questions about a product / shelf / stand combination:

1. **Does it fit?**  Product inside shelf, shelf inside stand, and enough
   vertical space for every shelf level plus clearance.
2. **How many products fit?**  A packing grid with a 0.5 cm minimum gap
   between neighbouring products.
3. **How well is the space used?**  Shelf and stand volume usage, wasted
   volume and an efficiency bucket.

Nothing here raises on bad geometry.  Impossible layouts come back as
``issues`` and severity-tagged :class:`ManufacturingConstraint` records
so the caller can decide what to do.  A feature whose measurements are
missing or non-positive is treated as absent and every check that needs
it is skipped.
"""

from __future__ import annotations

import math

from standprompt.models.dimensions import (
    ConstraintType,
    DimensionalAnalysis,
    DimensionalLayout,
    Efficiency,
    ManufacturingConstraint,
    Severity,
    SpaceUtilization,
)
from standprompt.models.specification import Box, ShelfSpec, Specification
from standprompt.utils.scoring import round_half_up

# -- Physical constants (cm) --
_SHELF_THICKNESS = 2.0
_PRODUCT_CLEARANCE = 3.0
_MIN_PRODUCT_GAP = 0.5
# Effective shelf slot height is product height plus this allowance.
_SLOT_ALLOWANCE = 2.0

_STABILITY_ASPECT_LIMIT = 2.5
_TIP_OVER_SHELF_COUNT = 3
_TIP_OVER_MIN_DEPTH = 20.0
_DEEP_SHELF_DEPTH = 25.0
_TALL_STAND_HEIGHT = 100.0

_VIEW_TYPES = ("front", "store", "three-quarter")


def _cm(value: float) -> str:
    """Render a measurement without a trailing ``.0`` (15.0 -> "15")."""
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_dimensions(
    product: Box | None,
    stand: Box | None,
    shelf: ShelfSpec | None,
) -> DimensionalAnalysis:
    """Run the full feasibility, packing and utilization analysis.

    Parameters
    ----------
    product:
        Product envelope, or ``None`` when not specified.
    stand:
        Stand envelope, or ``None`` when not specified.
    shelf:
        Shelf footprint and level count, or ``None`` when not specified.

    Returns
    -------
    DimensionalAnalysis
        ``is_physically_valid`` is True when no fit issue was found.
    """
    issues: list[str] = []
    constraints: list[ManufacturingConstraint] = []

    fit_issues, fit_constraints = _validate_basic_fit(product, stand, shelf)
    issues.extend(fit_issues)
    constraints.extend(fit_constraints)

    layout = _calculate_layout(product, shelf) if product and shelf else None

    utilization = None
    if product and stand and shelf and layout:
        utilization = _analyze_utilization(product, stand, shelf, layout)

    constraints.extend(_manufacturing_constraints(product, stand, shelf))
    recommendations = _recommendations(stand, shelf, layout, utilization)

    return DimensionalAnalysis(
        is_physically_valid=not issues,
        issues=issues,
        recommendations=recommendations,
        layout=layout,
        utilization=utilization,
        constraints=constraints,
    )


def analyze_specification(spec: Specification) -> DimensionalAnalysis:
    """Convenience wrapper that pulls the three envelopes out of *spec*."""
    return analyze_dimensions(spec.product_box(), spec.stand_box(), spec.shelf_spec())


def create_dimension_aware_prompt(
    base_prompt: str,
    product: Box | None,
    stand: Box | None,
    shelf: ShelfSpec | None,
    view_type: str = "front",
) -> str:
    """Append dimensional requirement sections to *base_prompt*.

    Returns *base_prompt* unchanged when any of the three envelopes is
    missing, since the sections quote all of them.

    Raises:
        ValueError: If *view_type* is not one of front, store, three-quarter.
    """
    if view_type not in _VIEW_TYPES:
        raise ValueError(f"Unknown view type: {view_type!r}")
    if not (product and stand and shelf):
        return base_prompt

    analysis = analyze_dimensions(product, stand, shelf)
    layout = analysis.layout
    if layout is None:
        return base_prompt

    # Height of one shelf opening after subtracting the board.
    level_height = math.floor(stand.height / shelf.count) - _SHELF_THICKNESS

    sections = [
        base_prompt,
        "CRITICAL DIMENSIONAL REQUIREMENTS:\n"
        f"EXACT DIMENSIONS: {_cm(stand.width)}cm W × {_cm(stand.depth)}cm D × "
        f"{_cm(stand.height)}cm H display stand",
        "STRUCTURAL SPECIFICATION:\n"
        f"{shelf.count} shelves, each {_cm(shelf.width)}cm × {_cm(shelf.depth)}cm × "
        f"{_cm(level_height)}cm high, evenly spaced vertically",
        "PRODUCT ARRANGEMENT:\n"
        f"- Products: {_cm(product.width)}×{_cm(product.depth)}×{_cm(product.height)}cm each\n"
        f"- Shelf capacity: {layout.products_per_shelf} products per shelf\n"
        f"- Layout: {layout.shelf_rows} rows × {layout.shelf_columns} columns\n"
        f"- Total capacity: {layout.total_product_capacity} products",
        _proportion_guidance(product, stand, shelf, layout),
        "REALISM CONSTRAINTS:\n" + _bullets(_realism_constraints(analysis)),
        "MANUFACTURING REQUIREMENTS:\n" + _bullets(_manufacturing_guidance(stand)),
        "VIEW SPECIFICATIONS:\n" + _view_instructions(view_type, stand),
        "DIMENSION VALIDATION: The display must exactly match these measurements "
        "and physically hold the specified products in the calculated arrangement.",
    ]
    return "\n\n".join(sections)


# ---------------------------------------------------------------------------
# Analysis steps
# ---------------------------------------------------------------------------


def _validate_basic_fit(
    product: Box | None,
    stand: Box | None,
    shelf: ShelfSpec | None,
) -> tuple[list[str], list[ManufacturingConstraint]]:
    issues: list[str] = []
    constraints: list[ManufacturingConstraint] = []

    if product and shelf:
        if product.width > shelf.width:
            issues.append(
                f"Product width ({_cm(product.width)}cm) exceeds shelf width ({_cm(shelf.width)}cm)"
            )
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.STRUCTURAL,
                    description="Product cannot fit on shelf width-wise",
                    severity=Severity.CRITICAL,
                    suggestion=(
                        f"Increase shelf width to at least {_cm(product.width + 2)}cm for proper fit"
                    ),
                )
            )
        if product.depth > shelf.depth:
            issues.append(
                f"Product depth ({_cm(product.depth)}cm) exceeds shelf depth ({_cm(shelf.depth)}cm)"
            )
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.STRUCTURAL,
                    description="Product cannot fit on shelf depth-wise",
                    severity=Severity.CRITICAL,
                    suggestion=(
                        f"Increase shelf depth to at least {_cm(product.depth + 1)}cm for stability"
                    ),
                )
            )

    if shelf and stand:
        if shelf.width > stand.width:
            issues.append(
                f"Shelf width ({_cm(shelf.width)}cm) exceeds stand width ({_cm(stand.width)}cm)"
            )
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.STRUCTURAL,
                    description="Shelf cannot fit within stand structure",
                    severity=Severity.CRITICAL,
                    suggestion="Reduce shelf width or increase stand width",
                )
            )
        if shelf.depth > stand.depth:
            issues.append(
                f"Shelf depth ({_cm(shelf.depth)}cm) exceeds stand depth ({_cm(stand.depth)}cm)"
            )
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.STRUCTURAL,
                    description="Shelf extends beyond stand boundaries",
                    severity=Severity.CRITICAL,
                    suggestion="Reduce shelf depth or increase stand depth",
                )
            )

    if product and shelf and stand:
        needed = (
            shelf.count * (product.height + _PRODUCT_CLEARANCE)
            + shelf.count * _SHELF_THICKNESS
        )
        if needed > stand.height:
            issues.append(
                f"Insufficient height: Need {_cm(needed)}cm, have {_cm(stand.height)}cm"
            )
            max_shelves = math.floor(
                stand.height / (product.height + _PRODUCT_CLEARANCE + _SHELF_THICKNESS)
            )
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.STRUCTURAL,
                    description="Not enough vertical space for all shelves and products",
                    severity=Severity.HIGH,
                    suggestion=(
                        f"Reduce shelf count to {max_shelves} or increase stand height"
                    ),
                )
            )

    return issues, constraints


def _calculate_layout(product: Box, shelf: ShelfSpec) -> DimensionalLayout:
    per_row = math.floor((shelf.width - _MIN_PRODUCT_GAP) / (product.width + _MIN_PRODUCT_GAP))
    per_column = math.floor((shelf.depth - _MIN_PRODUCT_GAP) / (product.depth + _MIN_PRODUCT_GAP))
    per_row = max(per_row, 0)
    per_column = max(per_column, 0)
    per_shelf = per_row * per_column

    # Leftover space shared out across the gaps on each axis.
    remaining_width = shelf.width - per_row * product.width
    remaining_depth = shelf.depth - per_column * product.depth
    spacing = min(remaining_width / (per_row + 1), remaining_depth / (per_column + 1))

    return DimensionalLayout(
        products_per_shelf=per_shelf,
        shelf_rows=per_column,
        shelf_columns=per_row,
        total_product_capacity=per_shelf * shelf.count,
        product_spacing=round_half_up(spacing, 1),
        shelf_spacing=_SHELF_THICKNESS,
    )


def _efficiency_bucket(stand_usage_percent: float) -> Efficiency:
    if stand_usage_percent >= 70:
        return Efficiency.EXCELLENT
    if stand_usage_percent >= 50:
        return Efficiency.GOOD
    if stand_usage_percent >= 30:
        return Efficiency.FAIR
    return Efficiency.POOR


def _analyze_utilization(
    product: Box,
    stand: Box,
    shelf: ShelfSpec,
    layout: DimensionalLayout,
) -> SpaceUtilization:
    product_volume_per_shelf = layout.products_per_shelf * product.volume
    shelf_volume = shelf.width * shelf.depth * (product.height + _SLOT_ALLOWANCE)
    total_product_volume = product_volume_per_shelf * shelf.count

    shelf_usage = int(round_half_up(product_volume_per_shelf / shelf_volume * 100))
    stand_usage = int(round_half_up(total_product_volume / stand.volume * 100))

    return SpaceUtilization(
        shelf_usage_percent=shelf_usage,
        stand_usage_percent=stand_usage,
        wasted_space=int(round_half_up(stand.volume - total_product_volume)),
        efficiency=_efficiency_bucket(stand_usage),
    )


def _manufacturing_constraints(
    product: Box | None,
    stand: Box | None,
    shelf: ShelfSpec | None,
) -> list[ManufacturingConstraint]:
    constraints: list[ManufacturingConstraint] = []

    if stand and stand.height / min(stand.width, stand.depth) > _STABILITY_ASPECT_LIMIT:
        constraints.append(
            ManufacturingConstraint(
                type=ConstraintType.STRUCTURAL,
                description="Stand is too tall relative to base dimensions, stability risk",
                severity=Severity.HIGH,
                suggestion="Add wider base or reduce height for better stability",
            )
        )

    if stand and shelf and product:
        per_level = (stand.height - shelf.count * _SHELF_THICKNESS) / shelf.count
        if per_level < product.height + _PRODUCT_CLEARANCE:
            constraints.append(
                ManufacturingConstraint(
                    type=ConstraintType.PRACTICAL,
                    description="Insufficient clearance between shelves for product access",
                    severity=Severity.MEDIUM,
                    suggestion="Increase clearance to at least 3cm above product height",
                )
            )

    # Exact equality only; shelf == stand width is a normal flush fit.
    if product and shelf and product.width == shelf.width:
        constraints.append(
            ManufacturingConstraint(
                type=ConstraintType.PRACTICAL,
                description="No tolerance for product placement, too tight fit",
                severity=Severity.MEDIUM,
                suggestion="Add 2-3cm extra shelf width for easy product placement",
            )
        )

    if shelf and shelf.count > _TIP_OVER_SHELF_COUNT and shelf.depth < _TIP_OVER_MIN_DEPTH:
        constraints.append(
            ManufacturingConstraint(
                type=ConstraintType.STRUCTURAL,
                description="Multiple shelves on narrow base may cause tipping",
                severity=Severity.HIGH,
                suggestion="Increase base depth or add anti-tip features",
            )
        )

    return constraints


def _recommendations(
    stand: Box | None,
    shelf: ShelfSpec | None,
    layout: DimensionalLayout | None,
    utilization: SpaceUtilization | None,
) -> list[str]:
    recommendations: list[str] = []

    if utilization and utilization.efficiency == Efficiency.POOR:
        recommendations.append(
            "Consider reducing stand size or adding more shelves to improve space efficiency"
        )
    if layout and layout.products_per_shelf < 3:
        recommendations.append("Shelf size could be optimized to hold more products per level")
    if stand and stand.height / stand.width > 2:
        recommendations.append("Consider a wider base for better visual proportion and stability")
    if shelf and shelf.depth > _DEEP_SHELF_DEPTH:
        recommendations.append(
            "Deep shelves may make back products hard to reach, consider front-facing display"
        )

    return recommendations


# ---------------------------------------------------------------------------
# Prompt section builders
# ---------------------------------------------------------------------------


def _bullets(lines: list[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def _proportion_guidance(
    product: Box, stand: Box, shelf: ShelfSpec, layout: DimensionalLayout
) -> str:
    level_pitch = math.floor(stand.height / shelf.count)
    return "PROPORTIONAL REQUIREMENTS:\n" + _bullets(
        [
            f"Stand aspect ratio: {_cm(stand.width)}:{_cm(stand.depth)}:{_cm(stand.height)} (W:D:H)",
            f"Product arrangement: {layout.shelf_columns} products across × "
            f"{layout.shelf_rows} products deep per shelf",
            f"Shelf spacing: {level_pitch}cm between shelf levels",
            f"Product spacing: {_cm(layout.product_spacing)}cm gaps between products for visibility",
            f"Scale accuracy: Products must appear {_cm(product.height)}cm tall relative to "
            f"{_cm(stand.height)}cm total height",
        ]
    )


def _realism_constraints(analysis: DimensionalAnalysis) -> list[str]:
    lines = [
        "Products must physically fit on shelves without overlap",
        "Shelves must be structurally supported and level",
        "Proportions must be mathematically accurate to specified dimensions",
    ]
    if analysis.utilization:
        lines.append(
            f"Space utilization: {analysis.utilization.efficiency.value} efficiency "
            f"({analysis.utilization.stand_usage_percent}%)"
        )
    lines.append("No floating or impossible structural elements")
    if analysis.constraints:
        lines.append("Must address structural stability requirements")
    return lines


def _manufacturing_guidance(stand: Box) -> list[str]:
    lines = [
        "Visible support structure appropriate for dimensions",
        "Shelf thickness: 2cm minimum for structural integrity",
        "Base stability features if height > 60cm",
        "Consistent material thickness throughout design",
    ]
    if stand.height > _TALL_STAND_HEIGHT:
        lines.append("Anti-tip features for tall display safety")
    return lines


def _view_instructions(view_type: str, stand: Box) -> str:
    if view_type == "store":
        return (
            f"STORE VIEW: Wide angle showing full {_cm(stand.width)}×{_cm(stand.depth)}cm "
            "footprint, context within retail environment"
        )
    if view_type == "three-quarter":
        return (
            f"3/4 VIEW: Perspective showing {_cm(stand.width)}cm width, {_cm(stand.depth)}cm "
            f"depth, and {_cm(stand.height)}cm height with dimensional accuracy"
        )
    return (
        f"FRONT VIEW: Show {_cm(stand.width)}cm width × {_cm(stand.height)}cm height, "
        "emphasize product visibility and shelf structure"
    )
