"""Form-priority requirement extraction.

Turns a :class:`Specification` into fixed-wording prompt sections where
the user's form inputs are treated as absolute requirements, not
suggestions.  The same wording feeds :func:`get_protected_phrases`, the
list of literal substrings the compressor must never drop.

Each count sentence deliberately carries *both* protected phrasings for
its number ("EXACTLY 3 front-facing" and "3 product(s) facing forward"),
so that every protected phrase is actually present in the prompt that
gets compressed.
"""

from __future__ import annotations

from standprompt.models.requirements import FormPriorityRequirements
from standprompt.models.specification import Specification

_GENERATION_INSTRUCTIONS = (
    "User form inputs are ABSOLUTE requirements, not suggestions",
    "Numbers specified by user (face count, back-to-back count, shelf count) must be exactly reproduced",
    "Brand elements must dominate visual hierarchy as specified",
    "Physical dimensions must be proportionally accurate",
    "Every shelf must show the exact product arrangement specified",
    "No creative interpretation of numerical specifications, follow exactly as provided",
)

_VISUALIZATION_RULES = (
    "Front-facing count is the number of parallel rows placed side-by-side across each shelf",
    "Back-to-back count is the number of products lined up behind each other in every row",
    "Products should be clearly visible from front to back in a straight line",
    "Never add extra side-by-side rows beyond the front-facing count",
    "A single front-facing row should read as a train of products, not a grid",
)


def _cm(value: float) -> str:
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Sentence builders
# ---------------------------------------------------------------------------


def front_face_sentence(count: int) -> str:
    return (
        f"EXACTLY {count} front-facing: {count} product(s) facing forward, "
        f"arranged as {count} parallel row(s) side-by-side on each shelf"
    )


def back_to_back_sentence(count: int) -> str:
    return (
        f"EXACTLY {count} back-to-back: {count} products deep (front-to-back) in each row"
    )


def shelf_count_sentence(count: int) -> str:
    return f"EXACTLY {count} shelves: {count} shelf level(s) total"


def generate_requirements(spec: Specification) -> FormPriorityRequirements:
    """Derive every form-priority sentence group from *spec*.

    Absent fields simply produce no sentence.
    """
    critical: list[str] = []
    if spec.front_face_count:
        critical.append(front_face_sentence(spec.front_face_count))
    if spec.back_to_back_count:
        critical.append(back_to_back_sentence(spec.back_to_back_count))
    if spec.shelf_count:
        critical.append(shelf_count_sentence(spec.shelf_count))

    arrangement: list[str] = []
    front, deep = spec.front_face_count, spec.back_to_back_count
    if front and deep:
        per_shelf = front * deep
        arrangement.append("SHELF LAYOUT SPECIFICATION:")
        arrangement.append(f"- Number of parallel rows: {front} row(s) side-by-side")
        arrangement.append(
            f"- Products per row (depth): {deep} products lined up front-to-back"
        )
        arrangement.append(f"- Total products per shelf: {per_shelf} products")
        if front == 1:
            arrangement.append(
                f"SINGLE ROW ARRANGEMENT: One line of {deep} products placed "
                "front-to-back (no side-by-side rows)"
            )
        else:
            arrangement.append(
                f"MULTI-ROW ARRANGEMENT: {front} parallel rows, each with {deep} "
                "products front-to-back"
            )
        if spec.shelf_count and spec.shelf_count > 1:
            arrangement.append(
                f"- Total display capacity: {per_shelf * spec.shelf_count} products "
                f"across {spec.shelf_count} shelves"
            )

    brand: list[str] = []
    if spec.brand:
        brand.append(f"BRAND: {spec.brand} must be the dominant visual element")
    if spec.product:
        brand.append(
            f"PRODUCT: {spec.product} must be clearly identifiable on every visible package"
        )
    if spec.description:
        brand.append(
            f'PRODUCT DESCRIPTION: "{spec.description}" provides context for proper representation'
        )

    physical: list[str] = []
    stand = spec.stand_box()
    if stand:
        physical.append(
            f"DISPLAY DIMENSIONS: {_cm(stand.width)}cm wide × {_cm(stand.height)}cm high × "
            f"{_cm(stand.depth)}cm deep"
        )
    product = spec.product_box()
    if product:
        physical.append(
            f"PRODUCT SIZE: {_cm(product.width)}cm × {_cm(product.height)}cm × "
            f"{_cm(product.depth)}cm per unit"
        )

    shelf: list[str] = []
    if spec.shelf_count == 1:
        shelf.append("SINGLE SHELF DESIGN: All products on one level at optimal eye-level height")
    elif spec.shelf_count and spec.shelf_count > 1:
        shelf.append(
            f"MULTI-TIER DESIGN: {spec.shelf_count} shelves with clear product visibility on each level"
        )
        shelf.append(
            f"SHELF HIERARCHY: Distribute products to maximize visibility across all "
            f"{spec.shelf_count} levels"
        )
    if spec.shelf_width and spec.shelf_depth:
        shelf.append(
            f"SHELF SIZE: {_cm(spec.shelf_width)}cm wide × {_cm(spec.shelf_depth)}cm deep per level"
        )

    materials: list[str] = []
    if spec.stand_type:
        materials.append(f"STAND TYPE: {spec.stand_type}")
    if spec.materials:
        materials.append(f"MATERIALS: {', '.join(spec.materials)}")
    if spec.stand_base_color:
        materials.append(f"BASE COLOR: {spec.stand_base_color}")

    return FormPriorityRequirements(
        critical_numbers=critical,
        product_arrangement=arrangement,
        brand_requirements=brand,
        physical_constraints=physical,
        shelf_specification=shelf,
        material_specification=materials,
    )


def get_protected_phrases(spec: Specification) -> list[str]:
    """Literal substrings that must survive compression verbatim.

    Two phrasings per count, matching the sentences built above.
    """
    phrases: list[str] = []
    if spec.front_face_count:
        n = spec.front_face_count
        phrases.append(f"{n} product(s) facing forward")
        phrases.append(f"EXACTLY {n} front-facing")
    if spec.back_to_back_count:
        n = spec.back_to_back_count
        phrases.append(f"{n} products deep")
        phrases.append(f"EXACTLY {n} back-to-back")
    if spec.shelf_count:
        n = spec.shelf_count
        phrases.append(f"{n} shelf level(s)")
        phrases.append(f"EXACTLY {n} shelves")
    if spec.brand:
        phrases.append(f"BRAND: {spec.brand}")
    return phrases


def _section(header: str, lines: list[str] | tuple[str, ...], bullet: bool = False) -> str:
    body = "\n".join(f"- {line}" for line in lines) if bullet else "\n".join(lines)
    return f"{header}\n{body}"


def create_form_priority_prompt(base_prompt: str, spec: Specification) -> str:
    """Append the form-priority requirement block to *base_prompt*.

    Returns a new string; *base_prompt* is left as is.  Calling this
    twice appends the block twice, so the orchestrator calls it once per
    run.
    """
    reqs = generate_requirements(spec)

    sections: list[str] = []
    if reqs.brand_requirements:
        sections.append(_section("FORM-PRIORITY BRAND INTEGRATION:", reqs.brand_requirements))
    if reqs.critical_numbers:
        sections.append(
            _section("CRITICAL NUMERICAL REQUIREMENTS (NON-NEGOTIABLE):", reqs.critical_numbers)
        )
    if reqs.product_arrangement:
        sections.append(
            _section("PRODUCT ARRANGEMENT SPECIFICATION:", reqs.product_arrangement)
        )
    if reqs.physical_constraints:
        sections.append(_section("PHYSICAL CONSTRAINTS:", reqs.physical_constraints))
    if reqs.shelf_specification:
        sections.append(_section("SHELF SPECIFICATION:", reqs.shelf_specification))
    if reqs.material_specification:
        sections.append(_section("MATERIAL SPECIFICATION:", reqs.material_specification))
    sections.append(_section("GENERATION INSTRUCTIONS:", _GENERATION_INSTRUCTIONS, bullet=True))
    if reqs.product_arrangement:
        sections.append(
            _section(
                "PRODUCT ARRANGEMENT VISUALIZATION RULES:", _VISUALIZATION_RULES, bullet=True
            )
        )

    block = "\n\n".join(sections)
    if not base_prompt.strip():
        return block
    return f"{base_prompt}\n\n{block}"
