"""Regex fact-presence check for form-critical counts.

This is a heuristic, not semantic validation.  For each count present in
the specification it looks for the number and its unit word on the same
line, in either order.  Known false negatives: a number written in words
("three shelves") or split across lines does not match.  Known false
positives: any unrelated number on a line that mentions the unit word.
"""

from __future__ import annotations

import re

from standprompt.models.requirements import RequirementValidation
from standprompt.models.specification import Specification


def _either_order(number: int, *units: str) -> re.Pattern[str]:
    n = rf"\b{number}\b"
    alternatives: list[str] = []
    for unit in units:
        alternatives.append(f"{n}.*{unit}")
        alternatives.append(f"{unit}.*{n}")
    return re.compile("|".join(alternatives), re.IGNORECASE)


def validate_requirements(prompt: str, spec: Specification) -> RequirementValidation:
    """Check that every form-critical count still appears in *prompt*."""
    missing: list[str] = []

    if spec.front_face_count:
        n = spec.front_face_count
        if not _either_order(n, "front").search(prompt):
            missing.append(f"Front face count: {n}")

    if spec.back_to_back_count:
        n = spec.back_to_back_count
        back = _either_order(n, "back")
        deep = re.compile(rf"\b{n}\b.*deep", re.IGNORECASE)
        if not (back.search(prompt) or deep.search(prompt)):
            missing.append(f"Back-to-back count: {n}")

    if spec.shelf_count:
        n = spec.shelf_count
        if not _either_order(n, "shelf").search(prompt):
            missing.append(f"Shelf count: {n}")

    return RequirementValidation(is_valid=not missing, missing_requirements=missing)
