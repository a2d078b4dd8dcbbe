"""Numeric and keyword-scoring helpers shared across the pipeline.

Three small groups of operations live here:

1. **round_half_up** -- rounding that matches how percentages and
   volumes are reported to users (``2.5 -> 3``), unlike Python's banker's
   rounding in :func:`round`.
2. **clamp** / **pass_percentage** -- bounding scores and turning lists
   of boolean checks into a 0--100 percentage.
3. **count_term_matches** / **count_pattern_matches** -- keyword-table
   hit counting used by the quality assessor.
"""

import math
import re
from collections.abc import Iterable


def round_half_up(value: float, digits: int = 0) -> float:
    """Round *value* to *digits* decimals with halves rounded up.

    Args:
        value: Number to round.
        digits: Decimal places to keep.

    Returns:
        The rounded value.  Returned as a float; callers that need an
        integer wrap the result in ``int()``.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Bound *value* to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def pass_percentage(results: list[bool]) -> float:
    """Return the share of ``True`` entries in *results* as a percentage.

    An empty list counts as fully passing.
    """
    if not results:
        return 100.0
    return sum(1 for passed in results if passed) / len(results) * 100


def count_term_matches(text: str, terms: Iterable[str]) -> int:
    """Count whole-word occurrences of each term in lowercased *text*.

    Multi-word terms ("visual hierarchy") are matched as a phrase.
    Terms are lowercased before matching, so callers may pass upper-case
    marker tables.
    """
    lowered = text.lower()
    total = 0
    for term in terms:
        pattern = r"\b" + re.escape(term.lower()) + r"\b"
        total += len(re.findall(pattern, lowered))
    return total


def count_pattern_matches(text: str, pattern: re.Pattern[str]) -> int:
    """Count non-overlapping matches of a compiled *pattern* in *text*."""
    return len(pattern.findall(text))
