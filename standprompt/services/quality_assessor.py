"""Deterministic prompt quality scoring.

Scores a prompt against fixed keyword tables and picks a compression
level for it.  The tables and thresholds below drive compression
behaviour downstream, so changing any of them changes which sections
survive in the final prompt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from standprompt.models.compression import CompressionLevel, OverallQuality, QualityMetrics
from standprompt.utils.scoring import count_pattern_matches, count_term_matches

_WORD_RE = re.compile(r"\b\w+\b")
_NUMERIC_SPEC_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(?:cm|mm|%|products?|shelves?|levels?)\b", re.IGNORECASE
)

TECHNICAL_TERMS = (
    "dimensional", "manufacturing", "structural", "physics", "calculated",
    "specifications", "constraints", "utilization", "optimization",
)
BRAND_TERMS = (
    "brand", "logo", "product", "visual hierarchy", "brand integration",
    "brand assets", "brand consistency", "brand dominance",
)
REDUNDANT_PHRASES = (
    "must be", "should be", "need to", "have to", "it is important",
    "make sure", "ensure that", "in order to", "for the purpose of",
)
CRITICAL_MARKERS = (
    "EXACTLY", "NON-NEGOTIABLE", "CRITICAL", "FORM-PRIORITY",
    "ABSOLUTE", "MANDATORY", "REQUIRED",
)
CREATIVE_TERMS = (
    "creative", "aesthetic", "visual impact", "artistic", "style",
    "atmosphere", "mood", "elegant", "sophisticated", "appealing",
)


@dataclass(frozen=True)
class _ContentCounts:
    total_words: int
    unique_words: int
    technical: int
    numeric_specs: int
    brand: int
    redundant: int
    critical: int
    creative: int


def _analyze(prompt: str) -> _ContentCounts:
    words = _WORD_RE.findall(prompt.lower())
    return _ContentCounts(
        total_words=len(words),
        unique_words=len(set(words)),
        technical=count_term_matches(prompt, TECHNICAL_TERMS),
        numeric_specs=count_pattern_matches(prompt, _NUMERIC_SPEC_RE),
        brand=count_term_matches(prompt, BRAND_TERMS),
        redundant=count_term_matches(prompt, REDUNDANT_PHRASES),
        critical=count_term_matches(prompt, CRITICAL_MARKERS),
        creative=count_term_matches(prompt, CREATIVE_TERMS),
    )


def _content_density(counts: _ContentCounts, length: int) -> float:
    if length == 0:
        return 0.0
    essential = counts.technical + counts.numeric_specs + counts.brand + counts.critical
    return min(1.0, essential / length * 1000)


def _redundancy(counts: _ContentCounts) -> float:
    if counts.total_words == 0:
        return 0.0
    uniqueness = counts.unique_words / counts.total_words
    redundant = counts.redundant / counts.total_words * 10
    return min(1.0, (1 - uniqueness) + redundant)


def _form_specificity(counts: _ContentCounts, prompt: str) -> float:
    # Substring checks are case-sensitive.
    score = 0.0
    if "EXACTLY" in prompt:
        score += 0.3
    if counts.numeric_specs > 3:
        score += 0.2
    if counts.critical > 0:
        score += 0.2
    if "front" in prompt and "back" in prompt:
        score += 0.1
    if "shelf" in prompt and "product" in prompt:
        score += 0.1
    if "arrangement" in prompt or "placement" in prompt:
        score += 0.1
    return min(1.0, score)


def _recommend_level(redundancy: float, critical_ratio: float) -> CompressionLevel:
    if redundancy > 0.6 and critical_ratio < 0.3:
        return CompressionLevel.AGGRESSIVE
    if redundancy > 0.4 or critical_ratio < 0.5:
        return CompressionLevel.MODERATE
    return CompressionLevel.CONSERVATIVE


def assess_prompt_quality(prompt: str) -> QualityMetrics:
    """Score *prompt* and recommend a compression level.

    Returns all-zero ratios for an empty prompt.
    """
    counts = _analyze(prompt)

    density = _content_density(counts, len(prompt))
    redundancy = _redundancy(counts)
    specificity = _form_specificity(counts, prompt)
    denominator = max(1, counts.total_words)
    creative_ratio = min(1.0, counts.creative / denominator * 100)
    critical_ratio = min(
        1.0, (counts.critical + counts.numeric_specs + counts.technical) / denominator * 50
    )

    quality_score = (density + (1 - redundancy) + specificity) / 3
    if quality_score > 0.7:
        overall = OverallQuality.HIGH
    elif quality_score > 0.4:
        overall = OverallQuality.MEDIUM
    else:
        overall = OverallQuality.LOW

    return QualityMetrics(
        content_density=density,
        redundancy_score=redundancy,
        form_specificity_score=specificity,
        creative_content_ratio=creative_ratio,
        critical_content_ratio=critical_ratio,
        overall_quality=overall,
        compression_recommendation=_recommend_level(redundancy, critical_ratio),
    )


def generate_compression_report(
    original_prompt: str,
    compressed_prompt: str,
    metrics: QualityMetrics,
) -> str:
    """Human-readable summary of a compression run and the input's metrics."""
    original_length = len(original_prompt)
    compressed_length = len(compressed_prompt)
    ratio = compressed_length / original_length if original_length else 1.0

    lines = [
        "COMPRESSION REPORT:",
        "==================",
        f"Original Length: {original_length} chars",
        f"Compressed Length: {compressed_length} chars",
        f"Compression Ratio: {ratio * 100:.1f}%",
        f"Space Saved: {original_length - compressed_length} chars",
        "",
        "QUALITY METRICS:",
        f"Content Density: {metrics.content_density * 100:.1f}%",
        f"Redundancy Score: {metrics.redundancy_score * 100:.1f}%",
        f"Form Specificity: {metrics.form_specificity_score * 100:.1f}%",
        f"Creative Content: {metrics.creative_content_ratio * 100:.1f}%",
        f"Critical Content: {metrics.critical_content_ratio * 100:.1f}%",
        f"Overall Quality: {metrics.overall_quality.value}",
        f"Recommended Compression: {metrics.compression_recommendation.value}",
    ]
    return "\n".join(lines)
