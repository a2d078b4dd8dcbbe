"""Compression and prompt-quality models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CompressionLevel(str, Enum):  # noqa: UP042
    """How much lossy phrase rewriting Stage 1 of the compressor may do."""

    CONSERVATIVE = "conservative"  # Whitespace only
    MODERATE = "moderate"          # + verbose-phrase table
    AGGRESSIVE = "aggressive"      # + second table and filler stripping


class OverallQuality(str, Enum):  # noqa: UP042
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CompressionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_length: int = Field(gt=0)
    # Literal substrings that must appear verbatim in the output.
    protected_content: list[str] = Field(default_factory=list)
    compression_level: CompressionLevel = CompressionLevel.MODERATE
    # When False, creative/style sections score 0 in Stage 2.
    preserve_creative_context: bool = True
    # When False, form-critical markers score 0 in Stage 2.
    maintain_form_priority: bool = True


class CompressionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    compressed_prompt: str
    original_length: int
    compressed_length: int
    compression_ratio: float
    # Every configured protected phrase is a literal substring of the output.
    protected_content_preserved: bool
    # Section-type labels of dropped sections.
    sections_removed: list[str] = Field(default_factory=list)
    # Section-type labels of shortened sections, or
    # ["text-compression-applied"] when Stage 1 alone was enough.
    sections_abbreviated: list[str] = Field(default_factory=list)


class QualityMetrics(BaseModel):
    """Deterministic quality scores for a prompt.  All ratios are in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    content_density: float
    redundancy_score: float
    form_specificity_score: float
    creative_content_ratio: float
    critical_content_ratio: float
    overall_quality: OverallQuality
    compression_recommendation: CompressionLevel
