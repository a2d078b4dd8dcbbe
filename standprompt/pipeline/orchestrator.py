"""Source-of-truth orchestrator for stand prompt generation.

Merges the four tiers of the source hierarchy into one bounded-length
prompt, in fixed order with no backtracking:

    Tier 1  form-priority requirements from the specification
    Tier 2  advisory visual context from the injected collaborator
    Tier 3  reserved for AI suggestions; never overrides Tier 1
    Tier 4  quality-informed compression with protected phrases

Recoverable problems are recorded as :class:`ConflictResolution` data and
reflected in the integrity score.  Only a run with no usable prompt text
at all raises :class:`PipelineError`.
"""

from __future__ import annotations

import asyncio
import hashlib

import structlog

from standprompt.interfaces.cache_provider import ICacheProvider
from standprompt.interfaces.visual_context_provider import IVisualContextProvider
from standprompt.models.compression import CompressionConfig, CompressionResult, QualityMetrics
from standprompt.models.hierarchy import (
    ConflictResolution,
    ConflictType,
    HierarchyReport,
    OrchestrationResult,
    Resolution,
    SourceHierarchy,
    Tier1Report,
    Tier2Report,
    Tier3Report,
    Tier4Report,
    VisualContextRequest,
    VisualContextResult,
)
from standprompt.models.requirements import RequirementValidation
from standprompt.services.prompt_compressor import compress_prompt
from standprompt.services.quality_assessor import (
    assess_prompt_quality,
    generate_compression_report,
)
from standprompt.services.requirement_extractor import (
    create_form_priority_prompt,
    get_protected_phrases,
)
from standprompt.services.requirement_validator import validate_requirements
from standprompt.utils.errors import ConfigurationError, PipelineError
from standprompt.utils.logging import get_logger
from standprompt.utils.scoring import clamp

DEFAULT_MAX_LENGTH = 4500
_MIN_SCALE_CONFIDENCE = 0.8
_HUMAN_SCALE_CM = 175
_CREATIVE_CONTEXT_THRESHOLD = 0.1

# Integrity score weights.
_MISSING_REQUIREMENT_PENALTY = 20
_ESCALATION_PENALTY = 15
_CLEAN_RUN_BONUS = 5

_TIER3_APPLIED = ["intelligent-compression", "quality-assessment"]


class SourceOfTruthOrchestrator:
    """Runs one specification through the four-tier hierarchy.

    Parameters
    ----------
    visual_context_provider:
        Tier-2 collaborator.  ``None`` disables Tier 2 even when captured
        views are supplied.
    cache:
        Optional memoization cache for Tier-4 compression results.
    max_length:
        Character budget handed to the compressor.
    visual_context_timeout:
        Seconds to wait for the Tier-2 collaborator before giving up.
    cache_ttl:
        Lifetime in seconds of memoized compression results.

    The orchestrator keeps no per-run state on the instance, so one
    instance can serve concurrent :meth:`orchestrate` calls.
    """

    def __init__(
        self,
        visual_context_provider: IVisualContextProvider | None = None,
        cache: ICacheProvider | None = None,
        max_length: int = DEFAULT_MAX_LENGTH,
        visual_context_timeout: float = 30.0,
        cache_ttl: float = 300,
    ) -> None:
        if max_length <= 0:
            raise ConfigurationError(f"max_length must be positive, got {max_length}")
        self._visual_context_provider = visual_context_provider
        self._cache = cache
        self._max_length = max_length
        self._visual_context_timeout = visual_context_timeout
        self._cache_ttl = cache_ttl
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_length(self) -> int:
        return self._max_length

    async def orchestrate(
        self, hierarchy: SourceHierarchy, base_prompt: str
    ) -> OrchestrationResult:
        """Produce the final prompt and reports for *hierarchy*.

        Raises
        ------
        PipelineError
            If *base_prompt* is blank and the specification yields no
            Tier-1 facts, leaving nothing to generate from.
        """
        spec = hierarchy.specification
        if not base_prompt.strip() and not spec.has_tier1_facts():
            raise PipelineError("No base prompt and no specification facts to build from")

        conflicts: list[ConflictResolution] = []

        # -- Tier 1: form data, absolute truth --
        prompt = create_form_priority_prompt(base_prompt, spec)
        tier1_validation = validate_requirements(prompt, spec)
        self._logger.info(
            "tier1_applied",
            prompt_length=len(prompt),
            valid=tier1_validation.is_valid,
        )
        if not tier1_validation.is_valid:
            self._logger.warning(
                "tier1_validation_failed",
                missing=tier1_validation.missing_requirements,
            )

        # -- Tier 2: visual context, advisory --
        visual = None
        if hierarchy.captured_views is not None and self._visual_context_provider is not None:
            visual = await self._fetch_visual_context(hierarchy)
            if visual is not None:
                conflicts.extend(_detect_visual_conflicts(visual))
                prompt = _integrate_visual_context(prompt, visual)

        # -- Tier 3: AI enhancements, inert --
        if hierarchy.ai_enhancements:
            self._logger.info("tier3_skipped", suggestions=len(hierarchy.ai_enhancements))

        # -- Tier 4: compression --
        metrics = assess_prompt_quality(prompt)
        config = CompressionConfig(
            max_length=self._max_length,
            protected_content=get_protected_phrases(spec),
            compression_level=metrics.compression_recommendation,
            preserve_creative_context=metrics.creative_content_ratio > _CREATIVE_CONTEXT_THRESHOLD,
            maintain_form_priority=True,
        )
        compression = await self._compress(prompt, config)
        final_prompt = compression.compressed_prompt

        final_validation = validate_requirements(final_prompt, spec)
        if not final_validation.is_valid:
            self._logger.error(
                "form_requirements_lost",
                missing=final_validation.missing_requirements,
            )
            conflicts.append(
                ConflictResolution(
                    conflict_type=ConflictType.FORM_VS_COMPRESSION,
                    conflict_description=(
                        "Form requirements lost: "
                        + ", ".join(final_validation.missing_requirements)
                    ),
                    resolution=Resolution.ESCALATION_NEEDED,
                    details="Compression removed critical form data, manual intervention required",
                )
            )
        if not compression.protected_content_preserved:
            lost = [p for p in config.protected_content if p not in final_prompt]
            self._logger.error("protected_phrases_lost", lost=lost)
            conflicts.append(
                ConflictResolution(
                    conflict_type=ConflictType.FORM_VS_COMPRESSION,
                    conflict_description="Protected phrases missing: " + "; ".join(lost),
                    resolution=Resolution.ESCALATION_NEEDED,
                    details="Protected form content is not present verbatim in the final prompt",
                )
            )

        integrity = calculate_integrity_score(final_validation, conflicts)
        self._logger.info(
            "orchestration_complete",
            integrity_score=integrity,
            conflicts=len(conflicts),
            final_length=len(final_prompt),
        )

        return OrchestrationResult(
            final_prompt=final_prompt,
            hierarchy_report=_build_hierarchy_report(tier1_validation, visual, compression),
            quality_metrics=metrics,
            compression_report=generate_compression_report(prompt, final_prompt, metrics),
            conflict_resolutions=conflicts,
            integrity_score=integrity,
            pre_compression_prompt=prompt,
        )

    # ------------------------------------------------------------------
    # Tier helpers
    # ------------------------------------------------------------------

    async def _fetch_visual_context(self, hierarchy: SourceHierarchy) -> VisualContextResult | None:
        provider = self._visual_context_provider
        if provider is None or hierarchy.captured_views is None:
            return None
        request = VisualContextRequest(
            specification=hierarchy.specification,
            captured_views=hierarchy.captured_views,
            view_type="front",
            creative_mode="refined",
        )
        try:
            return await asyncio.wait_for(
                provider.generate_visual_context(request),
                timeout=self._visual_context_timeout,
            )
        except asyncio.TimeoutError:
            self._logger.warning(
                "tier2_timeout",
                provider=provider.get_provider_name(),
                timeout=self._visual_context_timeout,
            )
        except Exception as exc:
            self._logger.warning(
                "tier2_failed",
                provider=provider.get_provider_name(),
                error=str(exc),
            )
        return None

    async def _compress(self, prompt: str, config: CompressionConfig) -> CompressionResult:
        if self._cache is None:
            return compress_prompt(prompt, config)
        return await self._cache.get_or_compute(
            _compression_cache_key(prompt, config),
            lambda: compress_prompt(prompt, config),
            ttl=self._cache_ttl,
        )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def _compression_cache_key(prompt: str, config: CompressionConfig) -> str:
    digest = hashlib.sha256()
    digest.update(prompt.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(config.model_dump_json().encode("utf-8"))
    return f"compression:{digest.hexdigest()}"


def _detect_visual_conflicts(visual: VisualContextResult) -> list[ConflictResolution]:
    conflicts: list[ConflictResolution] = []
    confidence = visual.scale_accuracy.overall_confidence
    if confidence < _MIN_SCALE_CONFIDENCE:
        conflicts.append(
            ConflictResolution(
                conflict_type=ConflictType.FORM_VS_3D,
                conflict_description=f"3D scale accuracy low ({confidence * 100:.1f}%)",
                resolution=Resolution.FORM_DATA_WINS,
                details="Form dimensions take priority over 3D scene measurements",
            )
        )
    if not visual.scale_accuracy.product_scale:
        conflicts.append(
            ConflictResolution(
                conflict_type=ConflictType.FORM_VS_3D,
                conflict_description="Product dimensions mismatch between form and 3D scene",
                resolution=Resolution.FORM_DATA_WINS,
                details="Using form-specified product dimensions as absolute truth",
            )
        )
    return conflicts


def _integrate_visual_context(prompt: str, visual: VisualContextResult) -> str:
    confidence = visual.scale_accuracy.overall_confidence
    advisory = "\n".join(
        [
            "3D VISUAL CONTEXT (Supporting Evidence):",
            f"- Scale references provided with {len(visual.reference_images)} reference images",
            f"- Human scale baseline: {_HUMAN_SCALE_CM}cm for proportional accuracy",
            "- Visual positioning context from captured 3D scene",
            f"- Scale accuracy: {confidence * 100:.1f}%",
        ]
    )
    enforcement = "\n".join(
        [
            "HIERARCHY ENFORCEMENT:",
            "- Form specifications override any conflicting 3D measurements",
            "- 3D context provides visual guidance only, not dimensional requirements",
            "- All numerical specifications from form data are non-negotiable",
        ]
    )
    return f"{prompt}\n\n{advisory}\n\n{enforcement}"


def calculate_integrity_score(
    validation: RequirementValidation, conflicts: list[ConflictResolution]
) -> int:
    """Score 0-100 for how well Tier-1 facts held up.

    -20 per missing requirement, -15 per escalation, +5 for a clean run.
    """
    score = 100
    score -= len(validation.missing_requirements) * _MISSING_REQUIREMENT_PENALTY
    escalations = [c for c in conflicts if c.resolution == Resolution.ESCALATION_NEEDED]
    score -= len(escalations) * _ESCALATION_PENALTY
    if validation.is_valid and not conflicts:
        score += _CLEAN_RUN_BONUS
    return int(clamp(score, 0, 100))


def _build_hierarchy_report(
    tier1_validation: RequirementValidation,
    visual: VisualContextResult | None,
    compression: CompressionResult,
) -> HierarchyReport:
    return HierarchyReport(
        tier1_form_data=Tier1Report(
            preserved=["all-critical-fields"] if tier1_validation.is_valid else [],
            modified=[],
            conflicts=list(tier1_validation.missing_requirements),
        ),
        tier2_visual=Tier2Report(
            integrated=visual is not None,
            scale_accuracy=visual.scale_accuracy.overall_confidence if visual else 0.0,
            reference_images=len(visual.reference_images) if visual else 0,
        ),
        tier3_ai_enhancements=Tier3Report(applied=list(_TIER3_APPLIED), overridden=[]),
        tier4_compression=Tier4Report(
            compression_ratio=compression.compression_ratio,
            protected_content_preserved=compression.protected_content_preserved,
            sections_removed=len(compression.sections_removed),
        ),
    )


def format_processing_report(result: OrchestrationResult) -> str:
    """User-facing summary of one orchestration run."""
    report = result.hierarchy_report
    score = result.integrity_score
    if score >= 90:
        badge = "GOOD"
    elif score >= 70:
        badge = "FAIR"
    else:
        badge = "POOR"

    tier1 = "Fully Preserved" if not report.tier1_form_data.conflicts else "Issues Detected"
    if report.tier2_visual.integrated:
        tier2 = f"Integrated ({report.tier2_visual.scale_accuracy * 100:.1f}% accuracy)"
    else:
        tier2 = "Not Available"
    tier4 = (
        "Protected Content Preserved"
        if report.tier4_compression.protected_content_preserved
        else "Content Loss Detected"
    )

    lines = [
        "PROMPT PROCESSING REPORT",
        "========================",
        "",
        f"INTEGRITY SCORE: {score}/100 ({badge})",
        "",
        "SOURCE-OF-TRUTH HIERARCHY:",
        f"Tier 1 (Form Data): {tier1}",
        f"Tier 2 (3D Visual): {tier2}",
        "Tier 3 (AI Enhancement): Applied",
        f"Tier 4 (Compression): {tier4}",
        "",
    ]
    if result.conflict_resolutions:
        lines.append(f"CONFLICTS RESOLVED: {len(result.conflict_resolutions)}")
        for conflict in result.conflict_resolutions:
            lines.append(f"- {conflict.conflict_description} → {conflict.resolution.value}")
    else:
        lines.append("NO CONFLICTS DETECTED")
    lines.append("")
    lines.append(f"FINAL PROMPT: {len(result.final_prompt)} characters")
    lines.append(
        f"COMPRESSION: {report.tier4_compression.compression_ratio * 100:.1f}% of original size"
    )
    return "\n".join(lines)
