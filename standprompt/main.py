"""standprompt composition root.

Wires the cache, the optional Tier-2 collaborator and the orchestrator
together from ``config/config.yaml`` plus environment overrides, and
exposes ``build_orchestrator`` / ``run_pipeline`` for CLI or scripting
usage.
"""

from __future__ import annotations

from typing import Any

import structlog

from standprompt.config.loader import load_config
from standprompt.interfaces.visual_context_provider import IVisualContextProvider
from standprompt.models.hierarchy import CapturedViews, SourceHierarchy
from standprompt.models.pipeline import PipelineOutput
from standprompt.models.specification import Specification
from standprompt.pipeline.orchestrator import SourceOfTruthOrchestrator
from standprompt.providers.cache.memory_cache import MemoryCacheProvider
from standprompt.services.dimensional_analyzer import (
    analyze_specification,
    create_dimension_aware_prompt,
)
from standprompt.services.end_to_end_qa import run_comprehensive_qa
from standprompt.services.prompt_compressor import DEFAULT_LEGACY_MAX_LENGTH, fallback_compress
from standprompt.services.requirement_validator import validate_requirements
from standprompt.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def build_orchestrator(
    config: dict[str, Any] | None = None,
    visual_context_provider: IVisualContextProvider | None = None,
) -> SourceOfTruthOrchestrator:
    """Construct an orchestrator with its dependencies injected.

    Parameters
    ----------
    config:
        Resolved configuration as returned by :func:`load_config`.  Loaded
        from the default location when omitted.
    visual_context_provider:
        Tier-2 collaborator, if the deployment has one.

    Returns
    -------
    SourceOfTruthOrchestrator
    """
    cfg = config if config is not None else load_config()
    pipeline_cfg = cfg.get("pipeline", {})
    cache_cfg = cfg.get("cache", {})

    cache = None
    if cache_cfg.get("enabled", True):
        cache = MemoryCacheProvider(
            max_size=cache_cfg.get("max_size", 256),
            ttl=cache_cfg.get("ttl", 300),
        )

    orchestrator = SourceOfTruthOrchestrator(
        visual_context_provider=visual_context_provider,
        cache=cache,
        max_length=pipeline_cfg.get("max_prompt_length", 4500),
        visual_context_timeout=cfg.get("visual_context", {}).get("timeout", 30),
        cache_ttl=cache_cfg.get("ttl", 300),
    )
    _logger.debug(
        "orchestrator_built",
        max_length=orchestrator.max_length,
        cache_enabled=cache is not None,
        visual_context=visual_context_provider is not None,
    )
    return orchestrator


async def run_pipeline(
    spec: Specification,
    base_prompt: str = "",
    captured_views: CapturedViews | None = None,
    *,
    orchestrator: SourceOfTruthOrchestrator | None = None,
    config: dict[str, Any] | None = None,
    dimensional: bool = False,
    view_type: str = "front",
    ai_enhancements: dict[str, Any] | None = None,
    run_qa: bool = False,
    fallback: bool = False,
) -> PipelineOutput:
    """Run one specification through the full prompt pipeline.

    Parameters
    ----------
    spec:
        The stand specification (Tier 1).
    base_prompt:
        Creative text to build on.  With ``dimensional=True`` it is first
        wrapped by the dimension-aware prompt builder.
    captured_views:
        Captured 3D views for Tier 2, if any.
    orchestrator:
        Pre-built orchestrator; built from *config* when omitted.
    dimensional:
        Analyse the geometry and prepend the dimensional prompt sections.
    view_type:
        Camera view for the dimensional prompt.
    ai_enhancements:
        Tier-3 suggestions; recorded but never applied.
    run_qa:
        Attach an end-to-end :class:`QAReport`.
    fallback:
        On escalation, retry with the legacy compressor on the
        uncompressed prompt and use its output if the form requirements
        survive.

    Returns
    -------
    PipelineOutput
    """
    cfg = config if config is not None else load_config()
    orch = orchestrator or build_orchestrator(cfg)

    analysis = None
    if dimensional:
        analysis = analyze_specification(spec)
        base_prompt = create_dimension_aware_prompt(
            base_prompt,
            spec.product_box(),
            spec.stand_box(),
            spec.shelf_spec(),
            view_type=view_type,
        )

    hierarchy = SourceHierarchy(
        specification=spec,
        captured_views=captured_views,
        ai_enhancements=ai_enhancements,
    )
    result = await orch.orchestrate(hierarchy, base_prompt)

    final_prompt = result.final_prompt
    fallback_applied = False
    if fallback and result.needs_escalation:
        limit = min(
            DEFAULT_LEGACY_MAX_LENGTH,
            cfg.get("pipeline", {}).get("generation_prompt_limit", 5000),
        )
        candidate = fallback_compress(result.pre_compression_prompt, max_length=limit)
        if validate_requirements(candidate, spec).is_valid:
            final_prompt = candidate
            fallback_applied = True
            _logger.warning("fallback_applied", final_length=len(candidate))
        else:
            _logger.error("fallback_failed", final_length=len(candidate))

    qa_report = None
    if run_qa:
        qa_report = run_comprehensive_qa(spec, captured_views, result, final_prompt)

    return PipelineOutput(
        result=result,
        final_prompt=final_prompt,
        fallback_applied=fallback_applied,
        dimensional_analysis=analysis,
        qa_report=qa_report,
    )
