"""Result of one end-to-end pipeline run as returned by ``run_pipeline``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from standprompt.models.dimensions import DimensionalAnalysis
from standprompt.models.hierarchy import OrchestrationResult
from standprompt.models.qa import QAReport


class PipelineOutput(BaseModel):
    """Orchestration result plus what the caller layered on top of it."""

    model_config = ConfigDict(frozen=True)

    result: OrchestrationResult
    # Prompt to send to the generator; differs from result.final_prompt
    # only when the legacy fallback replaced it.
    final_prompt: str
    fallback_applied: bool = False
    dimensional_analysis: DimensionalAnalysis | None = None
    qa_report: QAReport | None = None

    @property
    def needs_escalation(self) -> bool:
        """True when an escalation is still unresolved after any fallback."""
        return self.result.needs_escalation and not self.fallback_applied
