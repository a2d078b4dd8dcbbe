"""Utility modules for standprompt.

- **errors** -- Domain exception hierarchy rooted at StandPromptError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **scoring** -- Half-up rounding, clamping and keyword hit counting used
  by the analyzer, the quality assessor and the QA battery.
"""

# -- Domain exception hierarchy --------------------------------------------
from standprompt.utils.errors import (
    ConfigurationError,
    PipelineError,
    SpecificationError,
    StandPromptError,
    VisualContextError,
)

# -- Structured logging setup ----------------------------------------------
from standprompt.utils.logging import configure_logging, get_logger

# -- Scoring helpers -------------------------------------------------------
from standprompt.utils.scoring import (
    clamp,
    count_pattern_matches,
    count_term_matches,
    pass_percentage,
    round_half_up,
)

__all__ = [
    "ConfigurationError",
    "PipelineError",
    "SpecificationError",
    "StandPromptError",
    "VisualContextError",
    "clamp",
    "configure_logging",
    "count_pattern_matches",
    "count_term_matches",
    "get_logger",
    "pass_percentage",
    "round_half_up",
]
