"""Custom exception hierarchy for standprompt.

All application exceptions inherit from :class:`StandPromptError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "visual-context") caused the failure.

    StandPromptError  (base -- catch-all for any standprompt error)
    +-- SpecificationError   (malformed or unreadable specification input)
    +-- VisualContextError   (Tier-2 visual-context collaborator failure)
    +-- PipelineError        (orchestration cannot produce any prompt)
    +-- ConfigurationError   (invalid settings or compression config)

Most pipeline problems are *not* raised: infeasible geometry, missing
requirements and lost protected phrases are reported as data on the
result models.  Only catastrophic input reaches the caller as an
exception.
"""


class StandPromptError(Exception):
    """Base exception for all standprompt errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[visual-context] Timed out``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class SpecificationError(StandPromptError):
    """Raised when a stand specification cannot be read or parsed."""

    def __init__(
        self,
        message: str = "Invalid stand specification",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------

class VisualContextError(StandPromptError):
    """Raised by visual-context providers when no context can be produced.

    The orchestrator catches this (and any other exception from the
    provider) and continues with the Tier-1 prompt only.
    """

    def __init__(
        self,
        message: str = "Visual context generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class PipelineError(StandPromptError):
    """Raised when the pipeline has no usable prompt text at all."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(StandPromptError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
