"""Abstract base class for the Tier-2 visual-context collaborator.

A visual-context provider turns captured 3D scene views into reference
images and a scale-accuracy estimate.  The real implementation (scene
capture, image upload, remote analysis) lives outside this package; the
orchestrator only depends on this interface.

Providers signal failure by raising, preferably
:class:`~standprompt.utils.errors.VisualContextError`.  The orchestrator
catches any exception and timeout and continues without visual context.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from standprompt.models.hierarchy import VisualContextRequest, VisualContextResult


class IVisualContextProvider(ABC):
    """Contract for services that analyse captured stand views."""

    @abstractmethod
    async def generate_visual_context(
        self, request: VisualContextRequest
    ) -> VisualContextResult:
        """Produce reference images and scale accuracy for *request*.

        Parameters
        ----------
        request:
            Specification, captured views, view type and creative mode.

        Returns
        -------
        VisualContextResult
            Reference image URLs and the scale-accuracy estimate.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error messages."""
