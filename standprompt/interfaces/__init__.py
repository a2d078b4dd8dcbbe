"""Interfaces for the collaborators injected into the orchestrator.

Interface                  Concrete implementations
ICacheProvider             MemoryCacheProvider
IVisualContextProvider     supplied by the deployment (scene capture service)
"""

from standprompt.interfaces.cache_provider import ICacheProvider
from standprompt.interfaces.visual_context_provider import IVisualContextProvider

__all__ = ["ICacheProvider", "IVisualContextProvider"]
