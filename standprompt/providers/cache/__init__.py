"""Cache providers.

In-memory per-item TTL cache used to memoize compression results across
pipeline runs in one process.  For multi-worker deployments, swap in
another adapter implementing ICacheProvider without touching the
orchestrator.
"""

from standprompt.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
