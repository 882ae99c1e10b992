"""Cache Store adapters."""
from queuelens.infrastructure.cache.memory_cache_store import InMemoryCacheStore

__all__ = [
    "InMemoryCacheStore",
]
