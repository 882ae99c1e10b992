"""Application ports - Interfaces to infrastructure."""
from queuelens.application.ports.cache_store import ICacheStore

__all__ = [
    "ICacheStore",
]
