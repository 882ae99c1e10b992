"""
QueueLens – In-Memory Cache Store
===================================
ICacheStore en memoria del proceso, con TTL por clave.

Las entradas vencidas se purgan de forma perezosa al leerlas.
Solo sirve para un único proceso (desarrollo / tests); con varios
workers usar RedisCacheStore.

Los conjuntos se modifican sin ningún await de por medio, así que cada
operación es atómica dentro del event loop.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Set, Tuple

from queuelens.application.ports.cache_store import ICacheStore


class InMemoryCacheStore(ICacheStore):
    """Diccionario clave → (bytes, vencimiento monotónico) + conjuntos con TTL."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.monotonic
        self._data: Dict[str, Tuple[bytes, float]] = {}
        self._sets: Dict[str, Tuple[Set[str], float]] = {}

    async def get(self, key: str) -> Optional[bytes]:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._data[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._sets.pop(key, None)

    # ─── Conjuntos ──────────────────────────────────────────────────────

    async def add_to_set(self, key: str, member: str, ttl_seconds: int) -> None:
        members = self._live_set(key)
        members.add(member)
        # El vencimiento solo se extiende, nunca se acorta
        current = self._sets.get(key, (None, 0.0))[1]
        self._sets[key] = (members, max(current, self._clock() + ttl_seconds))

    async def set_members(self, key: str) -> Set[str]:
        return set(self._live_set(key))

    async def remove_from_set(self, key: str, *members: str) -> None:
        item = self._sets.get(key)
        if item is None:
            return
        item[0].difference_update(members)
        if not item[0]:
            del self._sets[key]

    def _live_set(self, key: str) -> Set[str]:
        item = self._sets.get(key)
        if item is None:
            return set()
        members, expires_at = item
        if expires_at <= self._clock():
            del self._sets[key]
            return set()
        return members

    # ─── Inspección (tests) ─────────────────────────────────────────────

    def clear(self) -> None:
        self._data.clear()
        self._sets.clear()

    def __len__(self) -> int:
        return len(self._data) + len(self._sets)

    def __contains__(self, key: str) -> bool:
        return key in self._data or key in self._sets
