"""
QueueLens – Domain Entity: AnalyticsCacheEntry
================================================
Entrada del cache de analytics. El payload es un agregado opaco para
el cache (cualquiera de los cuatro tipos de queue_analytics).

CICLO DE VIDA:
  ausente → fresca (set) → válida | vencida-pero-presente → ausente
  (invalidate o expulsión del store). Nunca se muta: un nuevo set con
  la misma clave la reemplaza.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

CACHE_KEY_PREFIX = "queue_analytics_"


def shop_cache_key(shop_id: str) -> str:
    """Clave base del cache: una entrada por tienda."""
    return f"{CACHE_KEY_PREFIX}{shop_id}"


@dataclass(frozen=True, slots=True)
class AnalyticsCacheEntry:
    shop_id: str
    cache_key: str
    payload: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
