"""
QueueLens – Application Service: Analytics Cache
==================================================
Cache con TTL de agregados precalculados, sobre el port ICacheStore.

CLAVES:
  scope "shop"   → queue_analytics_<shop_id>
                   Una sola entrada por tienda sin importar el rango:
                   dos rangos distintos se pisan entre sí. is_valid()
                   evita servir un rango que no cubre la consulta.
  scope "scoped" → queue_analytics_<shop_id>_<sha1(rango+filtros)[:16]>
                   Una entrada por (tienda, rango, filtros). Las claves
                   de cada tienda se registran en un conjunto nativo del
                   store (SADD) para que invalidate() pueda borrarlas
                   todas, aun con escritores concurrentes. Cada set()
                   poda del índice las claves que el store ya expulsó.

VALIDEZ:
  get() descarta entradas con expires_at vencido (las trata como
  ausentes, no las purga). is_valid() exige cobertura completa:
  cached.from <= requested.from AND cached.to >= requested.to.

CONCURRENCIA:
  Sin locks. Último escritor gana; dos misses concurrentes para la
  misma tienda solo duplican trabajo.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from queuelens.application.ports.cache_store import ICacheStore
from queuelens.domain.entities.analytics_cache_entry import AnalyticsCacheEntry, shop_cache_key
from queuelens.domain.entities.queue_analytics import aggregate_from_dict
from queuelens.domain.exceptions.domain_errors import AnalyticsOperationError
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateLike, DateRange, parse_datetime
from queuelens.shared.logging.logger import get_logger

logger = get_logger("analytics_cache")

DEFAULT_TTL_SECONDS = 3600
KEY_SCOPES = ("shop", "scoped")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsCache:
    """
    Cache de agregados de analytics, una entrada por clave.

    El payload es opaco: cualquier agregado con KIND y to_dict().
    """

    def __init__(
        self,
        store: ICacheStore,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_scope: str = "shop",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if key_scope not in KEY_SCOPES:
            raise ValueError(f"key_scope inválido: {key_scope!r} (usar {KEY_SCOPES})")
        self._store = store
        self._default_ttl = default_ttl_seconds
        self._key_scope = key_scope
        self._clock = clock or _utcnow

    @property
    def key_scope(self) -> str:
        return self._key_scope

    # ═══════════════════════════════════════════════════════════════
    #  CLAVES
    # ═══════════════════════════════════════════════════════════════

    def cache_key(
        self,
        shop_id: str,
        date_range: Optional[DateRange] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> str:
        base = shop_cache_key(shop_id)
        if self._key_scope == "shop" or date_range is None:
            return base

        raw = json.dumps(
            {
                "range": date_range.to_dict(),
                "filters": filters.fingerprint() if filters else None,
            },
            sort_keys=True,
        )
        digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]
        return f"{base}_{digest}"

    @staticmethod
    def _index_key(shop_id: str) -> str:
        return f"{shop_cache_key(shop_id)}:keys"

    # ═══════════════════════════════════════════════════════════════
    #  API PUBLICA
    # ═══════════════════════════════════════════════════════════════

    async def get(
        self,
        shop_id: str,
        date_range: Optional[DateRange] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Optional[AnalyticsCacheEntry]:
        """
        Lee la entrada vigente, o None si no existe / expiró / está corrupta.

        Raises:
            AnalyticsOperationError: falla del store
        """
        key = self.cache_key(shop_id, date_range, filters)
        try:
            raw = await self._store.get(key)
        except Exception as exc:
            logger.error("Fallo leyendo cache | shop=%s key=%s error=%s", shop_id, key, exc)
            raise AnalyticsOperationError(
                "No se pudo leer el cache de analytics",
                operation="cache_get",
                context={"shop_id": shop_id, "cache_key": key},
                cause=exc,
            ) from exc

        if raw is None:
            return None

        entry = self._deserialize(raw, key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache vencido | shop=%s key=%s expires_at=%s",
                         shop_id, key, entry.expires_at.isoformat())
            return None

        return entry

    async def set(
        self,
        shop_id: str,
        payload: Any,
        ttl_seconds: Optional[int] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> AnalyticsCacheEntry:
        """
        Escribe una entrada NUEVA (sobrescribe, no fusiona).

        El rango de la clave (scope "scoped") sale de payload.date_range.

        Raises:
            AnalyticsOperationError: falla del store
        """
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        key = self.cache_key(shop_id, getattr(payload, "date_range", None), filters)
        entry = AnalyticsCacheEntry(
            shop_id=shop_id,
            cache_key=key,
            payload=payload,
            expires_at=self._clock() + timedelta(seconds=ttl),
        )

        try:
            await self._store.set(key, self._serialize(entry), ttl)
            if self._key_scope == "scoped":
                await self._register_key(shop_id, key, ttl)
        except Exception as exc:
            logger.error("Fallo escribiendo cache | shop=%s key=%s error=%s", shop_id, key, exc)
            raise AnalyticsOperationError(
                "No se pudo guardar el cache de analytics",
                operation="cache_set",
                context={"shop_id": shop_id, "cache_key": key, "ttl_seconds": ttl},
                cause=exc,
            ) from exc

        logger.info("Analytics cacheados | shop=%s key=%s ttl=%ds", shop_id, key, ttl)
        return entry

    async def invalidate(self, shop_id: str) -> None:
        """
        Elimina la(s) entrada(s) de una tienda.

        Raises:
            AnalyticsOperationError: falla del store
        """
        base = shop_cache_key(shop_id)
        try:
            keys = [base]
            if self._key_scope == "scoped":
                keys.extend(sorted(await self._store.set_members(self._index_key(shop_id))))
            for key in keys:
                await self._store.delete(key)
            if self._key_scope == "scoped":
                # Solo se quitan las claves borradas: una registrada en paralelo sigue indexada
                await self._store.remove_from_set(self._index_key(shop_id), *keys[1:])
        except Exception as exc:
            logger.error("Fallo invalidando cache | shop=%s error=%s", shop_id, exc)
            raise AnalyticsOperationError(
                "No se pudo invalidar el cache de analytics",
                operation="invalidate_cache",
                context={"shop_id": shop_id},
                cause=exc,
            ) from exc

        logger.info("Cache invalidado | shop=%s keys=%d", shop_id, len(keys))

    @staticmethod
    def is_valid(entry: AnalyticsCacheEntry, requested_from: DateLike, requested_to: DateLike) -> bool:
        """True si el rango cacheado cubre completamente el solicitado."""
        cached_range: DateRange = entry.payload.date_range
        return cached_range.covers(requested_from, requested_to)

    # ═══════════════════════════════════════════════════════════════
    #  SERIALIZACION
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _serialize(entry: AnalyticsCacheEntry) -> bytes:
        document = {
            "kind": entry.payload.KIND,
            "shop_id": entry.shop_id,
            "cache_key": entry.cache_key,
            "expires_at": entry.expires_at.isoformat(),
            "payload": entry.payload.to_dict(),
        }
        return json.dumps(document).encode("utf-8")

    @staticmethod
    def _deserialize(raw: bytes, key: str) -> Optional[AnalyticsCacheEntry]:
        try:
            document = json.loads(raw)
            return AnalyticsCacheEntry(
                shop_id=document["shop_id"],
                cache_key=document["cache_key"],
                payload=aggregate_from_dict(document["kind"], document["payload"]),
                expires_at=parse_datetime(document["expires_at"], "expires_at"),
            )
        except (ValueError, KeyError, TypeError) as exc:
            # Entrada ilegible = miss; el próximo set la reemplaza
            logger.warning("Entrada de cache corrupta ignorada | key=%s error=%s", key, exc)
            return None

    # ═══════════════════════════════════════════════════════════════
    #  INDICE DE CLAVES (scope "scoped")
    # ═══════════════════════════════════════════════════════════════

    async def _register_key(self, shop_id: str, key: str, ttl: int) -> None:
        index = self._index_key(shop_id)
        await self._store.add_to_set(index, key, ttl)

        stale = [
            member for member in await self._store.set_members(index)
            if member != key and await self._store.get(member) is None
        ]
        if stale:
            await self._store.remove_from_set(index, *stale)
            logger.debug("Índice de cache podado | shop=%s claves=%d", shop_id, len(stale))
