"""
QueueLens – Redis Cache Store
===============================
ICacheStore sobre redis.asyncio, compartido entre workers.

El TTL lo aplica Redis (SET ... EX ttl): una clave vencida desaparece
sola y get() devuelve None. Los conjuntos requieren Redis >= 7 (EXPIRE
NX/GT).
"""

from __future__ import annotations

from typing import Optional, Set

import redis.asyncio as redis

from queuelens.application.ports.cache_store import ICacheStore
from queuelens.shared.logging.logger import get_logger

logger = get_logger("infrastructure.redis_cache")


class RedisCacheStore(ICacheStore):
    """
    Store clave/TTL en Redis.

    USO:
        store = RedisCacheStore.from_url("redis://localhost:6379/0")
        await store.set("k", b"v", 60)
        await store.close()  # En shutdown
    """

    def __init__(self, client: redis.Redis, prefix: str = ""):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> "RedisCacheStore":
        return cls(redis.Redis.from_url(url, decode_responses=False), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[bytes]:
        return await self._client.get(self._key(key))

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        await self._client.set(self._key(key), value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._client.delete(self._key(key))

    async def add_to_set(self, key: str, member: str, ttl_seconds: int) -> None:
        name = self._key(key)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.sadd(name, member)
            # NX fija el TTL del conjunto recién creado; GT solo lo extiende
            pipe.expire(name, ttl_seconds, nx=True)
            pipe.expire(name, ttl_seconds, gt=True)
            await pipe.execute()

    async def set_members(self, key: str) -> Set[str]:
        raw = await self._client.smembers(self._key(key))
        return {m.decode("utf-8") if isinstance(m, bytes) else m for m in raw}

    async def remove_from_set(self, key: str, *members: str) -> None:
        if members:
            await self._client.srem(self._key(key), *members)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Conexión a Redis cerrada")
