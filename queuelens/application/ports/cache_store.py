"""
QueueLens – Application Port: Cache Store
===========================================
Interfaz de un store genérico clave/TTL.

El AnalyticsCache decide QUÉ guardar; la infraestructura decide
DÓNDE (memoria del proceso, Redis, etc.). El store trabaja con bytes
opacos y puede expulsar entradas cuando vence su TTL.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Set


class ICacheStore(ABC):
    """
    Interfaz de cache clave → bytes con TTL.

    IMPLEMENTACIONES POSIBLES:
    - InMemoryCacheStore (proceso único / tests)
    - RedisCacheStore (compartido entre workers)
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Lee una clave.

        Returns:
            Bytes guardados, o None si no existe / expiró
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """
        Escribe (sobrescribe) una clave con TTL.

        Args:
            key: Clave
            value: Payload serializado
            ttl_seconds: Segundos hasta que el store puede expulsarla
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Elimina una clave (no falla si no existe)."""
        pass

    # ─── Conjuntos (índice de claves) ─────────────────────────────────
    # Cada operación es atómica en el store: dos escritores concurrentes
    # nunca pierden miembros.

    @abstractmethod
    async def add_to_set(self, key: str, member: str, ttl_seconds: int) -> None:
        """Agrega un miembro al conjunto; su TTL se extiende, nunca se acorta."""
        pass

    @abstractmethod
    async def set_members(self, key: str) -> Set[str]:
        """Miembros del conjunto (vacío si no existe)."""
        pass

    @abstractmethod
    async def remove_from_set(self, key: str, *members: str) -> None:
        """Quita miembros del conjunto (SREM)."""
        pass
