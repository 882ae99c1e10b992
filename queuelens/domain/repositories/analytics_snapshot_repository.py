"""
QueueLens – Domain Repository Interface: Analytics Snapshots
==============================================================
Historial de agregados persistidos (tabla `queue_analytics`).

A diferencia del cache, los snapshots no expiran: son fotos de
QueueAnalyticsEntity guardadas explícitamente para consultar la
evolución de una tienda en el tiempo.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters


class IAnalyticsSnapshotRepository(ABC):
    """Interfaz abstracta para el historial de analytics."""

    @abstractmethod
    async def save(
        self,
        analytics: QueueAnalyticsEntity,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> str:
        """
        Persiste un snapshot.

        Args:
            analytics: Agregado calculado
            filters: Filtros con los que se calculó (se guardan para filtrar historial)

        Returns:
            ID del snapshot
        """
        pass

    @abstractmethod
    async def find_by_shop(
        self,
        shop_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueAnalyticsEntity]:
        """
        Snapshots de una tienda.

        Args:
            shop_id: Tienda
            date_from: Solo snapshots con rango.from >= date_from (opcional)
            date_to: Solo snapshots con rango.to <= date_to (opcional)
            filters: Igualdad sobre los filtros guardados (opcional)

        Returns:
            Lista ordenada por created_at DESC
        """
        pass
