"""
QueueLens – Domain Repository Interface: QueueRecord
======================================================
Fuente de registros crudos de cola (Raw Record Source).

Define el contrato para cualquier implementación del repositorio
de colas (MySQL, PostgreSQL, InMemory, etc.). El motor de analytics
solo LEE: el CRUD de colas vive fuera de este sistema.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from queuelens.domain.entities.queue_record import QueueRecord
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters


class IQueueRecordRepository(ABC):
    """
    Interfaz abstracta para la fuente de registros de cola.

    OPERACIONES ASYNC:
    Todas las operaciones son async para no bloquear el event loop.
    """

    @abstractmethod
    async def get_records(
        self,
        shop_id: str,
        date_from: datetime,
        date_to: datetime,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueRecord]:
        """
        Obtiene los registros de una tienda en un rango.

        Predicado obligatorio: shop_id == shop_id AND
        date_from <= created_at <= date_to. Los filtros se suman
        como predicados de igualdad.

        Args:
            shop_id: Tienda
            date_from: Inicio del rango (inclusive)
            date_to: Fin del rango (inclusive)
            filters: Filtros opcionales (empleado, servicio, estado, departamento)

        Returns:
            Lista de QueueRecord (orden no garantizado)
        """
        pass
