"""
Queue Record Repository Implementation.

Fuente de registros crudos sobre la tabla `queues` usando SQLAlchemy.
Implementa la interfaz IQueueRecordRepository del dominio.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Select, select

from queuelens.domain.entities.queue_record import QueueRecord
from queuelens.domain.repositories.queue_record_repository import IQueueRecordRepository
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.infrastructure.persistence.database import DatabaseManager
from queuelens.infrastructure.persistence.mappers.queue_record_mapper import QueueRecordMapper, to_db_datetime
from queuelens.infrastructure.persistence.models import QueueModel
from queuelens.shared.logging.logger import get_logger

logger = get_logger("infrastructure.queue_record_repository")


class QueueRecordRepositoryImpl(IQueueRecordRepository):
    """
    Implementación async de la fuente de registros.

    Predicado obligatorio: shop_id + created_at en [date_from, date_to].
    Cada filtro activo agrega un predicado de igualdad.
    """

    def __init__(self, db: DatabaseManager):
        self._db = db
        self._mapper = QueueRecordMapper()

    def build_query(
        self,
        shop_id: str,
        date_from: datetime,
        date_to: datetime,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Select:
        """SELECT de la ventana; los límites viajan como UTC naive (DATETIME)."""
        query = (
            select(QueueModel)
            .where(QueueModel.shop_id == shop_id)
            .where(QueueModel.created_at >= to_db_datetime(date_from))
            .where(QueueModel.created_at <= to_db_datetime(date_to))
            .order_by(QueueModel.created_at)
        )
        if filters is not None:
            for attr, value in filters.predicates().items():
                query = query.where(getattr(QueueModel, attr) == value)
        return query

    async def get_records(
        self,
        shop_id: str,
        date_from: datetime,
        date_to: datetime,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueRecord]:
        query = self.build_query(shop_id, date_from, date_to, filters)

        async with self._db.session() as session:
            result = await session.execute(query)
            models = result.scalars().all()

        logger.debug("Registros leídos | shop=%s count=%d", shop_id, len(models))
        return [self._mapper.to_entity_from_orm(m) for m in models]
