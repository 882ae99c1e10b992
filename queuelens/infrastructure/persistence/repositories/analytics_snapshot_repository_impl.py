"""
Analytics Snapshot Repository Implementation.

Historial de snapshots sobre la tabla `queue_analytics` usando SQLAlchemy.
Implementa la interfaz IAnalyticsSnapshotRepository del dominio.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Select, desc, select

from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.repositories.analytics_snapshot_repository import IAnalyticsSnapshotRepository
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.infrastructure.persistence.database import DatabaseManager
from queuelens.infrastructure.persistence.mappers.analytics_snapshot_mapper import AnalyticsSnapshotMapper
from queuelens.infrastructure.persistence.mappers.queue_record_mapper import to_db_datetime
from queuelens.infrastructure.persistence.models import QueueAnalyticsSnapshotModel
from queuelens.shared.logging.logger import get_logger

logger = get_logger("infrastructure.snapshot_repository")


class AnalyticsSnapshotRepositoryImpl(IAnalyticsSnapshotRepository):
    """Implementación async del historial de analytics."""

    def __init__(self, db: DatabaseManager):
        self._db = db
        self._mapper = AnalyticsSnapshotMapper()

    async def save(
        self,
        analytics: QueueAnalyticsEntity,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> str:
        snapshot_id = str(uuid.uuid4())
        model = QueueAnalyticsSnapshotModel(**self._mapper.to_model(snapshot_id, analytics, filters))

        async with self._db.session() as session:
            session.add(model)
            await session.flush()

        logger.debug("Snapshot guardado | id=%s shop=%s", snapshot_id, analytics.shop_id)
        return snapshot_id

    def build_query(
        self,
        shop_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Select:
        query = select(QueueAnalyticsSnapshotModel).where(
            QueueAnalyticsSnapshotModel.shop_id == shop_id
        )
        if date_from is not None:
            query = query.where(QueueAnalyticsSnapshotModel.date_from >= to_db_datetime(date_from))
        if date_to is not None:
            query = query.where(QueueAnalyticsSnapshotModel.date_to <= to_db_datetime(date_to))
        if filters is not None:
            for attr, value in filters.to_dict().items():
                if value is not None:
                    query = query.where(getattr(QueueAnalyticsSnapshotModel, attr) == value)

        return query.order_by(desc(QueueAnalyticsSnapshotModel.created_at))

    async def find_by_shop(
        self,
        shop_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueAnalyticsEntity]:
        query = self.build_query(shop_id, date_from, date_to, filters)

        async with self._db.session() as session:
            result = await session.execute(query)
            models = result.scalars().all()

        return [self._mapper.to_entity_from_orm(m) for m in models]
