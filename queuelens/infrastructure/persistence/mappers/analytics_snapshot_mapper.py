"""
QueueLens – Analytics Snapshot Mapper
=======================================
Mapea entre QueueAnalyticsEntity (dominio) y QueueAnalyticsSnapshotModel (ORM).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateRange
from queuelens.infrastructure.persistence.mappers.queue_record_mapper import as_aware, to_db_datetime

_METRICS = (
    "total_queues", "completed_queues", "cancelled_queues", "no_show_queues",
    "in_progress_queues", "waiting_queues", "completion_rate", "cancellation_rate",
    "no_show_rate", "average_wait_time", "average_service_time",
)


class AnalyticsSnapshotMapper:
    """Mapper bidireccional QueueAnalyticsEntity ↔ QueueAnalyticsSnapshotModel."""

    def to_model(
        self,
        snapshot_id: str,
        analytics: QueueAnalyticsEntity,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Dict[str, Any]:
        """
        Convierte la entidad a dict para crear el modelo ORM.

        Args:
            snapshot_id: ID asignado al snapshot
            analytics: Agregado a persistir
            filters: Filtros con los que se calculó (opcional)
        """
        data: Dict[str, Any] = {
            "id": snapshot_id,
            "shop_id": analytics.shop_id,
            "date_from": to_db_datetime(analytics.date_range.date_from),
            "date_to": to_db_datetime(analytics.date_range.date_to),
            "created_at": to_db_datetime(analytics.created_at),
            "updated_at": to_db_datetime(analytics.updated_at),
        }
        data.update({name: getattr(analytics, name) for name in _METRICS})
        data.update((filters or QueueAnalyticsFilters()).to_dict())
        return data

    def to_entity_from_orm(self, model: Any) -> QueueAnalyticsEntity:
        return QueueAnalyticsEntity(
            shop_id=model.shop_id,
            date_range=DateRange(as_aware(model.date_from), as_aware(model.date_to)),
            created_at=as_aware(model.created_at),
            updated_at=as_aware(model.updated_at),
            **{name: getattr(model, name) for name in _METRICS},
        )
