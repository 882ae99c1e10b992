"""
QueueLens – Queue Record Mapper
=================================
Mapea QueueModel (ORM) → QueueRecord (entidad de dominio).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus


def as_aware(value: Optional[datetime]) -> Optional[datetime]:
    """MySQL DATETIME no guarda zona: los valores naive se leen como UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Inverso de as_aware: el driver descarta el offset, se envía naive en UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class QueueRecordMapper:
    """Mapper de solo lectura: la tabla `queues` no se escribe desde aquí."""

    def to_entity_from_orm(self, model: Any) -> QueueRecord:
        return QueueRecord(
            id=model.id,
            status=QueueStatus(model.status),
            created_at=as_aware(model.created_at),
            completed_at=as_aware(model.completed_at),
            actual_wait_time=model.actual_wait_time,
            service_id=model.service_id,
            service_name=model.service_name,
            total_amount=float(model.total_amount) if model.total_amount is not None else None,
            employee_id=model.employee_id,
            department_id=model.department_id,
        )
