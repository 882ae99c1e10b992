"""
QueueLens – Domain Entity: QueueRecord
========================================
Registro crudo de un cliente en la cola de una tienda (estado,
timestamps, servicio, importe). Es propiedad del store externo:
el motor de analytics solo lo lee.

CAMPOS:
- id:               Identificador del registro
- status:           waiting | in_progress | completed | cancelled | no_show
- created_at:       Alta en la cola (aware datetime)
- completed_at:     Fin del servicio (opcional)
- actual_wait_time: Espera real en minutos (>= 0 o ausente)
- service_id:       Servicio solicitado
- service_name:     Nombre legible del servicio (opcional)
- total_amount:     Importe cobrado (>= 0 o ausente)
- employee_id / department_id: opcionales, usados por los filtros
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class QueueStatus(str, Enum):
    """Estados posibles de un registro de cola."""

    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


@dataclass(frozen=True, slots=True)
class QueueRecord:
    """Registro de cola inmutable tal como lo entrega la fuente de datos."""

    id: str
    status: QueueStatus
    created_at: datetime
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    completed_at: Optional[datetime] = None
    actual_wait_time: Optional[float] = None  # minutos
    total_amount: Optional[float] = None
    employee_id: Optional[str] = None
    department_id: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == QueueStatus.COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "actual_wait_time": self.actual_wait_time,
            "service_id": self.service_id,
            "service_name": self.service_name,
            "total_amount": self.total_amount,
            "employee_id": self.employee_id,
            "department_id": self.department_id,
        }
