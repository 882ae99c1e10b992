"""
QueueLens – Domain Value Object: QueueAnalyticsFilters
========================================================
Filtros opcionales de una consulta de analytics. Cada filtro es un
predicado de igualdad que se suma al predicado obligatorio
tienda + rango de fechas.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus
from queuelens.domain.exceptions.domain_errors import AnalyticsValidationError


@dataclass(frozen=True, slots=True)
class QueueAnalyticsFilters:
    """Filtros de igualdad sobre registros de cola."""

    employee_id: Optional[str] = None
    service_id: Optional[str] = None
    status_filter: Optional[str] = None
    department_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status_filter is not None:
            valid = {s.value for s in QueueStatus}
            if self.status_filter not in valid:
                raise AnalyticsValidationError(
                    f"status_filter inválido: {self.status_filter!r}",
                    operation="analytics_filters",
                    context={"status_filter": self.status_filter, "valid": sorted(valid)},
                )

    @property
    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def predicates(self) -> Dict[str, Any]:
        """Mapa atributo-de-QueueRecord → valor esperado (solo filtros activos)."""
        mapping = {
            "employee_id": self.employee_id,
            "service_id": self.service_id,
            "status": self.status_filter,
            "department_id": self.department_id,
        }
        return {k: v for k, v in mapping.items() if v is not None}

    def matches(self, record: QueueRecord) -> bool:
        """Evalúa los predicados sobre un registro en memoria."""
        for attr, expected in self.predicates().items():
            actual = getattr(record, attr)
            if isinstance(actual, QueueStatus):
                actual = actual.value
            if actual != expected:
                return False
        return True

    def fingerprint(self) -> str:
        """Hash estable de los filtros (para claves de cache)."""
        raw = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["QueueAnalyticsFilters"]:
        if not data:
            return None
        return cls(
            employee_id=data.get("employee_id"),
            service_id=data.get("service_id"),
            status_filter=data.get("status_filter"),
            department_id=data.get("department_id"),
        )
