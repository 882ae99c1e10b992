"""
QueueLens – Application DTO: Analytics
========================================
Data Transfer Objects de las respuestas compuestas del servicio.

Los agregados guardan los valores sin redondear (el cache necesita
igualdad exacta); el redondeo a 2 decimales ocurre aquí, al exponerlos.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
)

DECIMALS = 2


def rounded(value: Any, decimals: int = DECIMALS) -> Any:
    """Redondea recursivamente los floats de un dict/list serializado."""
    if isinstance(value, float):
        return round(value, decimals)
    if isinstance(value, dict):
        return {k: rounded(v, decimals) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [rounded(v, decimals) for v in value]
    return value


def present(entity: Any) -> Dict[str, Any]:
    """Vista pública de un agregado (to_dict redondeado)."""
    return rounded(entity.to_dict())


@dataclass
class AnalyticsSummaryDTO:
    """Resumen hoy / semana / mes + horas pico + servicios."""

    today: QueueAnalyticsEntity
    weekly: QueueAnalyticsEntity
    monthly: QueueAnalyticsEntity
    peak_hours: QueuePeakHoursEntity
    service_analytics: QueueServiceAnalyticsEntity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": present(self.today),
            "weekly": present(self.weekly),
            "monthly": present(self.monthly),
            "peak_hours": present(self.peak_hours),
            "service_analytics": present(self.service_analytics),
        }


@dataclass
class PaginationDTO:
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "total_pages": self.total_pages,
        }


@dataclass
class PaginatedAnalyticsDTO:
    """Página de snapshots históricos + metadatos de paginación."""

    pagination: PaginationDTO
    data: List[QueueAnalyticsEntity] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [present(item) for item in self.data],
            "pagination": self.pagination.to_dict(),
        }
