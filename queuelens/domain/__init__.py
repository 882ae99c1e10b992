"""
QueueLens – Domain Layer
==========================
Núcleo del motor de analytics. CERO dependencias de frameworks.

Este módulo contiene:
- entities/: QueueRecord y los agregados de analytics
- value_objects/: Objetos inmutables (DateRange, QueueAnalyticsFilters)
- services/: StatAggregator y QueueAnalyticsCalculator
- repositories/: Interfaces abstractas (ABCs)
- exceptions/: Errores tipados de analytics

REGLA DE DEPENDENCIA:
Este módulo NO puede importar de:
- infrastructure/
- presentation/
- application/
- Frameworks externos (SQLAlchemy, FastAPI, etc.)
"""

from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus
from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueueTimeAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
)
from queuelens.domain.value_objects.date_range import DateRange
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters

__all__ = [
    "QueueRecord",
    "QueueStatus",
    "QueueAnalyticsEntity",
    "QueueTimeAnalyticsEntity",
    "QueuePeakHoursEntity",
    "QueueServiceAnalyticsEntity",
    "DateRange",
    "QueueAnalyticsFilters",
]
