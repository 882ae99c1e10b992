"""
QueueLens – Domain Service: Stat Aggregator
=============================================
Helpers numéricos/estadísticos puros sobre registros de cola.

PRINCIPIO CENTRAL:
  Sin I/O, sin estado. Todas las funciones son TOTALES: una muestra
  vacía nunca lanza excepción, devuelve 0 (o un dict vacío).
  Python puro, sin pandas ni numpy.

══════════════════════════════════════════════════════════════════
  FORMULAS (referencia rapida)
══════════════════════════════════════════════════════════════════

  Rate            = count / total * 100          (0 si total = 0)

  Popularity      = (min(total*2, 100) + completion_rate
                     + min(revenue/100, 100)) / 3
    Cada término está acotado a [0, 100] → score ∈ [0, 100].

  Staffing (primera regla que aplica gana):
    total == 0            → "No activity"
    completion_rate < 50  → "Increase staff immediately"
    avg_wait > 30         → "Consider adding staff"
    total > 10            → "Monitor closely"
    resto                 → "Adequate staffing"

  Empleados recomendados = ceil(queue_count / 10)

══════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import timezone, tzinfo
from typing import Dict, Iterable, List, Sequence

from queuelens.domain.entities.queue_record import QueueRecord

UNKNOWN_SERVICE_ID = "unknown"
HOURS_PER_DAY = 24
EMPLOYEES_PER_QUEUE_BLOCK = 10

STAFFING_NO_ACTIVITY = "No activity"
STAFFING_INCREASE_NOW = "Increase staff immediately"
STAFFING_CONSIDER_ADDING = "Consider adding staff"
STAFFING_MONITOR = "Monitor closely"
STAFFING_ADEQUATE = "Adequate staffing"


class StatAggregator:
    """Agregaciones puras sobre muestras numéricas y registros de cola."""

    # ═══════════════════════════════════════════════════════════════
    #  ESTADISTICA BASICA
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def average(values: Sequence[float]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    @staticmethod
    def median(values: Sequence[float]) -> float:
        """Mediana; con longitud par es la media de los dos centrales."""
        if not values:
            return 0.0
        ordered = sorted(values)
        mid = len(ordered) // 2
        if len(ordered) % 2 == 0:
            return (ordered[mid - 1] + ordered[mid]) / 2
        return float(ordered[mid])

    @staticmethod
    def minimum(values: Sequence[float]) -> float:
        # min() de una muestra vacía no tiene sentido: se reporta 0
        return float(min(values)) if values else 0.0

    @staticmethod
    def maximum(values: Sequence[float]) -> float:
        return float(max(values)) if values else 0.0

    @staticmethod
    def rate(count: int, total: int) -> float:
        """Porcentaje count/total en [0, 100]."""
        if total <= 0:
            return 0.0
        return count / total * 100

    # ═══════════════════════════════════════════════════════════════
    #  EXTRACCION DE MUESTRAS
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def extract_wait_times(records: Iterable[QueueRecord]) -> List[float]:
        """Esperas reales en minutos (ausente = 0), solo las > 0."""
        waits = (float(r.actual_wait_time or 0) for r in records)
        return [w for w in waits if w > 0]

    @staticmethod
    def extract_service_times(records: Iterable[QueueRecord]) -> List[float]:
        """
        Duraciones en minutos: (completed_at or created_at) - created_at.

        Registros sin completed_at producen 0 y se descartan.
        """
        times = []
        for record in records:
            finished = record.completed_at or record.created_at
            minutes = (finished - record.created_at).total_seconds() / 60
            if minutes > 0:
                times.append(minutes)
        return times

    @classmethod
    def average_wait_time(cls, records: Iterable[QueueRecord]) -> float:
        return cls.average(cls.extract_wait_times(records))

    @classmethod
    def average_service_time(cls, records: Iterable[QueueRecord]) -> float:
        return cls.average(cls.extract_service_times(records))

    @staticmethod
    def total_revenue(records: Iterable[QueueRecord]) -> float:
        return float(sum(r.total_amount or 0 for r in records))

    # ═══════════════════════════════════════════════════════════════
    #  AGRUPACIONES
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def group_by_hour(
        records: Iterable[QueueRecord],
        tz: tzinfo = timezone.utc,
    ) -> Dict[int, List[QueueRecord]]:
        """
        Agrupa por hora del día (0-23) de created_at en la zona tz.

        Solo aparecen las horas con al menos un registro.
        """
        buckets: Dict[int, List[QueueRecord]] = defaultdict(list)
        for record in records:
            created = record.created_at
            if created.tzinfo is not None:
                created = created.astimezone(tz)
            buckets[created.hour].append(record)
        return dict(buckets)

    @staticmethod
    def group_by_service(records: Iterable[QueueRecord]) -> Dict[str, List[QueueRecord]]:
        """Agrupa por service_id (sin servicio → "unknown"), en orden de aparición."""
        buckets: Dict[str, List[QueueRecord]] = defaultdict(list)
        for record in records:
            buckets[record.service_id or UNKNOWN_SERVICE_ID].append(record)
        return dict(buckets)

    @classmethod
    def average_hourly_volume(cls, hourly: Dict[int, List[QueueRecord]]) -> float:
        """Media de los 24 buckets horarios; las horas sin datos cuentan como 0."""
        total = sum(len(bucket) for bucket in hourly.values())
        return total / HOURS_PER_DAY

    # ═══════════════════════════════════════════════════════════════
    #  SCORING / HEURISTICAS
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def popularity_score(total_queues: int, completion_rate: float, revenue: float) -> float:
        queue_score = min(total_queues * 2, 100)
        revenue_score = min(revenue / 100, 100)
        return (queue_score + completion_rate + revenue_score) / 3

    @staticmethod
    def staffing_recommendation(
        total_queues: int,
        completion_rate: float,
        average_wait_time: float,
    ) -> str:
        if total_queues == 0:
            return STAFFING_NO_ACTIVITY
        if completion_rate < 50:
            return STAFFING_INCREASE_NOW
        if average_wait_time > 30:
            return STAFFING_CONSIDER_ADDING
        if total_queues > 10:
            return STAFFING_MONITOR
        return STAFFING_ADEQUATE

    @staticmethod
    def recommended_employees(queue_count: int) -> int:
        return math.ceil(queue_count / EMPLOYEES_PER_QUEUE_BLOCK)
