"""
QueueLens – Domain Service: Queue Analytics Calculator
========================================================
Convierte los registros crudos de cola de una tienda en uno de los
cuatro agregados (general, tiempos, horas pico, servicios).

FLUJO:
  calculate_*()  → _fetch_records() (Raw Record Source, async)
                 → build_*()        (puro, sin efectos secundarios)

  Los build_*() reciben la lista de registros ya filtrada y no
  dependen de asyncio ni del repositorio: se pueden usar directamente
  con registros históricos o en tests.

FALLOS:
  Cualquier error de la fuente de registros se envuelve en
  AnalyticsOperationError (OPERATION_FAILED) con el nombre de la
  operación y el contexto de entrada. Sin reintentos: la política de
  reintento pertenece al caller.

  Horas pico y servicios lanzan AnalyticsNotFoundError (NOT_FOUND)
  si la ventana no tiene ningún registro.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional

from queuelens.domain.entities.queue_analytics import (
    HourlyPeak,
    HourlyQuiet,
    QueueAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
    QueueTimeAnalyticsEntity,
    ServiceRanking,
    ServiceStat,
    StaffingRecommendation,
)
from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus
from queuelens.domain.exceptions.domain_errors import (
    AnalyticsError,
    AnalyticsNotFoundError,
    AnalyticsOperationError,
)
from queuelens.domain.repositories.queue_record_repository import IQueueRecordRepository
from queuelens.domain.services.stat_aggregator import HOURS_PER_DAY, StatAggregator
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateRange
from queuelens.shared.logging.logger import get_logger

logger = get_logger("calculator")

RANKING_SIZE = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def error_context(
    shop_id: str,
    date_range: Optional[DateRange] = None,
    filters: Optional[QueueAnalyticsFilters] = None,
) -> dict:
    """Contexto de diagnóstico adjunto a los errores."""
    return {
        "shop_id": shop_id,
        "date_range": date_range.to_dict() if date_range else None,
        "filters": filters.to_dict() if filters else None,
    }


class QueueAnalyticsCalculator:
    """
    Calculadora de agregados de cola.

    No guarda estado entre llamadas: cada cálculo lee los registros
    del rango y construye un agregado NUEVO.
    """

    def __init__(
        self,
        record_repository: IQueueRecordRepository,
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._records = record_repository
        self._tz = tz
        self._clock = clock or _utcnow
        self._stats = StatAggregator

    # ═══════════════════════════════════════════════════════════════
    #  API PUBLICA (async: leen la fuente de registros)
    # ═══════════════════════════════════════════════════════════════

    async def calculate_queue_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueAnalyticsEntity:
        records = await self._fetch_records("calculate_queue_analytics", shop_id, date_range, filters)
        return self.build_queue_analytics(shop_id, date_range, records)

    async def calculate_time_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueTimeAnalyticsEntity:
        records = await self._fetch_records("calculate_time_analytics", shop_id, date_range, filters)
        return self.build_time_analytics(shop_id, date_range, records)

    async def calculate_peak_hours(
        self,
        shop_id: str,
        date_range: DateRange,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueuePeakHoursEntity:
        operation = "calculate_peak_hours"
        records = await self._fetch_records(operation, shop_id, date_range, filters)
        if not records:
            raise AnalyticsNotFoundError(
                f"No hay datos de horas pico para la tienda {shop_id}",
                operation=operation,
                context=error_context(shop_id, date_range, filters),
            )
        return self.build_peak_hours(shop_id, date_range, records)

    async def calculate_service_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueServiceAnalyticsEntity:
        operation = "calculate_service_analytics"
        records = await self._fetch_records(operation, shop_id, date_range, filters)
        if not records:
            raise AnalyticsNotFoundError(
                f"No hay datos de servicios para la tienda {shop_id}",
                operation=operation,
                context=error_context(shop_id, date_range, filters),
            )
        return self.build_service_analytics(shop_id, date_range, records)

    # ═══════════════════════════════════════════════════════════════
    #  BUILDERS PUROS
    # ═══════════════════════════════════════════════════════════════

    def build_queue_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        records: List[QueueRecord],
    ) -> QueueAnalyticsEntity:
        """Conteos por estado, tasas y tiempos promedio."""
        counts = {status: 0 for status in QueueStatus}
        for record in records:
            counts[record.status] += 1

        total = sum(counts.values())
        now = self._clock()

        return QueueAnalyticsEntity(
            shop_id=shop_id,
            date_range=date_range,
            total_queues=total,
            completed_queues=counts[QueueStatus.COMPLETED],
            cancelled_queues=counts[QueueStatus.CANCELLED],
            no_show_queues=counts[QueueStatus.NO_SHOW],
            in_progress_queues=counts[QueueStatus.IN_PROGRESS],
            waiting_queues=counts[QueueStatus.WAITING],
            completion_rate=self._stats.rate(counts[QueueStatus.COMPLETED], total),
            cancellation_rate=self._stats.rate(counts[QueueStatus.CANCELLED], total),
            no_show_rate=self._stats.rate(counts[QueueStatus.NO_SHOW], total),
            average_wait_time=self._stats.average_wait_time(records),
            average_service_time=self._stats.average_service_time(records),
            created_at=now,
            updated_at=now,
        )

    def build_time_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        records: List[QueueRecord],
    ) -> QueueTimeAnalyticsEntity:
        """Promedio/mediana/mín/máx de espera y servicio (0 si la muestra está vacía)."""
        s = self._stats
        waits = s.extract_wait_times(records)
        services = s.extract_service_times(records)
        now = self._clock()

        return QueueTimeAnalyticsEntity(
            shop_id=shop_id,
            date_range=date_range,
            average_wait_time=s.average(waits),
            median_wait_time=s.median(waits),
            min_wait_time=s.minimum(waits),
            max_wait_time=s.maximum(waits),
            average_service_time=s.average(services),
            median_service_time=s.median(services),
            min_service_time=s.minimum(services),
            max_service_time=s.maximum(services),
            total_service_time=float(sum(services)),
            created_at=now,
            updated_at=now,
        )

    def build_peak_hours(
        self,
        shop_id: str,
        date_range: DateRange,
        records: List[QueueRecord],
    ) -> QueuePeakHoursEntity:
        """
        Clasifica las 24 horas en pico/tranquila.

        Una hora es pico si su volumen supera la media de los 24 buckets.
        Toda hora recibe recomendación de staffing.
        """
        s = self._stats
        hourly = s.group_by_hour(records, self._tz)
        average_volume = s.average_hourly_volume(hourly)

        peak: List[HourlyPeak] = []
        quiet: List[HourlyQuiet] = []
        staffing: List[StaffingRecommendation] = []

        for hour in range(HOURS_PER_DAY):
            bucket = hourly.get(hour, [])
            queue_count = len(bucket)
            completed = sum(1 for r in bucket if r.is_completed)
            completion_rate = s.rate(completed, queue_count)
            average_wait = s.average_wait_time(bucket)

            if queue_count > average_volume:
                peak.append(HourlyPeak(hour, queue_count, average_wait, completion_rate))
            else:
                quiet.append(HourlyQuiet(hour, queue_count, average_wait))

            staffing.append(StaffingRecommendation(
                hour=hour,
                recommended_employees=s.recommended_employees(queue_count),
                reason=s.staffing_recommendation(queue_count, completion_rate, average_wait),
            ))

        logger.debug(
            "Horas pico calculadas | shop=%s records=%d avg_volume=%.2f peak=%d",
            shop_id, len(records), average_volume, len(peak),
        )

        now = self._clock()
        return QueuePeakHoursEntity(
            shop_id=shop_id,
            date_range=date_range,
            peak_hours=tuple(peak),
            quiet_hours=tuple(quiet),
            recommended_staffing=tuple(staffing),
            created_at=now,
            updated_at=now,
        )

    def build_service_analytics(
        self,
        shop_id: str,
        date_range: DateRange,
        records: List[QueueRecord],
    ) -> QueueServiceAnalyticsEntity:
        """Estadísticas por servicio y ranking top/bottom por popularity_score."""
        s = self._stats
        stats: List[ServiceStat] = []

        for service_id, bucket in s.group_by_service(records).items():
            total = len(bucket)
            completed = sum(1 for r in bucket if r.is_completed)
            completion_rate = s.rate(completed, total)
            revenue = s.total_revenue(bucket)
            service_name = bucket[0].service_name or f"Service {service_id}"

            stats.append(ServiceStat(
                service_id=service_id,
                service_name=service_name,
                total_queues=total,
                completed_queues=completed,
                average_wait_time=s.average_wait_time(bucket),
                average_service_time=s.average_service_time(bucket),
                revenue=revenue,
                popularity_score=s.popularity_score(total, completion_rate, revenue),
            ))

        # sorted() es estable: empates conservan el orden de aparición
        ranked = sorted(stats, key=lambda st: st.popularity_score, reverse=True)
        top = tuple(ServiceRanking.from_stat(st) for st in ranked[:RANKING_SIZE])
        least = tuple(ServiceRanking.from_stat(st) for st in ranked[-RANKING_SIZE:])

        now = self._clock()
        return QueueServiceAnalyticsEntity(
            shop_id=shop_id,
            date_range=date_range,
            service_stats=tuple(stats),
            top_services=top,
            least_popular_services=least,
            created_at=now,
            updated_at=now,
        )

    # ═══════════════════════════════════════════════════════════════
    #  FUENTE DE REGISTROS
    # ═══════════════════════════════════════════════════════════════

    async def _fetch_records(
        self,
        operation: str,
        shop_id: str,
        date_range: DateRange,
        filters: Optional[QueueAnalyticsFilters],
    ) -> List[QueueRecord]:
        try:
            records = await self._records.get_records(
                shop_id, date_range.date_from, date_range.date_to, filters,
            )
        except AnalyticsError:
            raise
        except Exception as exc:
            logger.error(
                "Fallo leyendo registros de cola | op=%s shop=%s error=%s",
                operation, shop_id, exc,
            )
            raise AnalyticsOperationError(
                "No se pudieron leer los registros de cola",
                operation=operation,
                context=error_context(shop_id, date_range, filters),
                cause=exc,
            ) from exc

        return list(records or [])
