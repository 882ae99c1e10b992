"""
QueueLens – Application Service: Queue Analytics Service
==========================================================
Fachada del motor de analytics. Orquesta:

  get_queue_analytics()      → cache-then-compute (read-through)
  get_queue_*_analytics()    → cálculo directo (sin cache)
  get_queue_analytics_summary() → fan-out de 5 tareas + join
  get_paginated_...history() → snapshots persistidos, paginados en memoria
  record_analytics_snapshot() → calcula y persiste un snapshot
  export_analytics_data()    → json/csv de los agregados de la ventana

FLUJO READ-THROUGH:
  validar → cache.get → hit que cubre el rango → devolver
                      → miss / no cubre → calcular → cache.set → devolver

  Con scope "shop" la clave no incluye filtros: las consultas filtradas
  no leen ni escriben el cache (calculan siempre).

ERRORES:
  AnalyticsError se propaga tal cual. Cualquier otra excepción se
  envuelve en AnalyticsOperationError con operación y contexto.
  Sin reintentos.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Dict, Iterator, Optional, Tuple

from queuelens.application.dto.analytics_dto import (
    AnalyticsSummaryDTO,
    PaginatedAnalyticsDTO,
    PaginationDTO,
)
from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.analytics_exporter import (
    AnalyticsExportBundle,
    AnalyticsExporter,
    ExportResult,
)
from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
    QueueTimeAnalyticsEntity,
)
from queuelens.domain.exceptions.domain_errors import (
    AnalyticsError,
    AnalyticsNotFoundError,
    AnalyticsOperationError,
    AnalyticsValidationError,
)
from queuelens.domain.repositories.analytics_snapshot_repository import IAnalyticsSnapshotRepository
from queuelens.domain.services.queue_analytics_calculator import (
    QueueAnalyticsCalculator,
    error_context,
)
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateLike, DateRange, parse_datetime
from queuelens.shared.logging.logger import get_logger

logger = get_logger("analytics_service")

DEFAULT_PAGE_SIZE = 10
DEFAULT_MAX_PAGE_SIZE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def summary_windows(now: datetime, tz: tzinfo) -> Dict[str, DateRange]:
    """
    Ventanas hoy / semana / mes que contienen `now` (en la zona tz).

    La semana empieza el domingo. Cada ventana termina 1 µs antes del
    inicio de la siguiente.
    """
    today = now.astimezone(tz).date()
    one_tick = timedelta(microseconds=1)

    day_start = _start_of_day(today, tz)
    day_end = _start_of_day(today + timedelta(days=1), tz) - one_tick

    # weekday(): lunes=0 … domingo=6
    week_first = today - timedelta(days=(today.weekday() + 1) % 7)
    week_start = _start_of_day(week_first, tz)
    week_end = _start_of_day(week_first + timedelta(days=7), tz) - one_tick

    month_first = today.replace(day=1)
    next_month = (month_first + timedelta(days=32)).replace(day=1)
    month_start = _start_of_day(month_first, tz)
    month_end = _start_of_day(next_month, tz) - one_tick

    return {
        "today": DateRange(day_start, day_end),
        "weekly": DateRange(week_start, week_end),
        "monthly": DateRange(month_start, month_end),
    }


class QueueAnalyticsService:
    """
    Servicio de aplicación de analytics de cola.

    Sin estado propio: todo el estado compartido vive en el cache.
    """

    def __init__(
        self,
        calculator: QueueAnalyticsCalculator,
        cache: AnalyticsCache,
        snapshot_repository: IAnalyticsSnapshotRepository,
        exporter: Optional[AnalyticsExporter] = None,
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
        cache_ttl_seconds: Optional[int] = None,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        self._calculator = calculator
        self._cache = cache
        self._snapshots = snapshot_repository
        self._clock = clock or _utcnow
        self._exporter = exporter or AnalyticsExporter(clock=self._clock)
        self._tz = tz
        self._cache_ttl = cache_ttl_seconds
        self._max_page_size = max_page_size

    # ═══════════════════════════════════════════════════════════════
    #  AGREGADO GENERAL (read-through)
    # ═══════════════════════════════════════════════════════════════

    async def get_queue_analytics(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueAnalyticsEntity:
        """
        Analytics generales con cache.

        Un hit solo se usa si su rango cubre [date_from, date_to].
        """
        operation = "get_queue_analytics"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        filters = self._normalize(filters)
        use_cache = self._cacheable(filters)

        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            if use_cache:
                entry = await self._cache.get(shop_id, date_range, filters)
                if entry is not None and isinstance(entry.payload, QueueAnalyticsEntity):
                    if self._cache.is_valid(entry, date_range.date_from, date_range.date_to):
                        logger.debug("Cache hit | shop=%s key=%s", shop_id, entry.cache_key)
                        return entry.payload
                    logger.debug("Cache no cubre el rango | shop=%s key=%s", shop_id, entry.cache_key)

            analytics = await self._calculator.calculate_queue_analytics(shop_id, date_range, filters)
            logger.info(
                "Analytics calculados | shop=%s total=%d range=%s..%s",
                shop_id, analytics.total_queues,
                date_range.date_from.isoformat(), date_range.date_to.isoformat(),
            )

            if use_cache:
                await self._cache.set(shop_id, analytics, self._cache_ttl, filters)

            return analytics

    # ═══════════════════════════════════════════════════════════════
    #  AGREGADOS SIN CACHE
    # ═══════════════════════════════════════════════════════════════

    async def get_queue_time_analytics(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueTimeAnalyticsEntity:
        operation = "get_queue_time_analytics"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            return await self._calculator.calculate_time_analytics(shop_id, date_range, filters)

    async def get_queue_peak_hours(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueuePeakHoursEntity:
        operation = "get_queue_peak_hours"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            return await self._calculator.calculate_peak_hours(shop_id, date_range, filters)

    async def get_queue_service_analytics(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> QueueServiceAnalyticsEntity:
        operation = "get_queue_service_analytics"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            return await self._calculator.calculate_service_analytics(shop_id, date_range, filters)

    # ═══════════════════════════════════════════════════════════════
    #  SUMMARY (fan-out / fan-in)
    # ═══════════════════════════════════════════════════════════════

    async def get_queue_analytics_summary(self, shop_id: str) -> AnalyticsSummaryDTO:
        """
        Resumen del dashboard: hoy, semana y mes + horas pico de la
        semana + servicios del mes.

        Las cinco consultas corren como tareas independientes. Si una
        falla se cancelan las demás y el error se propaga: no hay
        resultados parciales.
        """
        operation = "get_queue_analytics_summary"
        shop_id = self._validate_shop(operation, shop_id)
        windows = summary_windows(self._clock(), self._tz)
        weekly = windows["weekly"]
        monthly = windows["monthly"]

        with self._wrap_errors(operation, {"shop_id": shop_id}):
            tasks = [
                asyncio.create_task(self._overall(shop_id, windows["today"]), name="summary_today"),
                asyncio.create_task(self._overall(shop_id, weekly), name="summary_weekly"),
                asyncio.create_task(self._overall(shop_id, monthly), name="summary_monthly"),
                asyncio.create_task(
                    self.get_queue_peak_hours(shop_id, weekly.date_from, weekly.date_to),
                    name="summary_peak_hours",
                ),
                asyncio.create_task(
                    self.get_queue_service_analytics(shop_id, monthly.date_from, monthly.date_to),
                    name="summary_services",
                ),
            ]
            try:
                today, week, month, peak, services = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    if not task.done():
                        task.cancel()
                # Esperar la cancelación para no dejar tareas huérfanas
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        logger.info("Summary generado | shop=%s", shop_id)
        return AnalyticsSummaryDTO(
            today=today,
            weekly=week,
            monthly=month,
            peak_hours=peak,
            service_analytics=services,
        )

    async def _overall(self, shop_id: str, window: DateRange) -> QueueAnalyticsEntity:
        return await self.get_queue_analytics(shop_id, window.date_from, window.date_to)

    # ═══════════════════════════════════════════════════════════════
    #  HISTORIAL
    # ═══════════════════════════════════════════════════════════════

    async def get_paginated_queue_analytics_history(
        self,
        shop_id: str,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> PaginatedAnalyticsDTO:
        """
        Snapshots persistidos (created_at desc), paginados en memoria.

        pagination.total cuenta TODOS los snapshots que cumplen el
        filtro, no solo los de la página.
        """
        operation = "get_paginated_queue_analytics_history"
        shop_id = self._validate_shop(operation, shop_id)
        self._validate_page(operation, page, limit)

        start = parse_datetime(date_from, "date_from") if date_from not in (None, "") else None
        end = parse_datetime(date_to, "date_to") if date_to not in (None, "") else None
        if start is not None and end is not None:
            DateRange(start, end)  # valida from <= to

        context = {"shop_id": shop_id, "page": page, "limit": limit,
                   "date_from": start, "date_to": end,
                   "filters": filters.to_dict() if filters else None}

        with self._wrap_errors(operation, context):
            snapshots = await self._snapshots.find_by_shop(shop_id, start, end, self._normalize(filters))

        offset = (page - 1) * limit
        return PaginatedAnalyticsDTO(
            pagination=PaginationDTO(page=page, per_page=limit, total=len(snapshots)),
            data=list(snapshots[offset:offset + limit]),
        )

    async def record_analytics_snapshot(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Tuple[str, QueueAnalyticsEntity]:
        """
        Calcula el agregado general y lo guarda en el historial.

        Returns:
            (id del snapshot, agregado guardado)
        """
        operation = "record_analytics_snapshot"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        filters = self._normalize(filters)

        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            analytics = await self._calculator.calculate_queue_analytics(shop_id, date_range, filters)
            snapshot_id = await self._snapshots.save(analytics, filters)

        logger.info("Snapshot guardado | shop=%s id=%s total=%d",
                    shop_id, snapshot_id, analytics.total_queues)
        return snapshot_id, analytics

    # ═══════════════════════════════════════════════════════════════
    #  CACHE
    # ═══════════════════════════════════════════════════════════════

    async def get_cached_queue_analytics(
        self,
        shop_id: str,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> Optional[QueueAnalyticsEntity]:
        """Payload cacheado, o None en miss (un miss no es un error)."""
        operation = "get_cached_queue_analytics"
        shop_id = self._validate_shop(operation, shop_id)
        date_range = None
        if date_from not in (None, "") and date_to not in (None, ""):
            date_range = DateRange.parse(date_from, date_to)

        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            entry = await self._cache.get(shop_id, date_range, self._normalize(filters))

        if entry is None:
            return None
        return entry.payload

    async def invalidate_analytics_cache(self, shop_id: str) -> None:
        operation = "invalidate_analytics_cache"
        shop_id = self._validate_shop(operation, shop_id)
        with self._wrap_errors(operation, {"shop_id": shop_id}):
            await self._cache.invalidate(shop_id)

    # ═══════════════════════════════════════════════════════════════
    #  EXPORT
    # ═══════════════════════════════════════════════════════════════

    async def export_analytics_data(
        self,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        export_format: str = "json",
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> ExportResult:
        """
        Exporta los agregados reales de la ventana (json o csv).

        Una ventana sin registros exporta general y tiempos; horas pico
        y servicios quedan vacíos.
        """
        operation = "export_analytics_data"
        shop_id, date_range = self._validate(operation, shop_id, date_from, date_to, filters)
        filters = self._normalize(filters)

        with self._wrap_errors(operation, error_context(shop_id, date_range, filters)):
            bundle = AnalyticsExportBundle(
                overall=await self._calculator.calculate_queue_analytics(shop_id, date_range, filters),
                time=await self._calculator.calculate_time_analytics(shop_id, date_range, filters),
                peak_hours=await self._optional(
                    self._calculator.calculate_peak_hours(shop_id, date_range, filters)),
                service_analytics=await self._optional(
                    self._calculator.calculate_service_analytics(shop_id, date_range, filters)),
            )
            result = self._exporter.export(bundle, export_format)

        logger.info("Analytics exportados | shop=%s format=%s file=%s",
                    shop_id, export_format, result.filename)
        return result

    @staticmethod
    async def _optional(awaitable):
        try:
            return await awaitable
        except AnalyticsNotFoundError:
            return None

    # ═══════════════════════════════════════════════════════════════
    #  VALIDACION
    # ═══════════════════════════════════════════════════════════════

    def _validate(
        self,
        operation: str,
        shop_id: str,
        date_from: DateLike,
        date_to: DateLike,
        filters: Optional[QueueAnalyticsFilters],
    ) -> Tuple[str, DateRange]:
        shop_id = self._validate_shop(operation, shop_id)
        try:
            date_range = DateRange.parse(date_from, date_to)
        except AnalyticsValidationError as exc:
            # Re-etiquetar con la operación pública
            raise AnalyticsValidationError(
                exc.message,
                operation=operation,
                context={
                    "shop_id": shop_id,
                    "date_from": date_from,
                    "date_to": date_to,
                    "filters": filters.to_dict() if filters else None,
                },
            ) from exc
        return shop_id, date_range

    @staticmethod
    def _validate_shop(operation: str, shop_id: str) -> str:
        if not isinstance(shop_id, str) or not shop_id.strip():
            raise AnalyticsValidationError(
                "shop_id es obligatorio",
                operation=operation,
                context={"shop_id": shop_id},
            )
        return shop_id.strip()

    def _validate_page(self, operation: str, page: int, limit: int) -> None:
        if not isinstance(page, int) or page < 1:
            raise AnalyticsValidationError(
                "page debe ser un entero >= 1",
                operation=operation,
                context={"page": page},
            )
        if not isinstance(limit, int) or not 1 <= limit <= self._max_page_size:
            raise AnalyticsValidationError(
                f"limit debe estar entre 1 y {self._max_page_size}",
                operation=operation,
                context={"limit": limit, "max": self._max_page_size},
            )

    @staticmethod
    def _normalize(filters: Optional[QueueAnalyticsFilters]) -> Optional[QueueAnalyticsFilters]:
        if filters is None or filters.is_empty:
            return None
        return filters

    def _cacheable(self, filters: Optional[QueueAnalyticsFilters]) -> bool:
        return filters is None or self._cache.key_scope == "scoped"

    @staticmethod
    @contextmanager
    def _wrap_errors(operation: str, context: dict) -> Iterator[None]:
        """Propaga AnalyticsError; envuelve el resto en OPERATION_FAILED."""
        try:
            yield
        except AnalyticsError:
            raise
        except Exception as exc:
            logger.error("Fallo inesperado | op=%s context=%s error=%s", operation, context, exc)
            raise AnalyticsOperationError(
                f"Fallo en {operation}: {exc}",
                operation=operation,
                context=context,
                cause=exc,
            ) from exc
