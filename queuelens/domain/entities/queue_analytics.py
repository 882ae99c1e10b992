"""
QueueLens – Domain Entities: Queue Analytics Aggregates
=========================================================
Resúmenes estadísticos calculados sobre los registros de cola de una
tienda en un rango de fechas.

  QueueAnalyticsEntity         → conteos por estado + tasas + promedios
  QueueTimeAnalyticsEntity     → distribución de tiempos de espera/servicio
  QueuePeakHoursEntity         → clasificación hora pico / hora tranquila
  QueueServiceAnalyticsEntity  → ranking de popularidad por servicio

POR QUE FROZEN:
  Un agregado es una foto del rango analizado. Si cambian los datos
  se genera uno NUEVO (recalculo completo). Las listas internas son
  tuplas para respetar frozen=True.

SERIALIZACION:
  to_dict()/from_dict() sin redondeo: el cache guarda JSON y un
  agregado leído del cache debe ser igual (==) al calculado.
  Cada clase declara KIND, usado por el cache para reconstruir el tipo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Tuple, Type

from queuelens.domain.value_objects.date_range import DateRange, parse_datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _meta_to_dict(entity: Any) -> Dict[str, Any]:
    return {
        "shop_id": entity.shop_id,
        "date_range": entity.date_range.to_dict(),
        "created_at": entity.created_at.isoformat(),
        "updated_at": entity.updated_at.isoformat(),
    }


def _meta_from_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "shop_id": data["shop_id"],
        "date_range": DateRange.from_dict(data["date_range"]),
        "created_at": parse_datetime(data["created_at"], "created_at"),
        "updated_at": parse_datetime(data["updated_at"], "updated_at"),
    }


# ════════════════════════════════════════════════════════════════════
#  OVERALL
# ════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class QueueAnalyticsEntity:
    """
    Analytics generales de la cola.

    total_queues = completed + cancelled + no_show + in_progress + waiting.
    Las tres tasas están en [0, 100] y valen count/total*100 (0 si total=0).
    waiting/in_progress no tienen tasa propia: las tres tasas NO suman 100.
    """

    KIND: ClassVar[str] = "queue_analytics"

    shop_id: str
    date_range: DateRange

    # ── Contadores ──────────────────────────────────────────────────
    total_queues: int = 0
    completed_queues: int = 0
    cancelled_queues: int = 0
    no_show_queues: int = 0
    in_progress_queues: int = 0
    waiting_queues: int = 0

    # ── Ratios (%) ──────────────────────────────────────────────────
    completion_rate: float = 0.0
    cancellation_rate: float = 0.0
    no_show_rate: float = 0.0

    # ── Tiempos (minutos) ───────────────────────────────────────────
    average_wait_time: float = 0.0
    average_service_time: float = 0.0

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        data = _meta_to_dict(self)
        data.update({
            "total_queues": self.total_queues,
            "completed_queues": self.completed_queues,
            "cancelled_queues": self.cancelled_queues,
            "no_show_queues": self.no_show_queues,
            "in_progress_queues": self.in_progress_queues,
            "waiting_queues": self.waiting_queues,
            "completion_rate": self.completion_rate,
            "cancellation_rate": self.cancellation_rate,
            "no_show_rate": self.no_show_rate,
            "average_wait_time": self.average_wait_time,
            "average_service_time": self.average_service_time,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QueueAnalyticsEntity":
        return cls(
            **_meta_from_dict(data),
            total_queues=int(data.get("total_queues", 0)),
            completed_queues=int(data.get("completed_queues", 0)),
            cancelled_queues=int(data.get("cancelled_queues", 0)),
            no_show_queues=int(data.get("no_show_queues", 0)),
            in_progress_queues=int(data.get("in_progress_queues", 0)),
            waiting_queues=int(data.get("waiting_queues", 0)),
            completion_rate=float(data.get("completion_rate", 0.0)),
            cancellation_rate=float(data.get("cancellation_rate", 0.0)),
            no_show_rate=float(data.get("no_show_rate", 0.0)),
            average_wait_time=float(data.get("average_wait_time", 0.0)),
            average_service_time=float(data.get("average_service_time", 0.0)),
        )


# ════════════════════════════════════════════════════════════════════
#  TIME
# ════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class QueueTimeAnalyticsEntity:
    """
    Distribución de tiempos (minutos).

    min <= median <= max cuando la muestra no está vacía.
    Muestra vacía → todos los campos en 0.
    """

    KIND: ClassVar[str] = "queue_time_analytics"

    shop_id: str
    date_range: DateRange

    average_wait_time: float = 0.0
    median_wait_time: float = 0.0
    min_wait_time: float = 0.0
    max_wait_time: float = 0.0

    average_service_time: float = 0.0
    median_service_time: float = 0.0
    min_service_time: float = 0.0
    max_service_time: float = 0.0
    total_service_time: float = 0.0

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    _FIELDS: ClassVar[Tuple[str, ...]] = (
        "average_wait_time", "median_wait_time", "min_wait_time", "max_wait_time",
        "average_service_time", "median_service_time", "min_service_time",
        "max_service_time", "total_service_time",
    )

    def to_dict(self) -> dict:
        data = _meta_to_dict(self)
        data.update({name: getattr(self, name) for name in self._FIELDS})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QueueTimeAnalyticsEntity":
        values = {name: float(data.get(name, 0.0)) for name in cls._FIELDS}
        return cls(**_meta_from_dict(data), **values)


# ════════════════════════════════════════════════════════════════════
#  PEAK HOURS
# ════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class HourlyPeak:
    hour: int  # 0-23
    queue_count: int
    average_wait_time: float
    completion_rate: float

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "queue_count": self.queue_count,
            "average_wait_time": self.average_wait_time,
            "completion_rate": self.completion_rate,
        }


@dataclass(frozen=True, slots=True)
class HourlyQuiet:
    hour: int  # 0-23
    queue_count: int
    average_wait_time: float

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "queue_count": self.queue_count,
            "average_wait_time": self.average_wait_time,
        }


@dataclass(frozen=True, slots=True)
class StaffingRecommendation:
    hour: int  # 0-23
    recommended_employees: int
    reason: str

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "recommended_employees": self.recommended_employees,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class QueuePeakHoursEntity:
    """
    Horas pico vs horas tranquilas.

    Cada hora 0-23 aparece exactamente una vez en peak_hours o en
    quiet_hours, y exactamente una vez en recommended_staffing.
    """

    KIND: ClassVar[str] = "queue_peak_hours"

    shop_id: str
    date_range: DateRange
    peak_hours: Tuple[HourlyPeak, ...] = ()
    quiet_hours: Tuple[HourlyQuiet, ...] = ()
    recommended_staffing: Tuple[StaffingRecommendation, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        data = _meta_to_dict(self)
        data.update({
            "peak_hours": [h.to_dict() for h in self.peak_hours],
            "quiet_hours": [h.to_dict() for h in self.quiet_hours],
            "recommended_staffing": [s.to_dict() for s in self.recommended_staffing],
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QueuePeakHoursEntity":
        return cls(
            **_meta_from_dict(data),
            peak_hours=tuple(HourlyPeak(**h) for h in data.get("peak_hours", [])),
            quiet_hours=tuple(HourlyQuiet(**h) for h in data.get("quiet_hours", [])),
            recommended_staffing=tuple(
                StaffingRecommendation(**s) for s in data.get("recommended_staffing", [])
            ),
        )


# ════════════════════════════════════════════════════════════════════
#  SERVICES
# ════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ServiceStat:
    service_id: str
    service_name: str
    total_queues: int
    completed_queues: int
    average_wait_time: float
    average_service_time: float
    revenue: float
    popularity_score: float  # [0, 100]

    def to_dict(self) -> dict:
        return {
            "service_id": self.service_id,
            "service_name": self.service_name,
            "total_queues": self.total_queues,
            "completed_queues": self.completed_queues,
            "average_wait_time": self.average_wait_time,
            "average_service_time": self.average_service_time,
            "revenue": self.revenue,
            "popularity_score": self.popularity_score,
        }


@dataclass(frozen=True, slots=True)
class ServiceRanking:
    service_id: str
    service_name: str
    queue_count: int
    revenue: float

    def to_dict(self) -> dict:
        return {
            "service_id": self.service_id,
            "service_name": self.service_name,
            "queue_count": self.queue_count,
            "revenue": self.revenue,
        }

    @classmethod
    def from_stat(cls, stat: ServiceStat) -> "ServiceRanking":
        return cls(
            service_id=stat.service_id,
            service_name=stat.service_name,
            queue_count=stat.total_queues,
            revenue=stat.revenue,
        )


@dataclass(frozen=True, slots=True)
class QueueServiceAnalyticsEntity:
    """
    Estadísticas por servicio + top/bottom 5 por popularity_score.

    Con menos de 10 servicios top_services y least_popular_services
    pueden solaparse (no se deduplican).
    """

    KIND: ClassVar[str] = "queue_service_analytics"

    shop_id: str
    date_range: DateRange
    service_stats: Tuple[ServiceStat, ...] = ()
    top_services: Tuple[ServiceRanking, ...] = ()
    least_popular_services: Tuple[ServiceRanking, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        data = _meta_to_dict(self)
        data.update({
            "service_stats": [s.to_dict() for s in self.service_stats],
            "top_services": [s.to_dict() for s in self.top_services],
            "least_popular_services": [s.to_dict() for s in self.least_popular_services],
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QueueServiceAnalyticsEntity":
        return cls(
            **_meta_from_dict(data),
            service_stats=tuple(ServiceStat(**s) for s in data.get("service_stats", [])),
            top_services=tuple(ServiceRanking(**s) for s in data.get("top_services", [])),
            least_popular_services=tuple(
                ServiceRanking(**s) for s in data.get("least_popular_services", [])
            ),
        )


# ════════════════════════════════════════════════════════════════════
#  REGISTRO DE TIPOS (para el cache)
# ════════════════════════════════════════════════════════════════════

AGGREGATE_TYPES: Dict[str, Type] = {
    cls.KIND: cls
    for cls in (
        QueueAnalyticsEntity,
        QueueTimeAnalyticsEntity,
        QueuePeakHoursEntity,
        QueueServiceAnalyticsEntity,
    )
}


def aggregate_from_dict(kind: str, data: dict):
    """Reconstruye un agregado a partir de su KIND."""
    try:
        entity_cls = AGGREGATE_TYPES[kind]
    except KeyError:
        raise ValueError(f"Tipo de agregado desconocido: {kind!r}") from None
    return entity_cls.from_dict(data)
