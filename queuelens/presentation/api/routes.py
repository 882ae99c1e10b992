"""
QueueLens – API Routes (FastAPI)
==================================
Endpoints REST del motor de analytics de colas.

Endpoints disponibles:
  GET    /api/health                                   → health check
  GET    /api/shops/{shop_id}/queue-analytics          → analytics generales (cache)
  GET    /api/shops/{shop_id}/queue-analytics/time     → distribución de tiempos
  GET    /api/shops/{shop_id}/queue-analytics/peak-hours → horas pico / staffing
  GET    /api/shops/{shop_id}/queue-analytics/services → ranking de servicios
  GET    /api/shops/{shop_id}/queue-analytics/summary  → hoy / semana / mes
  GET    /api/shops/{shop_id}/queue-analytics/history  → snapshots paginados
  GET    /api/shops/{shop_id}/queue-analytics/cached   → payload cacheado (o null)
  GET    /api/shops/{shop_id}/queue-analytics/export   → descarga json/csv
  POST   /api/shops/{shop_id}/queue-analytics/snapshots → guardar snapshot
  DELETE /api/shops/{shop_id}/queue-analytics/cache    → invalidar cache
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from queuelens.application.dto.analytics_dto import present
from queuelens.application.services.queue_analytics_service import QueueAnalyticsService
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.presentation.api.schemas import (
    FiltersSchema,
    HealthResponse,
    SnapshotRequest,
    SnapshotResponse,
)
from queuelens.shared.logging.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_analytics_service: Optional[QueueAnalyticsService] = None
_health_info: dict = {}


def init_routes(analytics_service: QueueAnalyticsService, **health_info) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _analytics_service, _health_info
    _analytics_service = analytics_service
    _health_info = dict(health_info)


def _service() -> QueueAnalyticsService:
    if _analytics_service is None:
        raise HTTPException(status_code=503, detail="Server not ready")
    return _analytics_service


def _filters(
    employee_id: Optional[str] = Query(default=None, description="Filtrar por empleado"),
    service_id: Optional[str] = Query(default=None, description="Filtrar por servicio"),
    status_filter: Optional[str] = Query(default=None, description="Filtrar por estado"),
    department_id: Optional[str] = Query(default=None, description="Filtrar por departamento"),
) -> Optional[QueueAnalyticsFilters]:
    return FiltersSchema(
        employee_id=employee_id,
        service_id=service_id,
        status_filter=status_filter,
        department_id=department_id,
    ).to_domain()


_BASE = "/api/shops/{shop_id}/queue-analytics"


# ─── Health ─────────────────────────────────────────────────────────────

@router.get("/api/health", response_model=HealthResponse)
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {
        "status": "ok" if _analytics_service is not None else "starting",
        "service": "queuelens",
        "cache_backend": _health_info.get("cache_backend", "memory"),
        "db_enabled": bool(_health_info.get("db_enabled", False)),
    }


# ─── Agregados ──────────────────────────────────────────────────────────

@router.get(_BASE)
async def get_queue_analytics(
    shop_id: str,
    date_from: str = Query(..., description="Inicio del rango (ISO-8601)"),
    date_to: str = Query(..., description="Fin del rango (ISO-8601)"),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> dict:
    """Analytics generales (conteos, tasas, promedios). Usa cache."""
    analytics = await _service().get_queue_analytics(shop_id, date_from, date_to, filters)
    return present(analytics)


@router.get(f"{_BASE}/time")
async def get_queue_time_analytics(
    shop_id: str,
    date_from: str = Query(...),
    date_to: str = Query(...),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> dict:
    analytics = await _service().get_queue_time_analytics(shop_id, date_from, date_to, filters)
    return present(analytics)


@router.get(f"{_BASE}/peak-hours")
async def get_queue_peak_hours(
    shop_id: str,
    date_from: str = Query(...),
    date_to: str = Query(...),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> dict:
    analytics = await _service().get_queue_peak_hours(shop_id, date_from, date_to, filters)
    return present(analytics)


@router.get(f"{_BASE}/services")
async def get_queue_service_analytics(
    shop_id: str,
    date_from: str = Query(...),
    date_to: str = Query(...),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> dict:
    analytics = await _service().get_queue_service_analytics(shop_id, date_from, date_to, filters)
    return present(analytics)


@router.get(f"{_BASE}/summary")
async def get_queue_analytics_summary(shop_id: str) -> dict:
    """Resumen hoy / semana / mes + horas pico + servicios."""
    summary = await _service().get_queue_analytics_summary(shop_id)
    return summary.to_dict()


# ─── Historial ──────────────────────────────────────────────────────────

@router.get(f"{_BASE}/history")
async def get_queue_analytics_history(
    shop_id: str,
    page: int = Query(default=1, description="Página (desde 1)"),
    limit: int = Query(default=10, description="Snapshots por página"),
    date_from: Optional[str] = Query(default=None),
    date_to: Optional[str] = Query(default=None),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> dict:
    result = await _service().get_paginated_queue_analytics_history(
        shop_id, page=page, limit=limit, date_from=date_from, date_to=date_to, filters=filters,
    )
    return result.to_dict()


@router.post(f"{_BASE}/snapshots", status_code=201, response_model=SnapshotResponse)
async def record_analytics_snapshot(shop_id: str, body: SnapshotRequest) -> dict:
    """Calcula los analytics de la ventana y los guarda en el historial."""
    filters = body.filters.to_domain() if body.filters else None
    snapshot_id, analytics = await _service().record_analytics_snapshot(
        shop_id, body.date_from, body.date_to, filters,
    )
    return {"id": snapshot_id, "analytics": present(analytics)}


# ─── Cache ──────────────────────────────────────────────────────────────

@router.get(f"{_BASE}/cached")
async def get_cached_queue_analytics(
    shop_id: str,
    date_from: Optional[str] = Query(default=None),
    date_to: Optional[str] = Query(default=None),
) -> dict:
    """Payload cacheado sin recalcular; cached=false en miss."""
    payload = await _service().get_cached_queue_analytics(shop_id, date_from, date_to)
    return {
        "cached": payload is not None,
        "analytics": present(payload) if payload is not None else None,
    }


@router.delete(f"{_BASE}/cache", status_code=204)
async def invalidate_analytics_cache(shop_id: str) -> Response:
    await _service().invalidate_analytics_cache(shop_id)
    logger.info("Cache invalidado vía API | shop=%s", shop_id)
    return Response(status_code=204)


# ─── Export ─────────────────────────────────────────────────────────────

@router.get(f"{_BASE}/export")
async def export_analytics_data(
    shop_id: str,
    date_from: str = Query(...),
    date_to: str = Query(...),
    format: str = Query(default="json", description="json | csv"),
    filters: Optional[QueueAnalyticsFilters] = Depends(_filters),
) -> Response:
    result = await _service().export_analytics_data(shop_id, date_from, date_to, format, filters)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )

