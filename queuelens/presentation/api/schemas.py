"""
QueueLens – API Schemas (Pydantic)
====================================
Schemas de validación para request/response de la API REST.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters


class HealthResponse(BaseModel):
    status: str
    service: str
    cache_backend: str
    db_enabled: bool


class FiltersSchema(BaseModel):
    employee_id: Optional[str] = None
    service_id: Optional[str] = None
    status_filter: Optional[str] = None
    department_id: Optional[str] = None

    def to_domain(self) -> Optional[QueueAnalyticsFilters]:
        return QueueAnalyticsFilters.from_dict(self.model_dump(exclude_none=True))


class SnapshotRequest(BaseModel):
    """Body para registrar un snapshot en el historial."""
    date_from: datetime
    date_to: datetime
    filters: Optional[FiltersSchema] = None


class SnapshotResponse(BaseModel):
    id: str
    analytics: dict


class ErrorResponse(BaseModel):
    error: str
    message: str
    operation: Optional[str] = None
    context: dict = Field(default_factory=dict)
