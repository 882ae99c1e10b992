"""
In-Memory Repository Implementations.

Adaptadores sin base de datos para desarrollo (db_enabled=False) y tests.
Cuentan las llamadas para poder verificar el comportamiento del cache.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.entities.queue_record import QueueRecord
from queuelens.domain.repositories.analytics_snapshot_repository import IAnalyticsSnapshotRepository
from queuelens.domain.repositories.queue_record_repository import IQueueRecordRepository
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters


class InMemoryQueueRecordRepository(IQueueRecordRepository):
    """Fuente de registros en memoria, agrupados por tienda."""

    def __init__(self, records: Optional[Dict[str, Iterable[QueueRecord]]] = None):
        self._records: Dict[str, List[QueueRecord]] = {
            shop_id: list(items) for shop_id, items in (records or {}).items()
        }
        self.call_count = 0

    def add(self, shop_id: str, *records: QueueRecord) -> None:
        self._records.setdefault(shop_id, []).extend(records)

    def clear(self) -> None:
        self._records.clear()

    async def get_records(
        self,
        shop_id: str,
        date_from: datetime,
        date_to: datetime,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueRecord]:
        self.call_count += 1
        return [
            record for record in self._records.get(shop_id, [])
            if date_from <= record.created_at <= date_to
            and (filters is None or filters.matches(record))
        ]


class InMemoryAnalyticsSnapshotRepository(IAnalyticsSnapshotRepository):
    """Historial de snapshots en memoria."""

    def __init__(self):
        self._snapshots: Dict[str, Tuple[QueueAnalyticsEntity, Optional[QueueAnalyticsFilters]]] = {}

    async def save(
        self,
        analytics: QueueAnalyticsEntity,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> str:
        snapshot_id = str(uuid.uuid4())
        self._snapshots[snapshot_id] = (analytics, filters)
        return snapshot_id

    async def find_by_shop(
        self,
        shop_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        filters: Optional[QueueAnalyticsFilters] = None,
    ) -> List[QueueAnalyticsEntity]:
        wanted = {k: v for k, v in (filters.to_dict() if filters else {}).items() if v is not None}
        matches = []
        for analytics, stored in self._snapshots.values():
            if analytics.shop_id != shop_id:
                continue
            if date_from is not None and analytics.date_range.date_from < date_from:
                continue
            if date_to is not None and analytics.date_range.date_to > date_to:
                continue
            stored_values = stored.to_dict() if stored else {}
            if any(stored_values.get(k) != v for k, v in wanted.items()):
                continue
            matches.append(analytics)

        return sorted(matches, key=lambda a: a.created_at, reverse=True)
