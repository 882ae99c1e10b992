"""Mappers ORM ↔ dominio."""
from queuelens.infrastructure.persistence.mappers.queue_record_mapper import QueueRecordMapper
from queuelens.infrastructure.persistence.mappers.analytics_snapshot_mapper import AnalyticsSnapshotMapper

__all__ = [
    "QueueRecordMapper",
    "AnalyticsSnapshotMapper",
]
