"""Domain repository interfaces (ABCs)."""
from queuelens.domain.repositories.queue_record_repository import IQueueRecordRepository
from queuelens.domain.repositories.analytics_snapshot_repository import IAnalyticsSnapshotRepository

__all__ = ["IQueueRecordRepository", "IAnalyticsSnapshotRepository"]
