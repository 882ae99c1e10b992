"""Repository implementations - Concrete implementations of domain interfaces."""
from queuelens.infrastructure.persistence.repositories.queue_record_repository_impl import (
    QueueRecordRepositoryImpl,
)
from queuelens.infrastructure.persistence.repositories.analytics_snapshot_repository_impl import (
    AnalyticsSnapshotRepositoryImpl,
)
from queuelens.infrastructure.persistence.repositories.in_memory import (
    InMemoryAnalyticsSnapshotRepository,
    InMemoryQueueRecordRepository,
)

__all__ = [
    "QueueRecordRepositoryImpl",
    "AnalyticsSnapshotRepositoryImpl",
    "InMemoryQueueRecordRepository",
    "InMemoryAnalyticsSnapshotRepository",
]
