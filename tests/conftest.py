"""
Pytest configuration and fixtures for QueueLens tests.
"""
import pytest

from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.queue_analytics_service import QueueAnalyticsService
from queuelens.domain.services.queue_analytics_calculator import QueueAnalyticsCalculator
from queuelens.infrastructure.cache.memory_cache_store import InMemoryCacheStore
from queuelens.infrastructure.persistence.repositories.in_memory import (
    InMemoryAnalyticsSnapshotRepository,
    InMemoryQueueRecordRepository,
)

from tests.helpers import FakeClock, january_records


@pytest.fixture
def clock():
    """Reloj fijo en 2024-01-15 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def record_repository():
    """Fuente en memoria con los 10 registros de enero para la tienda S1."""
    return InMemoryQueueRecordRepository({"S1": january_records()})


@pytest.fixture
def snapshot_repository():
    return InMemoryAnalyticsSnapshotRepository()


@pytest.fixture
def cache_store():
    return InMemoryCacheStore()


@pytest.fixture
def analytics_cache(cache_store, clock):
    return AnalyticsCache(cache_store, default_ttl_seconds=3600, clock=clock)


@pytest.fixture
def calculator(record_repository, clock):
    return QueueAnalyticsCalculator(record_repository, clock=clock)


@pytest.fixture
def analytics_service(calculator, analytics_cache, snapshot_repository, clock):
    return QueueAnalyticsService(
        calculator=calculator,
        cache=analytics_cache,
        snapshot_repository=snapshot_repository,
        clock=clock,
        cache_ttl_seconds=3600,
        max_page_size=50,
    )
