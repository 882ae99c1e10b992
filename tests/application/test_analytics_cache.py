"""
Unit tests for AnalyticsCache.
"""
import asyncio

import pytest

from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.exceptions.domain_errors import AnalyticsErrorType, AnalyticsOperationError
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateRange
from queuelens.infrastructure.cache.memory_cache_store import InMemoryCacheStore

from tests.helpers import FIXED_NOW, FailingCacheStore, YieldingCacheStore

JANUARY = DateRange.parse("2024-01-01", "2024-01-31")


def _analytics(shop_id="S1", date_range=JANUARY, total=10):
    return QueueAnalyticsEntity(
        shop_id=shop_id,
        date_range=date_range,
        total_queues=total,
        completed_queues=total,
        completion_rate=100.0,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


class TestCacheReadWrite:
    """Tests for get/set/invalidate with the default per-shop key."""

    @pytest.mark.asyncio
    async def test_set_then_get(self, analytics_cache, cache_store):
        entry = await analytics_cache.set("S1", _analytics())

        assert entry.cache_key == "queue_analytics_S1"
        assert "queue_analytics_S1" in cache_store

        cached = await analytics_cache.get("S1")
        assert cached is not None
        assert cached.payload == _analytics()
        assert cached.expires_at == entry.expires_at

    @pytest.mark.asyncio
    async def test_miss_returns_none(self, analytics_cache):
        assert await analytics_cache.get("S404") is None

    @pytest.mark.asyncio
    async def test_latest_write_wins(self, analytics_cache):
        await analytics_cache.set("S1", _analytics(total=1))
        await analytics_cache.set("S1", _analytics(total=2))

        cached = await analytics_cache.get("S1")
        assert cached.payload.total_queues == 2

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, analytics_cache, clock):
        await analytics_cache.set("S1", _analytics(), ttl_seconds=60)

        clock.advance(seconds=59)
        assert await analytics_cache.get("S1") is not None

        clock.advance(seconds=1)
        assert await analytics_cache.get("S1") is None

    @pytest.mark.asyncio
    async def test_default_ttl(self, analytics_cache):
        entry = await analytics_cache.set("S1", _analytics())
        assert (entry.expires_at - FIXED_NOW).total_seconds() == 3600

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(self, analytics_cache, cache_store):
        await cache_store.set("queue_analytics_S1", b"{not json", 60)
        assert await analytics_cache.get("S1") is None

    @pytest.mark.asyncio
    async def test_invalidate(self, analytics_cache):
        await analytics_cache.set("S1", _analytics())
        await analytics_cache.set("S2", _analytics(shop_id="S2"))

        await analytics_cache.invalidate("S1")

        assert await analytics_cache.get("S1") is None
        assert await analytics_cache.get("S2") is not None

    @pytest.mark.asyncio
    async def test_invalidate_missing_shop_is_noop(self, analytics_cache):
        await analytics_cache.invalidate("S404")

    def test_invalid_scope(self, cache_store):
        with pytest.raises(ValueError):
            AnalyticsCache(cache_store, key_scope="global")


class TestRangeCoverage:
    """Tests for AnalyticsCache.is_valid."""

    @pytest.mark.asyncio
    async def test_covering_range(self, analytics_cache):
        entry = await analytics_cache.set("S1", _analytics())
        assert AnalyticsCache.is_valid(entry, "2024-01-05", "2024-01-10")
        assert AnalyticsCache.is_valid(entry, "2024-01-01", "2024-01-31")

    @pytest.mark.asyncio
    async def test_partial_overlap_is_not_valid(self, analytics_cache):
        entry = await analytics_cache.set("S1", _analytics())
        assert not AnalyticsCache.is_valid(entry, "2023-12-01", "2024-01-05")
        assert not AnalyticsCache.is_valid(entry, "2024-01-20", "2024-02-05")


class TestScopedKeys:
    """Tests for key_scope='scoped' (one entry per range and filters)."""

    @pytest.fixture
    def scoped_cache(self, cache_store, clock):
        return AnalyticsCache(cache_store, default_ttl_seconds=3600, key_scope="scoped", clock=clock)

    def test_key_depends_on_range_and_filters(self, scoped_cache):
        february = DateRange.parse("2024-02-01", "2024-02-29")
        filters = QueueAnalyticsFilters(service_id="svc-1")

        k1 = scoped_cache.cache_key("S1", JANUARY)
        k2 = scoped_cache.cache_key("S1", february)
        k3 = scoped_cache.cache_key("S1", JANUARY, filters)

        assert len({k1, k2, k3}) == 3
        assert k1.startswith("queue_analytics_S1_")
        assert scoped_cache.cache_key("S1", JANUARY) == k1

    def test_equal_filters_share_a_key(self, scoped_cache):
        a = QueueAnalyticsFilters(service_id="x", employee_id="y")
        b = QueueAnalyticsFilters(employee_id="y", service_id="x")

        assert scoped_cache.cache_key("S1", JANUARY, a) == scoped_cache.cache_key("S1", JANUARY, b)

    @pytest.mark.asyncio
    async def test_ranges_do_not_overwrite(self, scoped_cache):
        february = DateRange.parse("2024-02-01", "2024-02-29")
        await scoped_cache.set("S1", _analytics(total=1))
        await scoped_cache.set("S1", _analytics(date_range=february, total=2))

        jan = await scoped_cache.get("S1", JANUARY)
        feb = await scoped_cache.get("S1", february)
        assert jan.payload.total_queues == 1
        assert feb.payload.total_queues == 2

    @pytest.mark.asyncio
    async def test_invalidate_removes_every_key(self, scoped_cache, cache_store):
        february = DateRange.parse("2024-02-01", "2024-02-29")
        await scoped_cache.set("S1", _analytics())
        await scoped_cache.set("S1", _analytics(date_range=february))
        assert len(cache_store) == 3  # dos entradas + índice

        await scoped_cache.invalidate("S1")

        assert len(cache_store) == 0

    @pytest.mark.asyncio
    async def test_concurrent_writers_are_all_invalidated(self, clock):
        store = YieldingCacheStore()
        cache = AnalyticsCache(store, key_scope="scoped", clock=clock)
        ranges = [
            DateRange.parse("2024-01-01", "2024-01-31"),
            DateRange.parse("2024-01-14", "2024-01-20"),
            DateRange.parse("2024-01-15", "2024-01-15T23:59:59"),
        ]

        await asyncio.gather(*(cache.set("S1", _analytics(date_range=r)) for r in ranges))
        assert await store.set_members("queue_analytics_S1:keys") == {
            cache.cache_key("S1", r) for r in ranges
        }

        await cache.invalidate("S1")

        for r in ranges:
            assert await cache.get("S1", r) is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_index_drops_evicted_keys(self, clock):
        ticks = [0.0]
        store = InMemoryCacheStore(clock=lambda: ticks[0])
        cache = AnalyticsCache(store, key_scope="scoped", clock=clock)
        february = DateRange.parse("2024-02-01", "2024-02-29")
        week = DateRange.parse("2024-01-14", "2024-01-20")

        await cache.set("S1", _analytics(), ttl_seconds=60)
        await cache.set("S1", _analytics(date_range=february), ttl_seconds=600)
        ticks[0] += 61
        await cache.set("S1", _analytics(date_range=week), ttl_seconds=60)

        assert await store.set_members("queue_analytics_S1:keys") == {
            cache.cache_key("S1", february),
            cache.cache_key("S1", week),
        }


class TestStoreFailures:
    """Store errors surface as OPERATION_FAILED."""

    @pytest.fixture
    def failing_cache(self, clock):
        return AnalyticsCache(FailingCacheStore(), clock=clock)

    @pytest.mark.asyncio
    async def test_get(self, failing_cache):
        with pytest.raises(AnalyticsOperationError) as exc_info:
            await failing_cache.get("S1")
        assert exc_info.value.kind == AnalyticsErrorType.OPERATION_FAILED
        assert exc_info.value.operation == "cache_get"

    @pytest.mark.asyncio
    async def test_set(self, failing_cache):
        with pytest.raises(AnalyticsOperationError) as exc_info:
            await failing_cache.set("S1", _analytics())
        assert exc_info.value.operation == "cache_set"
        assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_invalidate(self, failing_cache):
        with pytest.raises(AnalyticsOperationError) as exc_info:
            await failing_cache.invalidate("S1")
        assert exc_info.value.operation == "invalidate_cache"


class TestMemoryStoreInteraction:
    """The cache only stores bytes in the store."""

    @pytest.mark.asyncio
    async def test_value_is_bytes(self, clock):
        store = InMemoryCacheStore()
        cache = AnalyticsCache(store, clock=clock)
        await cache.set("S1", _analytics())
        raw = await store.get("queue_analytics_S1")
        assert isinstance(raw, bytes)
        assert b'"kind": "queue_analytics"' in raw
