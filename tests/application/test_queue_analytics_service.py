"""
Unit tests for QueueAnalyticsService.
"""
import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.queue_analytics_service import (
    QueueAnalyticsService,
    summary_windows,
)
from queuelens.domain.exceptions.domain_errors import (
    AnalyticsErrorType,
    AnalyticsNotFoundError,
    AnalyticsOperationError,
    AnalyticsValidationError,
)
from queuelens.domain.services.queue_analytics_calculator import QueueAnalyticsCalculator
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters

from tests.helpers import UTC, FailingCacheStore, FailingRecordRepository, YieldingCacheStore


class TestReadThrough:
    """Tests for get_queue_analytics (cache-then-compute)."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, analytics_service, record_repository):
        first = await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")

        assert first.total_queues == 10
        assert first.completion_rate == pytest.approx(60)
        assert first.cancellation_rate == pytest.approx(20)
        assert first.no_show_rate == pytest.approx(10)

        second = await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")

        assert second == first
        assert record_repository.call_count == 1

    @pytest.mark.asyncio
    async def test_covered_subrange_is_a_hit(self, analytics_service, record_repository):
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        cached = await analytics_service.get_queue_analytics("S1", "2024-01-05", "2024-01-10")

        # el hit devuelve el agregado cacheado (rango más amplio)
        assert cached.total_queues == 10
        assert record_repository.call_count == 1

    @pytest.mark.asyncio
    async def test_uncovered_range_recomputes(self, analytics_service, record_repository):
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-10")
        wider = await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")

        assert wider.total_queues == 10
        assert record_repository.call_count == 2

    @pytest.mark.asyncio
    async def test_expired_entry_recomputes(self, analytics_service, record_repository, clock):
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        clock.advance(hours=2)
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        assert record_repository.call_count == 2

    @pytest.mark.asyncio
    async def test_filtered_requests_bypass_shop_cache(self, analytics_service, record_repository):
        filters = QueueAnalyticsFilters(status_filter="completed")

        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        filtered = await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31", filters)

        assert filtered.total_queues == 6
        assert record_repository.call_count == 2

        # el agregado sin filtros sigue en cache
        unfiltered = await analytics_service.get_cached_queue_analytics("S1")
        assert unfiltered.total_queues == 10

    @pytest.mark.asyncio
    async def test_empty_filters_use_cache(self, analytics_service, record_repository):
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31", QueueAnalyticsFilters())
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        assert record_repository.call_count == 1

    @pytest.mark.asyncio
    async def test_scoped_cache_keeps_filtered_results(self, calculator, snapshot_repository,
                                                       cache_store, clock, record_repository):
        cache = AnalyticsCache(cache_store, key_scope="scoped", clock=clock)
        service = QueueAnalyticsService(calculator, cache, snapshot_repository, clock=clock)
        filters = QueueAnalyticsFilters(status_filter="cancelled")

        a = await service.get_queue_analytics("S1", "2024-01-01", "2024-01-31", filters)
        b = await service.get_queue_analytics("S1", "2024-01-01", "2024-01-31", filters)

        assert a == b
        assert a.total_queues == 2
        assert record_repository.call_count == 1

    @pytest.mark.asyncio
    async def test_cache_failure_is_operation_failed(self, calculator, snapshot_repository, clock):
        service = QueueAnalyticsService(
            calculator, AnalyticsCache(FailingCacheStore(), clock=clock), snapshot_repository, clock=clock,
        )
        with pytest.raises(AnalyticsOperationError) as exc_info:
            await service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        assert exc_info.value.kind == AnalyticsErrorType.OPERATION_FAILED


class TestValidation:
    """Invalid input never reaches the record source."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("shop_id", ["", "   ", None])
    async def test_missing_shop(self, analytics_service, record_repository, shop_id):
        with pytest.raises(AnalyticsValidationError) as exc_info:
            await analytics_service.get_queue_analytics(shop_id, "2024-01-01", "2024-01-31")
        assert exc_info.value.operation == "get_queue_analytics"
        assert record_repository.call_count == 0

    @pytest.mark.asyncio
    async def test_invalid_dates(self, analytics_service, record_repository):
        with pytest.raises(AnalyticsValidationError) as exc_info:
            await analytics_service.get_queue_time_analytics("S1", "not-a-date", "2024-01-31")
        assert exc_info.value.kind == AnalyticsErrorType.VALIDATION_ERROR
        assert exc_info.value.operation == "get_queue_time_analytics"
        assert exc_info.value.context["shop_id"] == "S1"
        assert record_repository.call_count == 0

    @pytest.mark.asyncio
    async def test_reversed_range(self, analytics_service):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.get_queue_peak_hours("S1", "2024-02-01", "2024-01-01")

    @pytest.mark.asyncio
    async def test_missing_dates(self, analytics_service):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.get_queue_service_analytics("S1", None, "2024-01-31")


class TestDirectAggregates:
    """Time, peak hours and services are computed without cache."""

    @pytest.mark.asyncio
    async def test_time(self, analytics_service, record_repository):
        t1 = await analytics_service.get_queue_time_analytics("S1", "2024-01-01", "2024-01-31")
        await analytics_service.get_queue_time_analytics("S1", "2024-01-01", "2024-01-31")
        assert t1.average_service_time == pytest.approx(25)
        assert record_repository.call_count == 2

    @pytest.mark.asyncio
    async def test_peak_hours_not_found(self, analytics_service):
        with pytest.raises(AnalyticsNotFoundError):
            await analytics_service.get_queue_peak_hours("S1", "2023-01-01", "2023-01-31")

    @pytest.mark.asyncio
    async def test_source_failure(self, snapshot_repository, analytics_cache, clock):
        source = FailingRecordRepository()
        service = QueueAnalyticsService(
            QueueAnalyticsCalculator(source, clock=clock), analytics_cache, snapshot_repository, clock=clock,
        )
        with pytest.raises(AnalyticsOperationError) as exc_info:
            await service.get_queue_service_analytics("S1", "2024-01-01", "2024-01-31")
        assert exc_info.value.operation == "calculate_service_analytics"
        assert source.call_count == 1


class TestSummaryWindows:
    """Tests for summary_windows."""

    def test_monday(self):
        windows = summary_windows(datetime(2024, 1, 15, 12, tzinfo=UTC), UTC)

        assert windows["today"].date_from == datetime(2024, 1, 15, tzinfo=UTC)
        assert windows["today"].date_to == datetime(2024, 1, 15, 23, 59, 59, 999999, tzinfo=UTC)
        assert windows["weekly"].date_from == datetime(2024, 1, 14, tzinfo=UTC)
        assert windows["weekly"].date_to == datetime(2024, 1, 20, 23, 59, 59, 999999, tzinfo=UTC)
        assert windows["monthly"].date_from == datetime(2024, 1, 1, tzinfo=UTC)
        assert windows["monthly"].date_to == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=UTC)

    def test_sunday_starts_its_own_week(self):
        windows = summary_windows(datetime(2024, 1, 14, 8, tzinfo=UTC), UTC)
        assert windows["weekly"].date_from == datetime(2024, 1, 14, tzinfo=UTC)

    def test_february_leap_year(self):
        windows = summary_windows(datetime(2024, 2, 10, tzinfo=UTC), UTC)
        assert windows["monthly"].date_to.day == 29

    def test_december(self):
        windows = summary_windows(datetime(2024, 12, 31, 23, tzinfo=UTC), UTC)
        assert windows["monthly"].date_to == datetime(2024, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)

    def test_timezone_shifts_the_day(self):
        tz = timezone(timedelta(hours=-5))
        windows = summary_windows(datetime(2024, 1, 15, 2, tzinfo=UTC), tz)
        # 02:00 UTC = 21:00 del 14 en UTC-5
        assert windows["today"].date_from == datetime(2024, 1, 14, tzinfo=tz)


class TestSummary:
    """Tests for get_queue_analytics_summary."""

    @pytest.mark.asyncio
    async def test_summary(self, analytics_service):
        summary = await analytics_service.get_queue_analytics_summary("S1")

        assert summary.today.total_queues == 0
        # domingo 14 a sábado 20: solo el registro en espera del día 20
        assert summary.weekly.total_queues == 1
        assert summary.monthly.total_queues == 10
        assert [h.hour for h in summary.peak_hours.peak_hours] == [10]
        assert summary.service_analytics.service_stats[0].service_id == "svc-1"

        data = summary.to_dict()
        assert set(data) == {"today", "weekly", "monthly", "peak_hours", "service_analytics"}

    @pytest.mark.asyncio
    async def test_empty_week_fails_whole_summary(self, calculator, analytics_cache,
                                                  snapshot_repository, clock):
        clock.now = datetime(2024, 1, 25, 12, tzinfo=UTC)  # semana 21-27 sin registros
        service = QueueAnalyticsService(calculator, analytics_cache, snapshot_repository, clock=clock)

        with pytest.raises(AnalyticsNotFoundError):
            await service.get_queue_analytics_summary("S1")

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self, analytics_cache, snapshot_repository, clock):
        started = []
        cancelled = []

        class SlowThenFailing:
            call_count = 0

            async def get_records(self, shop_id, date_from, date_to, filters=None):
                self.call_count += 1
                started.append(date_from)
                if self.call_count == 1:
                    raise ConnectionError("db down")
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.append(date_from)
                    raise
                return []

        service = QueueAnalyticsService(
            QueueAnalyticsCalculator(SlowThenFailing(), clock=clock),
            analytics_cache, snapshot_repository, clock=clock,
        )

        with pytest.raises(AnalyticsOperationError):
            await service.get_queue_analytics_summary("S1")

        assert len(started) == 5
        assert len(cancelled) == 4

    @pytest.mark.asyncio
    async def test_missing_shop(self, analytics_service):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.get_queue_analytics_summary("")


class TestHistory:
    """Tests for snapshots and paginated history."""

    @pytest.mark.asyncio
    async def test_record_snapshot(self, analytics_service, snapshot_repository):
        snapshot_id, analytics = await analytics_service.record_analytics_snapshot(
            "S1", "2024-01-01", "2024-01-31",
        )
        assert snapshot_id
        assert analytics.total_queues == 10

        history = await snapshot_repository.find_by_shop("S1")
        assert history == [analytics]

    @pytest.mark.asyncio
    async def test_pagination_total_counts_all_matches(self, analytics_service, clock):
        for _ in range(7):
            await analytics_service.record_analytics_snapshot("S1", "2024-01-01", "2024-01-31")
            clock.advance(minutes=1)

        page1 = await analytics_service.get_paginated_queue_analytics_history("S1", page=1, limit=3)
        page3 = await analytics_service.get_paginated_queue_analytics_history("S1", page=3, limit=3)

        assert page1.pagination.total == 7
        assert page1.pagination.total_pages == 3
        assert len(page1.data) == 3
        assert len(page3.data) == 1
        # más reciente primero
        assert page1.data[0].created_at > page1.data[-1].created_at

    @pytest.mark.asyncio
    async def test_page_beyond_end_is_empty(self, analytics_service):
        await analytics_service.record_analytics_snapshot("S1", "2024-01-01", "2024-01-31")
        result = await analytics_service.get_paginated_queue_analytics_history("S1", page=5, limit=10)
        assert result.data == []
        assert result.pagination.total == 1

    @pytest.mark.asyncio
    async def test_history_date_and_filter_match(self, analytics_service):
        await analytics_service.record_analytics_snapshot("S1", "2024-01-01", "2024-01-31")
        await analytics_service.record_analytics_snapshot("S1", "2024-01-05", "2024-01-10")
        await analytics_service.record_analytics_snapshot(
            "S1", "2024-01-01", "2024-01-31", QueueAnalyticsFilters(service_id="svc-1"),
        )

        inside = await analytics_service.get_paginated_queue_analytics_history(
            "S1", date_from="2024-01-02", date_to="2024-01-31",
        )
        filtered = await analytics_service.get_paginated_queue_analytics_history(
            "S1", filters=QueueAnalyticsFilters(service_id="svc-1"),
        )

        assert inside.pagination.total == 1
        assert filtered.pagination.total == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 51), (-1, 5)])
    async def test_invalid_paging(self, analytics_service, page, limit):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.get_paginated_queue_analytics_history("S1", page=page, limit=limit)

    @pytest.mark.asyncio
    async def test_to_dict(self, analytics_service):
        await analytics_service.record_analytics_snapshot("S1", "2024-01-01", "2024-01-31")
        data = (await analytics_service.get_paginated_queue_analytics_history("S1")).to_dict()
        assert data["pagination"] == {"page": 1, "per_page": 10, "total": 1, "total_pages": 1}
        assert data["data"][0]["total_queues"] == 10


class TestCacheOperations:
    """Tests for get_cached_queue_analytics and invalidate_analytics_cache."""

    @pytest.mark.asyncio
    async def test_miss_is_none(self, analytics_service):
        assert await analytics_service.get_cached_queue_analytics("S1") is None

    @pytest.mark.asyncio
    async def test_hit_and_invalidate(self, analytics_service, record_repository):
        computed = await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        assert await analytics_service.get_cached_queue_analytics("S1") == computed

        await analytics_service.invalidate_analytics_cache("S1")

        assert await analytics_service.get_cached_queue_analytics("S1") is None
        await analytics_service.get_queue_analytics("S1", "2024-01-01", "2024-01-31")
        assert record_repository.call_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_after_concurrent_summary(self, calculator, snapshot_repository, clock):
        store = YieldingCacheStore()
        cache = AnalyticsCache(store, key_scope="scoped", clock=clock)
        service = QueueAnalyticsService(calculator, cache, snapshot_repository, clock=clock)
        windows = summary_windows(clock.now, timezone.utc)

        await service.get_queue_analytics_summary("S1")
        for window in windows.values():
            cached = await service.get_cached_queue_analytics("S1", window.date_from, window.date_to)
            assert cached is not None

        await service.invalidate_analytics_cache("S1")

        for window in windows.values():
            assert await service.get_cached_queue_analytics("S1", window.date_from, window.date_to) is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_invalidate_requires_shop(self, analytics_service):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.invalidate_analytics_cache("")


class TestExport:
    """Tests for export_analytics_data."""

    @pytest.mark.asyncio
    async def test_json(self, analytics_service):
        result = await analytics_service.export_analytics_data("S1", "2024-01-01", "2024-01-31")
        document = json.loads(result.content)
        assert document["overall"]["total_queues"] == 10
        assert document["peak_hours"] is not None

    @pytest.mark.asyncio
    async def test_csv(self, analytics_service):
        result = await analytics_service.export_analytics_data("S1", "2024-01-01", "2024-01-31", "csv")
        assert result.content.startswith("section,metric,value")

    @pytest.mark.asyncio
    async def test_empty_window(self, analytics_service):
        result = await analytics_service.export_analytics_data("S1", "2023-01-01", "2023-01-31")
        document = json.loads(result.content)
        assert document["overall"]["total_queues"] == 0
        assert document["peak_hours"] is None
        assert document["service_analytics"] is None

    @pytest.mark.asyncio
    async def test_pdf_rejected(self, analytics_service):
        with pytest.raises(AnalyticsValidationError):
            await analytics_service.export_analytics_data("S1", "2024-01-01", "2024-01-31", "pdf")

    @pytest.mark.asyncio
    async def test_filters_applied(self, analytics_service):
        filters = QueueAnalyticsFilters(status_filter="completed")
        result = await analytics_service.export_analytics_data(
            "S1", "2024-01-01", "2024-01-31", "json", filters,
        )
        assert json.loads(result.content)["overall"]["total_queues"] == 6
