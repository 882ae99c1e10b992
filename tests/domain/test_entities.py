"""
Unit tests for aggregate entities and analytics errors.
"""
from datetime import datetime

import pytest

from queuelens.domain.entities.analytics_cache_entry import AnalyticsCacheEntry, shop_cache_key
from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
    aggregate_from_dict,
)
from queuelens.domain.exceptions.domain_errors import (
    AnalyticsError,
    AnalyticsErrorType,
    AnalyticsValidationError,
)
from queuelens.domain.value_objects.date_range import DateRange

from tests.helpers import FIXED_NOW, UTC, january_records

JANUARY = DateRange.parse("2024-01-01", "2024-01-31")


class TestAggregateSerialization:
    """Aggregates survive to_dict/from_dict unchanged (cache requirement)."""

    def test_all_kinds(self, calculator):
        records = january_records()
        aggregates = [
            calculator.build_queue_analytics("S1", JANUARY, records),
            calculator.build_time_analytics("S1", JANUARY, records),
            calculator.build_peak_hours("S1", JANUARY, records),
            calculator.build_service_analytics("S1", JANUARY, records),
        ]
        for aggregate in aggregates:
            assert aggregate_from_dict(aggregate.KIND, aggregate.to_dict()) == aggregate

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            aggregate_from_dict("nope", {})

    def test_kinds_are_distinct(self):
        kinds = {QueueAnalyticsEntity.KIND, QueuePeakHoursEntity.KIND, QueueServiceAnalyticsEntity.KIND}
        assert len(kinds) == 3


class TestAnalyticsCacheEntry:
    """Tests for AnalyticsCacheEntry."""

    def test_key_format(self):
        assert shop_cache_key("S1") == "queue_analytics_S1"

    def test_expiry_boundary(self):
        entry = AnalyticsCacheEntry(
            shop_id="S1",
            cache_key="queue_analytics_S1",
            payload=QueueAnalyticsEntity(shop_id="S1", date_range=JANUARY),
            expires_at=FIXED_NOW,
        )
        assert entry.is_expired(FIXED_NOW)
        assert not entry.is_expired(datetime(2024, 1, 15, 11, 59, tzinfo=UTC))


class TestAnalyticsErrors:
    """Tests for the error taxonomy."""

    def test_to_dict(self):
        error = AnalyticsValidationError(
            "shop_id es obligatorio", operation="get_queue_analytics",
            context={"shop_id": "", "date_from": FIXED_NOW},
        )
        data = error.to_dict()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["operation"] == "get_queue_analytics"
        assert data["context"]["date_from"] == FIXED_NOW.isoformat()

    def test_default_kind_is_unknown(self):
        assert AnalyticsError("boom").kind == AnalyticsErrorType.UNKNOWN
