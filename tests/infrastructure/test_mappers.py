"""
Unit tests for the persistence mappers.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from queuelens.domain.entities.queue_analytics import QueueAnalyticsEntity
from queuelens.domain.entities.queue_record import QueueStatus
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters
from queuelens.domain.value_objects.date_range import DateRange
from queuelens.infrastructure.persistence.mappers.analytics_snapshot_mapper import AnalyticsSnapshotMapper
from queuelens.infrastructure.persistence.mappers.queue_record_mapper import (
    QueueRecordMapper,
    as_aware,
    to_db_datetime,
)

from tests.helpers import FIXED_NOW


class TestQueueRecordMapper:
    """Tests for QueueModel → QueueRecord."""

    def test_to_entity(self):
        model = SimpleNamespace(
            id="q-1",
            status="completed",
            created_at=datetime(2024, 1, 2, 10, 0),
            completed_at=datetime(2024, 1, 2, 10, 30),
            actual_wait_time=12.0,
            service_id="svc-1",
            service_name="Haircut",
            total_amount=Decimal("49.90"),
            employee_id="e1",
            department_id=None,
        )

        record = QueueRecordMapper().to_entity_from_orm(model)

        assert record.status == QueueStatus.COMPLETED
        assert record.created_at.tzinfo == timezone.utc
        assert record.total_amount == 49.9
        assert record.department_id is None

    def test_as_aware(self):
        assert as_aware(None) is None
        assert as_aware(FIXED_NOW) is FIXED_NOW
        assert as_aware(datetime(2024, 1, 1)).tzinfo == timezone.utc

    def test_to_db_datetime_is_naive_utc(self):
        plus_seven = timezone(timedelta(hours=7))

        assert to_db_datetime(None) is None
        assert to_db_datetime(datetime(2024, 1, 1)) == datetime(2024, 1, 1)
        assert to_db_datetime(datetime(2024, 1, 1, tzinfo=plus_seven)) == datetime(2023, 12, 31, 17, 0)
        assert as_aware(to_db_datetime(FIXED_NOW)) == FIXED_NOW


class TestAnalyticsSnapshotMapper:
    """Tests for QueueAnalyticsEntity ↔ snapshot row."""

    def test_round_trip(self):
        mapper = AnalyticsSnapshotMapper()
        analytics = QueueAnalyticsEntity(
            shop_id="S1",
            date_range=DateRange.parse("2024-01-01", "2024-01-31"),
            total_queues=10,
            completed_queues=6,
            completion_rate=60.0,
            average_wait_time=11.0,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )

        row = mapper.to_model("snap-1", analytics, QueueAnalyticsFilters(service_id="svc-1"))

        assert row["id"] == "snap-1"
        assert row["service_id"] == "svc-1"
        assert row["employee_id"] is None
        assert mapper.to_entity_from_orm(SimpleNamespace(**row)) == analytics

    def test_without_filters(self):
        analytics = QueueAnalyticsEntity(shop_id="S1", date_range=DateRange.parse("2024-01-01", "2024-01-02"))
        row = AnalyticsSnapshotMapper().to_model("snap-2", analytics)
        assert row["status_filter"] is None

    def test_row_datetimes_are_naive_utc(self):
        plus_seven = timezone(timedelta(hours=7))
        analytics = QueueAnalyticsEntity(
            shop_id="S1",
            date_range=DateRange(
                datetime(2024, 1, 1, tzinfo=plus_seven),
                datetime(2024, 1, 31, 23, 59, 59, tzinfo=plus_seven),
            ),
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )

        row = AnalyticsSnapshotMapper().to_model("snap-3", analytics)

        assert row["date_from"] == datetime(2023, 12, 31, 17, 0)
        assert row["date_to"] == datetime(2024, 1, 31, 16, 59, 59)
        assert row["created_at"].tzinfo is None
        assert AnalyticsSnapshotMapper().to_entity_from_orm(SimpleNamespace(**row)) == analytics
