"""Domain entities."""
from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus
from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueueTimeAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
    HourlyPeak,
    HourlyQuiet,
    StaffingRecommendation,
    ServiceStat,
    ServiceRanking,
    aggregate_from_dict,
)
from queuelens.domain.entities.analytics_cache_entry import AnalyticsCacheEntry, shop_cache_key

__all__ = [
    "QueueRecord",
    "QueueStatus",
    "QueueAnalyticsEntity",
    "QueueTimeAnalyticsEntity",
    "QueuePeakHoursEntity",
    "QueueServiceAnalyticsEntity",
    "HourlyPeak",
    "HourlyQuiet",
    "StaffingRecommendation",
    "ServiceStat",
    "ServiceRanking",
    "aggregate_from_dict",
    "AnalyticsCacheEntry",
    "shop_cache_key",
]
