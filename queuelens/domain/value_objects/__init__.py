"""Domain value objects."""
from queuelens.domain.value_objects.date_range import DateRange, parse_datetime
from queuelens.domain.value_objects.analytics_filters import QueueAnalyticsFilters

__all__ = ["DateRange", "parse_datetime", "QueueAnalyticsFilters"]
