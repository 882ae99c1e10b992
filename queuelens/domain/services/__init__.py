"""Domain services - Pure business logic with no external dependencies."""
from queuelens.domain.services.stat_aggregator import StatAggregator
from queuelens.domain.services.queue_analytics_calculator import QueueAnalyticsCalculator

__all__ = [
    "StatAggregator",
    "QueueAnalyticsCalculator",
]
