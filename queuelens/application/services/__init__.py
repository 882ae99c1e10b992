"""Application services - orquestación de cache, cálculo y exportación."""
from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.analytics_exporter import (
    AnalyticsExportBundle,
    AnalyticsExporter,
    ExportResult,
)
from queuelens.application.services.queue_analytics_service import QueueAnalyticsService

__all__ = [
    "AnalyticsCache",
    "AnalyticsExportBundle",
    "AnalyticsExporter",
    "ExportResult",
    "QueueAnalyticsService",
]
