"""
QueueLens – Application Layer
===============================
Capa de orquestación del motor de analytics.

Este módulo contiene:
- services/: AnalyticsCache, QueueAnalyticsService, AnalyticsExporter
- ports/: Interfaces hacia infraestructura (ICacheStore)
- dto/: Data Transfer Objects de respuestas compuestas

REGLA DE DEPENDENCIA:
Esta capa puede importar de:
- domain/ (entidades, servicios, interfaces)
- ports/ propios (interfaces hacia infra)

NO puede importar de:
- infrastructure/ (implementaciones concretas)
- presentation/ (API)
"""

from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.analytics_exporter import AnalyticsExporter
from queuelens.application.services.queue_analytics_service import QueueAnalyticsService

__all__ = [
    "AnalyticsCache",
    "AnalyticsExporter",
    "QueueAnalyticsService",
]
