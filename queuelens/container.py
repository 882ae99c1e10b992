"""
Dependency Injection Container.

Este módulo proporciona el contenedor de inyección de dependencias
que gestiona las instancias de repositorios, cache y servicios.

Clean Architecture: Este contenedor vive en la capa más externa y es el único
lugar donde se crean dependencias concretas.
"""

from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

# Domain
from queuelens.domain.repositories.analytics_snapshot_repository import IAnalyticsSnapshotRepository
from queuelens.domain.repositories.queue_record_repository import IQueueRecordRepository
from queuelens.domain.services.queue_analytics_calculator import QueueAnalyticsCalculator

# Application
from queuelens.application.ports.cache_store import ICacheStore
from queuelens.application.services.analytics_cache import AnalyticsCache
from queuelens.application.services.analytics_exporter import AnalyticsExporter
from queuelens.application.services.queue_analytics_service import QueueAnalyticsService

# Shared
from queuelens.shared.config.settings import Settings


@dataclass
class Container:
    """
    Contenedor de Inyección de Dependencias.

    Con db_enabled=False los repositorios son en memoria; con
    cache_backend="redis" el Cache Store es Redis.
    """

    # Configuración
    settings: Settings = field(default_factory=Settings)

    # Infraestructura
    _database: Optional[Any] = None
    _queue_record_repository: Optional[IQueueRecordRepository] = None
    _snapshot_repository: Optional[IAnalyticsSnapshotRepository] = None
    _cache_store: Optional[ICacheStore] = None

    # Servicios
    _calculator: Optional[QueueAnalyticsCalculator] = None
    _analytics_cache: Optional[AnalyticsCache] = None
    _analytics_service: Optional[QueueAnalyticsService] = None
    _clock: Optional[Any] = None

    # ==================== Infrastructure ====================

    @property
    def timezone(self) -> tzinfo:
        return ZoneInfo(self.settings.analytics_timezone)

    @property
    def database(self):
        """DatabaseManager (solo con db_enabled=True)."""
        if self._database is None:
            from queuelens.infrastructure.persistence.database import DatabaseManager
            self._database = DatabaseManager(self.settings)
        return self._database

    @property
    def queue_record_repository(self) -> IQueueRecordRepository:
        """Obtiene la fuente de registros crudos."""
        if self._queue_record_repository is None:
            if self.settings.db_enabled:
                from queuelens.infrastructure.persistence.repositories.queue_record_repository_impl import (
                    QueueRecordRepositoryImpl,
                )
                self._queue_record_repository = QueueRecordRepositoryImpl(self.database)
            else:
                from queuelens.infrastructure.persistence.repositories.in_memory import (
                    InMemoryQueueRecordRepository,
                )
                self._queue_record_repository = InMemoryQueueRecordRepository()
        return self._queue_record_repository

    @property
    def snapshot_repository(self) -> IAnalyticsSnapshotRepository:
        """Obtiene el historial de snapshots."""
        if self._snapshot_repository is None:
            if self.settings.db_enabled:
                from queuelens.infrastructure.persistence.repositories.analytics_snapshot_repository_impl import (
                    AnalyticsSnapshotRepositoryImpl,
                )
                self._snapshot_repository = AnalyticsSnapshotRepositoryImpl(self.database)
            else:
                from queuelens.infrastructure.persistence.repositories.in_memory import (
                    InMemoryAnalyticsSnapshotRepository,
                )
                self._snapshot_repository = InMemoryAnalyticsSnapshotRepository()
        return self._snapshot_repository

    @property
    def cache_store(self) -> ICacheStore:
        """Obtiene el Cache Store según cache_backend."""
        if self._cache_store is None:
            if self.settings.cache_backend == "redis":
                from queuelens.infrastructure.cache.redis_cache_store import RedisCacheStore
                self._cache_store = RedisCacheStore.from_url(self.settings.redis_url)
            else:
                from queuelens.infrastructure.cache.memory_cache_store import InMemoryCacheStore
                self._cache_store = InMemoryCacheStore()
        return self._cache_store

    # ==================== Services ====================

    @property
    def calculator(self) -> QueueAnalyticsCalculator:
        if self._calculator is None:
            self._calculator = QueueAnalyticsCalculator(
                self.queue_record_repository, tz=self.timezone, clock=self._clock,
            )
        return self._calculator

    @property
    def analytics_cache(self) -> AnalyticsCache:
        if self._analytics_cache is None:
            self._analytics_cache = AnalyticsCache(
                self.cache_store,
                default_ttl_seconds=self.settings.analytics_cache_ttl_seconds,
                key_scope=self.settings.analytics_cache_key_scope,
                clock=self._clock,
            )
        return self._analytics_cache

    @property
    def analytics_service(self) -> QueueAnalyticsService:
        """Obtiene o crea QueueAnalyticsService (singleton)."""
        if self._analytics_service is None:
            self._analytics_service = QueueAnalyticsService(
                calculator=self.calculator,
                cache=self.analytics_cache,
                snapshot_repository=self.snapshot_repository,
                exporter=AnalyticsExporter(clock=self._clock),
                tz=self.timezone,
                clock=self._clock,
                cache_ttl_seconds=self.settings.analytics_cache_ttl_seconds,
                max_page_size=self.settings.history_max_page_size,
            )
        return self._analytics_service

    # ==================== Lifecycle ====================

    async def startup(self) -> None:
        if self.settings.db_enabled:
            await self.database.initialize()

    async def shutdown(self) -> None:
        if self._database is not None:
            await self._database.close()
        close = getattr(self._cache_store, "close", None)
        if close is not None:
            await close()

    def reset(self) -> None:
        """Resetea todas las instancias (útil para tests)."""
        self._database = None
        self._queue_record_repository = None
        self._snapshot_repository = None
        self._cache_store = None
        self._calculator = None
        self._analytics_cache = None
        self._analytics_service = None

    def override(self, name: str, instance: Any) -> None:
        """
        Override una dependencia (útil para tests con fakes).

        Args:
            name: Nombre de la dependencia (ej: 'queue_record_repository', 'clock')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Obtiene la instancia global del contenedor.

    Patrón Singleton para asegurar una única instancia
    compartida en toda la aplicación.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Resetea el contenedor global (tests o reinicialización)."""
    global _container
    if _container is not None:
        _container.reset()
    _container = None


def init_container(settings: Optional[Settings] = None) -> Container:
    """
    Inicializa el contenedor con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, usa valores por defecto.
    """
    global _container
    if settings is None:
        settings = Settings()
    _container = Container(settings=settings)
    return _container


def create_test_container(settings: Optional[Settings] = None, **overrides) -> Container:
    """
    Crea un contenedor con dependencias reemplazadas.

    Ejemplo:
        container = create_test_container(
            queue_record_repository=InMemoryQueueRecordRepository(),
            clock=lambda: FIXED_NOW,
        )
    """
    container = Container(settings=settings or Settings())
    for name, instance in overrides.items():
        container.override(name, instance)
    return container
