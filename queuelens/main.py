"""
QueueLens – Main Application Entry Point
==========================================
API HTTP del motor de analytics de colas.

ARQUITECTURA DE ARRANQUE:
  1. Configurar logging
  2. Crear el contenedor de dependencias (settings → repositorios,
     Cache Store, calculadora, cache, servicio)
  3. FastAPI lifespan startup:
     a. Inicializar base de datos (si db_enabled)
     b. Inyectar el servicio en el router
  4. FastAPI lifespan shutdown:
     a. Cerrar base de datos y Cache Store

FLUJO DE DATOS:
  HTTP → routes → QueueAnalyticsService
       → AnalyticsCache (hit que cubre el rango → respuesta)
       → QueueAnalyticsCalculator → Raw Record Source (MySQL / memoria)
       → AnalyticsCache.set → respuesta

  uvicorn queuelens.main:app --reload --host 0.0.0.0 --port 8888
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from queuelens.container import init_container
from queuelens.presentation.api.errors import register_error_handlers
from queuelens.presentation.api.routes import init_routes, router
from queuelens.shared.config.settings import settings
from queuelens.shared.logging.logger import get_logger, setup_logging

# ─── Logging ────────────────────────────────────────────────────────────
setup_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
logger = get_logger("main")

# ─── Contenedor de Dependencias ─────────────────────────────────────────
container = init_container(settings)


# ─── FastAPI Lifespan ───────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle de la aplicación."""
    logger.info("=" * 60)
    logger.info("  QueueLens - Queue Analytics Engine v1.0")
    logger.info("  Cache: backend=%s scope=%s ttl=%ds",
                settings.cache_backend,
                settings.analytics_cache_key_scope,
                settings.analytics_cache_ttl_seconds)
    logger.info("  Zona horaria de analytics: %s", settings.analytics_timezone)
    logger.info("  Historial: máximo %d snapshots por página", settings.history_max_page_size)
    logger.info("=" * 60)

    await container.startup()
    if settings.db_enabled:
        logger.info("  Database: MySQL conectada (%s@%s/%s)",
                    settings.db_user, settings.db_host, settings.db_name)
    else:
        logger.info("  Database: Deshabilitada (repositorios en memoria)")

    # Inyectar dependencias al router (desde container)
    init_routes(
        container.analytics_service,
        cache_backend=settings.cache_backend,
        db_enabled=settings.db_enabled,
    )
    logger.info("✓ Todos los componentes iniciados correctamente")

    yield  # ← La app está corriendo aquí

    # ── SHUTDOWN ──
    logger.info("Iniciando shutdown...")
    await container.shutdown()
    logger.info("✓ Shutdown completo")


# ─── FastAPI App ────────────────────────────────────────────────────────

def create_app() -> FastAPI:
    app = FastAPI(
        title="QueueLens - Queue Analytics",
        description="Motor de analytics de colas: throughput, tiempos, horas pico y popularidad de servicios",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("queuelens.main:app", host=settings.host, port=settings.port, reload=settings.debug)
