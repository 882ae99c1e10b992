"""
QueueLens – Settings (Pydantic BaseSettings)
=============================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # ─── Analytics Cache ────────────────────────────────────────────────
    analytics_cache_ttl_seconds: int = Field(
        default=3600, ge=1, description="TTL (seg) de cada entrada de cache de analytics",
    )
    analytics_cache_key_scope: Literal["shop", "scoped"] = Field(
        default="shop",
        description="'shop' = una clave por tienda, 'scoped' = clave por tienda+rango+filtros",
    )
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Backend del Cache Store",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", description="URL de Redis (cache_backend=redis)",
    )

    # ─── Calculator ─────────────────────────────────────────────────────
    analytics_timezone: str = Field(
        default="UTC",
        description="Zona horaria para agrupar por hora del día y calcular ventanas del resumen",
    )

    # ─── History ────────────────────────────────────────────────────────
    history_max_page_size: int = Field(
        default=100, ge=1, description="Máximo de snapshots por página en el historial",
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8888)
    debug: bool = Field(default=False)

    # ─── Logging ────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Nivel del root logger (debug=True fuerza DEBUG)",
    )
    log_format: Literal["text", "json"] = Field(
        default="text", description="'text' legible en consola, 'json' una línea JSON por evento",
    )

    # ─── MySQL Database ─────────────────────────────────────────────────
    db_host: str = Field(default="localhost", description="MySQL host")
    db_port: int = Field(default=3306, description="MySQL port")
    db_user: str = Field(default="queuelens", description="MySQL username")
    db_password: str = Field(default="queuelens_secret", description="MySQL password")
    db_name: str = Field(default="queuelens", description="MySQL database name")
    db_echo: bool = Field(default=False, description="Loguear queries SQL (debug)")
    db_pool_size: int = Field(default=5, description="Conexiones en el pool")
    db_max_overflow: int = Field(default=10, description="Conexiones extra en picos")
    db_enabled: bool = Field(
        default=False,
        description="Habilitar persistencia MySQL (False = repositorios en memoria)",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton global – se importa donde se necesite
settings = Settings()
