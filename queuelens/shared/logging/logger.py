"""
QueueLens – Logging configuration
==================================
Logging del proceso, configurado desde Settings (LOG_LEVEL / LOG_FORMAT).

FORMATOS:
  text → 2024-01-15 12:00:00 INFO  [queuelens.analytics_cache] Cache invalidado | shop=S1
  json → una línea JSON por evento (para agregadores de logs)

Todos los loggers del proyecto cuelgan de "queuelens.*" vía get_logger().
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Union

ROOT_NAMESPACE = "queuelens"
LOG_FORMATS = ("text", "json")

TEXT_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Librerías que a nivel INFO/DEBUG inundan la salida
NOISY_LOGGERS = ("sqlalchemy.engine", "aiomysql", "redis", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """Un objeto JSON por registro; shop_id se incluye si viene en extra."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        shop_id = getattr(record, "shop_id", None)
        if shop_id is not None:
            entry["shop_id"] = shop_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(level: Union[int, str] = logging.INFO, fmt: str = "text") -> None:
    """
    Configura el root logger al arranque.

    Se puede llamar más de una vez: el handler propio se reemplaza y los
    handlers ajenos (p. ej. los de pytest) no se tocan.

    Raises:
        ValueError: formato o nivel desconocido
    """
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Formato de log inválido: {fmt!r} (usar {LOG_FORMATS})")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Nivel de log inválido: {level!r}")
        level = resolved

    root = logging.getLogger()
    for existing in [h for h in root.handlers if getattr(h, "queuelens", False)]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(fmt))
    handler.queuelens = True
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger hijo de "queuelens" (get_logger("calculator") → queuelens.calculator)."""
    return logging.getLogger(f"{ROOT_NAMESPACE}.{name}")
