"""
QueueLens – Presentation Layer
================================
API HTTP.

Este módulo contiene:
- api/: FastAPI routes, schemas y mapeo de errores

REGLA DE DEPENDENCIA:
Esta capa SOLO llama a servicios de application/.
NO accede directamente a infrastructure/.
"""

from queuelens.presentation.api.routes import router, init_routes
from queuelens.presentation.api.errors import register_error_handlers

__all__ = [
    "router",
    "init_routes",
    "register_error_handlers",
]
