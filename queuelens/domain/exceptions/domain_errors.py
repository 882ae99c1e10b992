"""
QueueLens – Domain Exceptions
==============================
Excepciones específicas del dominio de analytics de colas.

Todo error lleva: tipo (kind), mensaje legible, operación de origen
y el contexto de entrada (shop_id / rango / filtros) para diagnóstico.
Un caller puede distinguir "todavía no hay datos" de "falla upstream".

JERARQUÍA:
    DomainError (base)
    └── AnalyticsError
        ├── AnalyticsValidationError   (VALIDATION_ERROR)
        ├── AnalyticsNotFoundError     (NOT_FOUND)
        └── AnalyticsOperationError    (OPERATION_FAILED)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class AnalyticsErrorType(str, Enum):
    """Taxonomía de errores del motor de analytics."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"
    UNKNOWN = "UNKNOWN"


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class AnalyticsError(DomainError):
    """
    Error tipado de analytics.

    Args:
        message: Mensaje legible
        kind: Tipo de error (AnalyticsErrorType)
        operation: Nombre de la operación que falló
        context: Entradas de la operación (shop_id, rango, filtros...)
        cause: Excepción original, si la hay
    """

    def __init__(
        self,
        message: str,
        kind: AnalyticsErrorType = AnalyticsErrorType.UNKNOWN,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, code=kind.value)
        self.kind = kind
        self.operation = operation
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> dict:
        base = super().to_dict()
        base.update({
            "operation": self.operation,
            "context": _jsonable(self.context),
        })
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.value}, "
            f"operation={self.operation!r}, message={self.message!r})"
        )


class AnalyticsValidationError(AnalyticsError):
    """shop_id o rango de fechas ausente/inválido."""

    def __init__(self, message: str, operation: str = None, context: dict = None):
        super().__init__(
            message, AnalyticsErrorType.VALIDATION_ERROR, operation, context,
        )


class AnalyticsNotFoundError(AnalyticsError):
    """No hay datos para la ventana solicitada (uso selectivo)."""

    def __init__(self, message: str, operation: str = None, context: dict = None):
        super().__init__(
            message, AnalyticsErrorType.NOT_FOUND, operation, context,
        )


class AnalyticsOperationError(AnalyticsError):
    """Falla de la fuente de registros o del cache, envuelta."""

    def __init__(
        self,
        message: str,
        operation: str = None,
        context: dict = None,
        cause: BaseException = None,
    ):
        super().__init__(
            message, AnalyticsErrorType.OPERATION_FAILED, operation, context, cause,
        )


def _jsonable(value: Any) -> Any:
    """Convierte el contexto a tipos serializables (fechas, filtros, etc.)."""
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
