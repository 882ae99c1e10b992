"""
QueueLens – API Error Mapping
===============================
Traduce AnalyticsError a respuestas HTTP.

  VALIDATION_ERROR → 400
  NOT_FOUND        → 404
  OPERATION_FAILED → 502
  UNKNOWN          → 500

El body es siempre error.to_dict().
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from queuelens.domain.exceptions.domain_errors import AnalyticsError, AnalyticsErrorType
from queuelens.shared.logging.logger import get_logger

logger = get_logger("api.errors")

STATUS_BY_KIND = {
    AnalyticsErrorType.VALIDATION_ERROR: 400,
    AnalyticsErrorType.NOT_FOUND: 404,
    AnalyticsErrorType.OPERATION_FAILED: 502,
    AnalyticsErrorType.UNKNOWN: 500,
}


async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("Error %s en %s | op=%s message=%s",
                     exc.kind.value, request.url.path, exc.operation, exc.message)
    else:
        logger.info("Error %s en %s | message=%s", exc.kind.value, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AnalyticsError, analytics_error_handler)
