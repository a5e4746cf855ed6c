"""
===============================================================================
TARJETA CRC — tienda_api/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir errores tipados de repositorios/servicios a respuestas RFC7807.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Mapeo:
  ValidationError         -> 422 VALIDATION_ERROR
  NotFoundError           -> 404 NOT_FOUND
  ConflictError           -> 409 CONFLICT
  InsufficientStockError  -> 409 INSUFFICIENT_STOCK
  PolicyViolationError    -> 422 PASSWORD_POLICY_VIOLATION
  AuthenticationError     -> 401 UNAUTHORIZED (+ WWW-Authenticate, reason en errors)
  DatabaseError           -> 503 DATABASE_ERROR
  PoolNotInitializedError -> 503 SERVICE_UNAVAILABLE
  Exception               -> 500 INTERNAL_ERROR

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: StoreError y derivadas
  - crosscutting.config.get_settings (nivel de detalle en 500)
===============================================================================
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    service_unavailable,
)
from ..crosscutting.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    InsufficientStockError,
    NotFoundError,
    PolicyViolationError,
    StoreError,
    ValidationError,
)
from ..crosscutting.logger import logger
from ..infrastructure.db.errors import PoolNotInitializedError

# R: (ErrorCode, status, nivel de log) por tipo de error; gana la clase más específica.
_STORE_ERROR_MAP: dict[type[StoreError], tuple[ErrorCode, int, int]] = {
    ValidationError: (ErrorCode.VALIDATION_ERROR, 422, logging.INFO),
    NotFoundError: (ErrorCode.NOT_FOUND, 404, logging.INFO),
    InsufficientStockError: (ErrorCode.INSUFFICIENT_STOCK, 409, logging.INFO),
    ConflictError: (ErrorCode.CONFLICT, 409, logging.INFO),
    PolicyViolationError: (ErrorCode.PASSWORD_POLICY_VIOLATION, 422, logging.INFO),
    AuthenticationError: (ErrorCode.UNAUTHORIZED, 401, logging.WARNING),
    DatabaseError: (ErrorCode.DATABASE_ERROR, 503, logging.ERROR),
}
_FALLBACK = (ErrorCode.INTERNAL_ERROR, 500, logging.ERROR)


def _classify(exc: StoreError) -> tuple[ErrorCode, int, int]:
    return next(
        (_STORE_ERROR_MAP[cls] for cls in type(exc).__mro__ if cls in _STORE_ERROR_MAP),
        _FALLBACK,
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    code, status_code, level = _classify(exc)
    logger.log(
        level,
        f"{type(exc).__name__}: {exc.message}",
        extra={"code": code.value, "error_code": exc.error_code, "error_id": exc.error_id},
    )
    challenge = (
        {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    )
    return await app_exception_handler(
        request,
        AppHTTPException(
            status_code,
            code,
            exc.message,
            errors=[*exc.details(), {"error_id": exc.error_id}],
            headers=challenge,
        ),
    )


async def pool_not_initialized_handler(
    request: Request, exc: PoolNotInitializedError
) -> JSONResponse:
    logger.error("Document store sin pool", extra={"error": str(exc)})
    return await app_exception_handler(request, service_unavailable("document store"))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback de último recurso: stacktrace al log; en producción, detalle genérico."""
    logger.error("Excepción no controlada", exc_info=exc)
    detail = "Error interno." if get_settings().is_production() else str(exc)
    return await app_exception_handler(
        request, AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)
    )


def register_exception_handlers(app) -> None:
    # R: Exception va al final; Starlette lo enruta a ServerErrorMiddleware.
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(PoolNotInitializedError, pool_not_initialized_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
