"""
===============================================================================
TARJETA CRC — crosscutting/error_responses.py (Problem Details)
===============================================================================

Responsabilidades:
  - Catálogo de códigos estables que ve el cliente (ErrorCode).
  - Cuerpo problem+json (ProblemDetail) compartido por handlers y middlewares.
  - AppHTTPException: error HTTP con code + errors[] (403, 503).
  - Handler FastAPI que agrega el request_id a errors[].

Colaboradores:
  - api/exception_handlers.py: traduce StoreError a AppHTTPException.
  - crosscutting/middleware.py: arma el 413 fuera del stack de FastAPI.
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON = "application/problem+json"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PASSWORD_POLICY_VIOLATION = "PASSWORD_POLICY_VIOLATION"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class ProblemDetail(BaseModel):
    """RFC 7807 + `code` (estable) + `errors` (reglas violadas, motivo, ids)."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def problem_body(
    status: int,
    code: ErrorCode,
    detail: str,
    *,
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return ProblemDetail(
        type=f"about:blank/{code.value.lower()}",
        title=code.label,
        status=status,
        detail=detail,
        code=code,
        instance=instance,
        errors=errors or None,
    ).model_dump(mode="json", exclude_none=True)


# R: Documentación OpenAPI de los errores comunes de los routers.
OPENAPI_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ProblemDetail, "description": description}
    for status, description in (
        (401, "Token ausente o inválido, o credenciales rechazadas"),
        (403, "El rol no tiene el permiso requerido"),
        (404, "Registro inexistente o dado de baja"),
        (409, "Unicidad violada o stock insuficiente"),
        (422, "Datos o filtros inválidos"),
    )
}


class AppHTTPException(HTTPException):
    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


def forbidden(detail: str = "Acceso denegado") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def service_unavailable(service: str) -> AppHTTPException:
    return AppHTTPException(
        503,
        ErrorCode.SERVICE_UNAVAILABLE,
        f"Servicio no disponible temporalmente: {service}",
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    errors = list(exc.errors or [])
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        errors.append({"request_id": request_id})

    return JSONResponse(
        status_code=exc.status_code,
        content=problem_body(
            exc.status_code,
            exc.code,
            str(exc.detail),
            instance=str(request.url),
            errors=errors,
        ),
        headers=exc.headers,
        media_type=PROBLEM_JSON,
    )
