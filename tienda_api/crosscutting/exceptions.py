"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores de dominio e infraestructura)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (chequeable por máquina)
- error_id para correlación con logs
- message “humana” (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  StoreError + subclases

Responsabilidades:
  - Estandarizar errores que los repositorios y servicios levantan
  - Transportar el detalle necesario (reglas violadas, stock disponible, motivo)
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a RFC7807)
  - domain / identity / infrastructure (levantan estos errores)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str
    details: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
            "details": list(self.details),
        }


class StoreError(Exception):
    """
    Base para errores internos del sistema.

    Subclases fijan `error_code`; `details()` agrega contexto estructurado.
    """

    error_code: str = "STORE_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def details(self) -> list[Any]:
        return []

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            error_id=self.error_id,
            details=self.details(),
        )


class ValidationError(StoreError):
    """Campos de una entidad (o de un filtro) violan invariantes.

    Lleva TODAS las reglas violadas, no solo la primera.
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = list(errors or [])
        full = f"{message}: {', '.join(self.errors)}" if self.errors else message
        super().__init__(full)

    def details(self) -> list[Any]:
        return [{"msg": e} for e in self.errors]


class NotFoundError(StoreError):
    """Lookup sin registro (activo, en el caso de productos)."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' no encontrado")


class ConflictError(StoreError):
    """Violación de unicidad (username / email duplicado)."""

    error_code: str = "CONFLICT"

    def __init__(self, message: str, field_name: str | None = None):
        self.field_name = field_name
        super().__init__(message)

    def details(self) -> list[Any]:
        return [{"field": self.field_name}] if self.field_name else []


class InsufficientStockError(StoreError):
    """Un decremento dejaría el stock en negativo."""

    error_code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Stock insuficiente para producto {product_id}: "
            f"disponible {available}, solicitado {requested}"
        )

    def details(self) -> list[Any]:
        return [
            {
                "product_id": self.product_id,
                "available": self.available,
                "requested": self.requested,
            }
        ]


class PolicyViolationError(StoreError):
    """El password no cumple la política de seguridad configurada."""

    error_code: str = "PASSWORD_POLICY_VIOLATION"

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__(
            "La contraseña no cumple con los requisitos de seguridad: "
            + ", ".join(self.violations)
        )

    def details(self) -> list[Any]:
        return [{"msg": v} for v in self.violations]


class AuthFailureReason(str, Enum):
    """Motivos de rechazo de autenticación (mismo tratamiento externo)."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    TOKEN_MISSING = "TOKEN_MISSING"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"


_AUTH_MESSAGES: dict[AuthFailureReason, str] = {
    AuthFailureReason.INVALID_CREDENTIALS: "Credenciales inválidas",
    AuthFailureReason.ACCOUNT_LOCKED: "Cuenta bloqueada por múltiples intentos fallidos",
    AuthFailureReason.ACCOUNT_INACTIVE: "Cuenta desactivada",
    AuthFailureReason.TOKEN_MISSING: "Token de acceso requerido",
    AuthFailureReason.TOKEN_EXPIRED: "Token expirado",
    AuthFailureReason.TOKEN_INVALID: "Token inválido",
}


class AuthenticationError(StoreError):
    """Credenciales inválidas, cuenta bloqueada / inactiva o token no válido."""

    error_code: str = "AUTHENTICATION_FAILED"

    def __init__(self, reason: AuthFailureReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or _AUTH_MESSAGES[reason])

    def details(self) -> list[Any]:
        return [{"reason": self.reason.value}]


class DatabaseError(StoreError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
