"""
===============================================================================
TARJETA CRC — tienda_api/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar quién/qué está siendo atendido (request_id, método, path, usuario)
    en un único ContextVar, para que los logs salgan correlacionados.

Colaboradores:
  - crosscutting.middleware: abre el contexto al entrar el request.
  - identity.auth_users: completa user_id tras validar el token.
  - crosscutting.logger: vuelca get_context_dict() en cada línea JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, fields, replace


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    user_id: str = ""


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("tienda_request", default=_EMPTY)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    _current.set(RequestContext(request_id=request_id, method=method, path=path))


def set_user_context(user_id: int | str | None) -> None:
    # R: Conserva request_id/método/path; solo cambia el usuario.
    user = "" if user_id is None else str(user_id)
    _current.set(replace(_current.get(), user_id=user))


def get_context_dict() -> dict[str, str]:
    """Campos no vacíos del contexto actual."""
    ctx = _current.get()
    return {
        f.name: value for f in fields(ctx) if (value := getattr(ctx, f.name))
    }


def clear_context() -> None:
    _current.set(_EMPTY)
