"""
===============================================================================
TARJETA CRC — crosscutting/logger.py (Logs JSON de la tienda)
===============================================================================

Responsabilidades:
  - Una línea JSON por evento, con request_id/method/path/user_id del contexto.
  - Copiar los `extra=` del llamador, ocultando contraseñas, hashes y tokens.
  - Exponer `logger`, la instancia que importa todo el paquete.

Colaboradores:
  - tienda_api/context.py (get_context_dict)
  - crosscutting/config.py (LOG_LEVEL, LOG_JSON)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as SettingsValidationError

from ..context import get_context_dict

REDACTED = "***REDACTADO***"
_MAX_TEXT = 4_000
_MAX_NESTING = 4

# R: Atributos estándar de LogRecord; todo lo demás vino por `extra=`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_SECRET_NAMES = frozenset(
    {
        "password",
        "new_password",
        "current_password",
        "password_hash",
        "secret",
        "jwt_secret",
        "token",
        "access_token",
        "authorization",
        "database_url",
    }
)


def scrub(value: Any, key: str = "", level: int = 0) -> Any:
    """Copia `value` apta para JSON sin secretos ni textos desmedidos."""
    if key.lower() in _SECRET_NAMES:
        return REDACTED
    if level > _MAX_NESTING:
        return "…"
    if isinstance(value, dict):
        return {str(k): scrub(v, str(k), level + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [scrub(item, key, level + 1) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, str) and len(value) > _MAX_TEXT:
        return value[:_MAX_TEXT] + "…"
    return value


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
            **get_context_dict(),
        }
        entry.update(
            (name, scrub(value, name))
            for name, value in vars(record).items()
            if name not in _STANDARD_ATTRS
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def _level_and_format() -> tuple[str, bool]:
    from .config import get_settings

    # R: Settings inválidos no deben dejarnos sin log para reportarlos.
    try:
        settings = get_settings()
    except SettingsValidationError:
        return "INFO", True
    return (settings.log_level or "INFO").upper(), settings.log_json


def setup_logger(name: str = "tienda-api") -> logging.Logger:
    log = logging.getLogger(name)
    level, as_json = _level_and_format()
    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if as_json
            else logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        log.addHandler(handler)
    return log


logger = setup_logger()
