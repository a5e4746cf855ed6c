"""
===============================================================================
TARJETA CRC — infrastructure/db/pool.py (Pool del document store)
===============================================================================

Responsabilidades:
  - Mantener a lo sumo un ConnectionPool de psycopg por proceso.
  - Limitar cada conexión con statement_timeout (DB_STATEMENT_TIMEOUT_MS).

Colaboradores:
  - api/main.py (lifespan) y scripts/seed_document_store.py: init/close.
  - repositories/postgres/document_store.py: get_pool().

Restricciones:
  - Sin DATABASE_URL nunca se llama init_pool(); get_pool() falla con
    PoolNotInitializedError y la API responde 503.
===============================================================================
"""

from __future__ import annotations

import threading

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError

_lock = threading.Lock()
_current: ConnectionPool | None = None


def _configure_connection(conn) -> None:
    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms <= 0:
        return
    conn.execute(f"SET statement_timeout = {timeout_ms}")
    conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _current
    with _lock:
        if _current is not None:
            raise PoolAlreadyInitializedError("El pool del document store ya existe")
        _current = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=True,
        )
    logger.info(
        "Pool del document store abierto",
        extra={"min_size": min_size, "max_size": max_size},
    )
    return _current


def get_pool() -> ConnectionPool:
    pool = _current
    if pool is None:
        raise PoolNotInitializedError(
            "Document store deshabilitado: falta DATABASE_URL o no se abrió el pool"
        )
    return pool


def is_pool_initialized() -> bool:
    return _current is not None


def close_pool() -> None:
    """Cierra el pool si está abierto; llamarlo de nuevo no hace nada."""
    global _current
    with _lock:
        pool, _current = _current, None
    if pool is not None:
        pool.close()
        logger.info("Pool del document store cerrado")


def reset_pool() -> None:
    """Olvida el pool sin cerrarlo (tests)."""
    global _current
    with _lock:
        _current = None
