"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/document_store.py
============================================================
Class: PostgresDocumentStore

Responsibilities:
  - CRUD de documentos JSONB agrupados por colección, con id opaco (string).
  - Timestamps created_at / updated_at asignados por el servidor (now()).
  - Consultas nativas: igualdad (data @> ...), orden por UN campo, LIMIT.
  - Búsqueda por prefijo sobre un campo (starts_with), case-sensitive.

Collaborators:
  - psycopg_pool.ConnectionPool (inyectable; por defecto el pool global)
  - psycopg.types.json.Jsonb (serialización de documentos)
  - crosscutting.exceptions.DatabaseError
  - crosscutting.metrics.observe_db_query_duration

Constraints / Notes:
  - SQL parametrizado siempre; los nombres de campo se validan contra un patrón
    antes de usarse como clave JSON.
  - El prefijo NO es substring: "lap" matchea "laptop" pero "top" no.
  - Delete es físico (no hay soft delete en el document store).
  - Tabla creada por alembic (versions/001_documents.py).
============================================================
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping
from uuid import uuid4

from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, ValidationError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import observe_db_query_duration
from ...db.pool import get_pool

# R: Columnas en un solo lugar (contrato con la migración).
_COLUMNS = "id, data, created_at, updated_at"
_FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TIMESTAMP_COLUMNS = {"created_at", "updated_at"}


@dataclass(frozen=True, slots=True)
class StoredDocument:
    id: str
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime


def _row_to_document(row: tuple) -> StoredDocument:
    return StoredDocument(
        id=row[0], data=dict(row[1] or {}), created_at=row[2], updated_at=row[3]
    )


def _check_field(name: str) -> str:
    if not isinstance(name, str) or not _FIELD_PATTERN.match(name):
        raise ValidationError("Consulta inválida", [f"Campo inválido: {name!r}"])
    return name


def _statement_kind(sql: str) -> str:
    parts = sql.lstrip().split(None, 1)
    return parts[0].upper() if parts else "UNKNOWN"


class PostgresDocumentStore:
    """Colección de documentos sobre la tabla `documents`."""

    def __init__(self, collection: str, *, pool: ConnectionPool | None = None) -> None:
        self._collection = collection
        self._injected_pool = pool

    @property
    def collection(self) -> str:
        return self._collection

    def _get_pool(self) -> ConnectionPool:
        return self._injected_pool or get_pool()

    # =========================================================
    # Ejecución con logging + DatabaseError consistentes
    # =========================================================
    def _run(
        self, query: str, params: Iterable[object], *, fetch: str, op: str
    ) -> Any:
        start = time.perf_counter()
        try:
            with self._get_pool().connection() as conn:
                cursor = conn.execute(query, tuple(params))
                if fetch == "one":
                    return cursor.fetchone()
                return cursor.fetchall()
        except Exception as exc:
            logger.exception(
                f"DocumentStore: {op} falló",
                extra={"collection": self._collection, "error": str(exc)},
            )
            raise DatabaseError(f"DocumentStore: {op} falló: {exc}") from exc
        finally:
            observe_db_query_duration(
                _statement_kind(query), time.perf_counter() - start
            )

    # =========================================================
    # CRUD
    # =========================================================
    def add(self, data: Mapping[str, Any]) -> StoredDocument:
        doc_id = uuid4().hex
        row = self._run(
            f"""
            INSERT INTO documents (id, collection, data)
            VALUES (%s, %s, %s)
            RETURNING {_COLUMNS}
            """,
            (doc_id, self._collection, Jsonb(dict(data))),
            fetch="one",
            op="add",
        )
        return _row_to_document(row)

    def get(self, doc_id: str) -> StoredDocument | None:
        row = self._run(
            f"SELECT {_COLUMNS} FROM documents WHERE collection = %s AND id = %s",
            (self._collection, str(doc_id)),
            fetch="one",
            op="get",
        )
        return _row_to_document(row) if row else None

    def update(self, doc_id: str, patch: Mapping[str, Any]) -> StoredDocument | None:
        """Merge superficial (jsonb ||) y refresca updated_at."""
        row = self._run(
            f"""
            UPDATE documents
            SET data = data || %s, updated_at = now()
            WHERE collection = %s AND id = %s
            RETURNING {_COLUMNS}
            """,
            (Jsonb(dict(patch)), self._collection, str(doc_id)),
            fetch="one",
            op="update",
        )
        return _row_to_document(row) if row else None

    def delete(self, doc_id: str) -> bool:
        row = self._run(
            "DELETE FROM documents WHERE collection = %s AND id = %s RETURNING id",
            (self._collection, str(doc_id)),
            fetch="one",
            op="delete",
        )
        return row is not None

    # =========================================================
    # Consultas
    # =========================================================
    def query(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        """Igualdad sobre campos + orden por un campo + límite."""
        sql = f"SELECT {_COLUMNS} FROM documents WHERE collection = %s"
        params: list[object] = [self._collection]

        if filters:
            for name in filters:
                _check_field(name)
            sql += " AND data @> %s"
            params.append(Jsonb(dict(filters)))

        direction = "DESC" if descending else "ASC"
        if order_by is None:
            sql += " ORDER BY created_at ASC, id ASC"
        elif order_by in _TIMESTAMP_COLUMNS:
            sql += f" ORDER BY {order_by} {direction}, id ASC"
        else:
            sql += f" ORDER BY data -> %s {direction}, id ASC"
            params.append(_check_field(order_by))

        if limit is not None:
            if limit <= 0:
                raise ValidationError("Consulta inválida", ["limit debe ser > 0"])
            sql += " LIMIT %s"
            params.append(int(limit))

        rows = self._run(sql, params, fetch="all", op="query")
        return [_row_to_document(r) for r in rows]

    def prefix_search(
        self, field: str, prefix: str, *, limit: int | None = None
    ) -> list[StoredDocument]:
        """Documentos cuyo `field` (texto) empieza con `prefix` (case-sensitive)."""
        sql = (
            f"SELECT {_COLUMNS} FROM documents "
            "WHERE collection = %s AND starts_with(data ->> %s, %s) "
            "ORDER BY data ->> %s ASC, id ASC"
        )
        name = _check_field(field)
        params: list[object] = [self._collection, name, prefix, name]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        rows = self._run(sql, params, fetch="all", op="prefix_search")
        return [_row_to_document(r) for r in rows]

    def distinct_values(self, field: str) -> list[str]:
        rows = self._run(
            "SELECT DISTINCT data ->> %s AS value FROM documents "
            "WHERE collection = %s AND data ? %s ORDER BY value",
            (_check_field(field), self._collection, field),
            fetch="all",
            op="distinct_values",
        )
        return [r[0] for r in rows if r[0] is not None]

    def count(self) -> int:
        row = self._run(
            "SELECT COUNT(*) FROM documents WHERE collection = %s",
            (self._collection,),
            fetch="one",
            op="count",
        )
        return int(row[0]) if row else 0

    def ping(self) -> bool:
        """Chequeo de conectividad para /healthz."""
        row = self._run("SELECT 1", (), fetch="one", op="ping")
        return row is not None
