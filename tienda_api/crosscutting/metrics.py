"""
===============================================================================
TARJETA CRC — crosscutting/metrics.py (Prometheus)
===============================================================================

Responsabilidades:
  - Registry propio con las series de la tienda: HTTP, login, stock y
    duración de queries JSONB.
  - Labels acotados: nada de user_id, ids de producto ni términos buscados.
  - Render de /metrics en formato texto de Prometheus.

Colaboradores:
  - crosscutting.middleware (record_request_metrics)
  - identity.auth_users (record_login_attempt, record_account_locked)
  - in_memory.product (record_stock_adjustment)
  - postgres.document_store (observe_db_query_duration)
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# R: HTTP (endpoint normalizado, status agrupado)
_requests_total = Counter(
    "tienda_requests_total",
    "Total de requests HTTP",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "tienda_request_latency_seconds",
    "Latencia de requests HTTP (segundos)",
    ["endpoint", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=_registry,
)

# R: Autenticación
_login_attempts_total = Counter(
    "tienda_login_attempts_total",
    "Intentos de login por resultado",
    ["outcome"],
    registry=_registry,
)

_accounts_locked_total = Counter(
    "tienda_accounts_locked_total",
    "Cuentas bloqueadas por superar el umbral de intentos fallidos",
    registry=_registry,
)

# R: Inventario
_stock_adjustments_total = Counter(
    "tienda_stock_adjustments_total",
    "Ajustes de stock por resultado",
    ["result"],
    registry=_registry,
)

# R: Document store
_db_query_duration = Histogram(
    "tienda_db_query_duration_seconds",
    "Duración de queries del document store (segundos)",
    ["kind"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
    registry=_registry,
)


def record_request_metrics(
    endpoint: str, method: str, status_code: int, latency_seconds: float
) -> None:
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized, method=method, status=_status_bucket(status_code)
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_login_attempt(outcome: str) -> None:
    """outcome: success | INVALID_CREDENTIALS | ACCOUNT_LOCKED | ACCOUNT_INACTIVE"""
    _login_attempts_total.labels(outcome=outcome).inc()


def record_account_locked() -> None:
    _accounts_locked_total.inc()


def record_stock_adjustment(result: str) -> None:
    _stock_adjustments_total.labels(result=result).inc()


def observe_db_query_duration(kind: str, seconds: float) -> None:
    _db_query_duration.labels(kind=kind).observe(max(0.0, float(seconds)))


_HEX_ID = re.compile(r"/[0-9a-f]{32}(?=/|$)", re.IGNORECASE)
_NUMERIC_ID = re.compile(r"/\d+(?=/|$)")
_CATEGORY = re.compile(r"/category/[^/]+")


def _normalize_endpoint(path: str) -> str:
    """`/api/products/12/stock` -> `/api/products/{id}/stock`; igual con categorías e ids hex."""
    path = _CATEGORY.sub("/category/{category}", path)
    path = _HEX_ID.sub("/{id}", path)
    return _NUMERIC_ID.sub("/{id}", path)


def _status_bucket(code: int) -> str:
    return {2: "2xx", 4: "4xx", 5: "5xx"}.get(code // 100, "other")


def get_metrics_response() -> tuple[bytes, str]:
    return generate_latest(_registry), CONTENT_TYPE_LATEST
