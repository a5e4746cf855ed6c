"""
Name: Application Wiring Tests

Responsibilities:
  - /healthz reports document store status
  - /metrics exposes Prometheus text (and honors METRICS_REQUIRE_AUTH)
  - Security headers, X-Request-Id propagation, body limit (413)
  - Unhandled exceptions become 500 problem+json
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tienda_api.crosscutting.exceptions import DatabaseError
from tienda_api.crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware

pytestmark = pytest.mark.unit

REPO_LOOKUP = "tienda_api.api.main.get_document_product_repository"


# ============================================================
# Health
# ============================================================


def test_healthz_without_document_store(client):
    with patch(REPO_LOOKUP, return_value=None):
        response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["document_store"] == "disabled"
    assert body["request_id"] == response.headers["x-request-id"]


def test_healthz_connected(client):
    repo = MagicMock()
    repo.ping.return_value = True
    with patch(REPO_LOOKUP, return_value=repo):
        body = client.get("/healthz").json()
    assert body["document_store"] == "connected"


def test_healthz_disconnected(client):
    repo = MagicMock()
    repo.ping.side_effect = DatabaseError("sin conexión")
    with patch(REPO_LOOKUP, return_value=repo):
        body = client.get("/healthz").json()
    assert body["ok"] is False
    assert body["document_store"] == "disconnected"


# ============================================================
# Metrics
# ============================================================


def test_metrics_is_prometheus_text(client):
    client.get("/api/products")
    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "tienda_requests_total" in response.text


def test_metrics_can_require_admin(client, auth_headers):
    settings = MagicMock(metrics_require_auth=True)
    with patch("tienda_api.api.main.get_settings", return_value=settings):
        anonymous = client.get("/metrics")
        customer = client.get("/metrics", headers=auth_headers("cliente1"))
        admin = client.get("/metrics", headers=auth_headers("admin"))

    assert anonymous.status_code == 401
    assert customer.status_code == 403
    assert admin.status_code == 200


# ============================================================
# Middleware
# ============================================================


def test_security_headers_present(client):
    response = client.get("/api/products/categories")

    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "content-security-policy" in response.headers


def test_request_id_is_propagated(client):
    response = client.get("/healthz", headers={"X-Request-Id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


def test_error_payload_carries_request_id(client):
    response = client.get("/api/products/999", headers={"X-Request-Id": "req-404"})
    assert {"request_id": "req-404"} in response.json()["errors"]


def test_body_limit_rejects_large_payload():
    app = FastAPI()
    app.add_middleware(BodyLimitMiddleware, max_bytes=32)

    @app.post("/echo")
    async def echo(payload: dict):
        return payload

    client = TestClient(app)
    small = client.post("/echo", json={"a": 1})
    large = client.post("/echo", json={"texto": "x" * 100})

    assert small.status_code == 200
    assert large.status_code == 413
    assert large.headers["content-type"].startswith("application/problem+json")
    assert large.json()["code"] == "PAYLOAD_TOO_LARGE"


# ============================================================
# Errores no controlados
# ============================================================


def test_unhandled_exception_is_500_problem_json(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("explota")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "INTERNAL_ERROR"
    assert body["detail"] == "explota"


def test_request_context_middleware_standalone():
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    response = TestClient(app).get("/ping")
    assert len(response.headers["x-request-id"]) == 36
