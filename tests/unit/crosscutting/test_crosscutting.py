"""
Name: Crosscutting Tests

Responsibilities:
  - Settings validation (production secret guard, pool bounds, origins)
  - JSON log formatting with redaction and request context
  - Metrics path normalization and status buckets
"""

import json
import logging

import pytest
from pydantic import ValidationError as SettingsValidationError

from tienda_api.context import clear_context, set_request_context
from tienda_api.crosscutting.config import Settings
from tienda_api.crosscutting.logger import JSONFormatter
from tienda_api.crosscutting.metrics import _normalize_endpoint, _status_bucket
from tienda_api.crosscutting.middleware import resolve_request_id
from tienda_api.identity.password_policy import PasswordPolicy

pytestmark = pytest.mark.unit

STRONG_SECRET = "x" * 40


# ============================================================
# Settings
# ============================================================


class TestSettings:
    def test_production_rejects_default_secret(self):
        with pytest.raises(SettingsValidationError, match="JWT_SECRET"):
            Settings(app_env="production", jwt_secret="dev-secret")

    def test_production_rejects_short_secret(self):
        with pytest.raises(SettingsValidationError, match="32"):
            Settings(app_env="production", jwt_secret="corto-pero-no-default")

    def test_production_accepts_strong_secret(self):
        assert Settings(app_env="production", jwt_secret=STRONG_SECRET).is_production()

    def test_pool_bounds(self):
        with pytest.raises(SettingsValidationError):
            Settings(db_pool_min_size=10, db_pool_max_size=2)

    def test_lockout_threshold_must_be_positive(self):
        with pytest.raises(SettingsValidationError):
            Settings(max_login_attempts=0)

    def test_origins_and_document_store_flag(self):
        settings = Settings(allowed_origins=" http://a.com , ,http://b.com", database_url="  ")
        assert settings.get_allowed_origins_list() == ["http://a.com", "http://b.com"]
        assert settings.has_document_store() is False

    def test_password_policy_from_settings(self):
        policy = PasswordPolicy.from_settings(
            Settings(password_min_length=10, password_require_digit=True)
        )
        assert policy.min_length == 10
        assert policy.require_digit is True


# ============================================================
# Logging
# ============================================================


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "tienda-api", logging.INFO, __file__, 1, "Login rechazado", None, None
    )
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:
    def test_redacts_sensitive_keys(self):
        payload = json.loads(
            JSONFormatter().format(
                _record(password="admin123", nested={"token": "abc", "ok": 1})
            )
        )
        assert payload["message"] == "Login rechazado"
        assert payload["password"] == "***REDACTADO***"
        assert payload["nested"] == {"token": "***REDACTADO***", "ok": 1}

    def test_includes_request_context(self):
        set_request_context(request_id="req-1", method="GET", path="/api/products")
        try:
            payload = json.loads(JSONFormatter().format(_record()))
        finally:
            clear_context()
        assert payload["request_id"] == "req-1"
        assert payload["path"] == "/api/products"


def test_resolve_request_id():
    assert resolve_request_id("abc") == "abc"
    assert len(resolve_request_id("")) == 36
    assert resolve_request_id("x" * 500) != "x" * 500


# ============================================================
# Metrics
# ============================================================


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/products/12", "/api/products/{id}"),
        ("/api/products/12/stock", "/api/products/{id}/stock"),
        ("/api/products/category/electronics", "/api/products/category/{category}"),
        ("/api/store/products/" + "ab" * 16, "/api/store/products/{id}"),
        ("/api/products", "/api/products"),
    ],
)
def test_normalize_endpoint(path, expected):
    assert _normalize_endpoint(path) == expected


def test_status_bucket():
    assert _status_bucket(201) == "2xx"
    assert _status_bucket(409) == "4xx"
    assert _status_bucket(503) == "5xx"
    assert _status_bucket(302) == "other"
