"""
Name: Document Store Routes Tests

Responsibilities:
  - 503 when no database is configured
  - CRUD mapping over DocumentProductRepository with a mocked store
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from tienda_api.api.store_routes import document_repository
from tienda_api.crosscutting.exceptions import DatabaseError
from tienda_api.infrastructure.repositories.postgres.document_store import (
    PostgresDocumentStore,
    StoredDocument,
)
from tienda_api.infrastructure.repositories.postgres.product import (
    DocumentProductRepository,
)

pytestmark = pytest.mark.unit

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)
DOC_ID = "9f1c2e" + "0" * 26


def _doc(doc_id=DOC_ID, **data):
    base = {"title": "Laptop", "price": 100.0, "category": "electronics", "stock": 3}
    base.update(data)
    return StoredDocument(id=doc_id, data=base, created_at=NOW, updated_at=NOW)


@pytest.fixture
def store() -> MagicMock:
    return MagicMock(spec=PostgresDocumentStore)


@pytest.fixture
def store_client(app, client, store):
    app.dependency_overrides[document_repository] = lambda: DocumentProductRepository(
        store
    )
    return client


def test_disabled_store_is_503(client):
    with patch("tienda_api.api.store_routes.get_document_product_repository", return_value=None):
        response = client.get("/api/store/products")

    assert response.status_code == 503
    assert response.json()["code"] == "SERVICE_UNAVAILABLE"


def test_list_uses_opaque_ids(store_client, store):
    store.query.return_value = [_doc()]

    response = store_client.get(
        "/api/store/products", params={"category": "electronics", "limit": 10}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["products"][0]["id"] == DOC_ID
    assert store.query.call_args.kwargs["limit"] == 10


def test_list_limit_bounds(store_client):
    assert store_client.get("/api/store/products", params={"limit": 0}).status_code == 422


def test_unknown_order_is_422(store_client):
    response = store_client.get("/api/store/products", params={"order_by": "rating"})
    assert response.status_code == 422


def test_get_and_missing(store_client, store):
    store.get.side_effect = [_doc(), None]

    assert store_client.get(f"/api/store/products/{DOC_ID}").status_code == 200
    assert store_client.get("/api/store/products/otro").status_code == 404


def test_search_and_categories(store_client, store):
    store.prefix_search.return_value = [_doc()]
    store.distinct_values.return_value = ["electronics"]

    found = store_client.get("/api/store/products/search", params={"q": "Lap"}).json()
    assert found["count"] == 1
    assert store_client.get("/api/store/products/categories").json() == ["electronics"]


def test_create_needs_permission(store_client, store, auth_headers):
    store.add.return_value = _doc()
    payload = {"title": "Laptop", "price": 100, "category": "electronics"}

    assert store_client.post("/api/store/products", json=payload).status_code == 401
    response = store_client.post(
        "/api/store/products", json=payload, headers=auth_headers("admin")
    )
    assert response.status_code == 201
    assert response.json()["id"] == DOC_ID


def test_update_and_delete(store_client, store, auth_headers):
    headers = auth_headers("admin")
    store.get.return_value = _doc()
    store.update.return_value = _doc(price=80.0)
    store.delete.side_effect = [True, False]

    updated = store_client.put(
        f"/api/store/products/{DOC_ID}", json={"price": 80}, headers=headers
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 80.0

    assert store_client.delete(f"/api/store/products/{DOC_ID}", headers=headers).status_code == 204
    assert store_client.delete(f"/api/store/products/{DOC_ID}", headers=headers).status_code == 404


def test_database_error_is_503(store_client, store):
    store.query.side_effect = DatabaseError("DocumentStore: query falló")

    response = store_client.get("/api/store/products")

    assert response.status_code == 503
    assert response.json()["code"] == "DATABASE_ERROR"
