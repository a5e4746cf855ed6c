"""
Name: Seed Script Tests

Responsibilities:
  - Validate skip/force/limit behavior of the document store seeding
  - Validate that main() refuses to run without DATABASE_URL
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from scripts.seed_document_store import main, seed
from tienda_api.infrastructure import seed_data
from tienda_api.infrastructure.repositories.postgres.document_store import (
    PostgresDocumentStore,
    StoredDocument,
)
from tienda_api.infrastructure.repositories.postgres.product import (
    DocumentProductRepository,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock(spec=PostgresDocumentStore)
    store.collection = "products"
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    store.add.side_effect = lambda data: StoredDocument(
        id="x", data=dict(data), created_at=now, updated_at=now
    )
    return store


def test_seed_skips_non_empty_collection(store):
    store.count.return_value = 3
    assert seed(DocumentProductRepository(store), store) == 0
    store.add.assert_not_called()


def test_seed_force_and_limit(store):
    store.count.return_value = 3
    inserted = seed(DocumentProductRepository(store), store, limit=5, force=True)
    assert inserted == 5


def test_seed_full_catalog(store):
    store.count.return_value = 0
    assert seed(DocumentProductRepository(store), store) == len(seed_data.PRODUCTS)


def test_main_requires_database_url():
    settings = MagicMock()
    settings.has_document_store.return_value = False
    with patch("scripts.seed_document_store.get_settings", return_value=settings):
        with pytest.raises(SystemExit):
            main([])
