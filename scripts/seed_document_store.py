"""
Name: Document Store Seeding Script

Responsibilities:
  - Load the sample catalog into the `products` collection of the document store
  - Skip seeding when the collection already has documents (unless --force)
  - Print the resulting product count and categories

Usage:
  DATABASE_URL=postgresql://... python scripts/seed_document_store.py [--limit N] [--force]
"""

from __future__ import annotations

import argparse
import sys

from tienda_api.crosscutting.config import get_settings
from tienda_api.infrastructure import seed_data
from tienda_api.infrastructure.db.pool import close_pool, init_pool
from tienda_api.infrastructure.repositories.postgres.document_store import (
    PostgresDocumentStore,
)
from tienda_api.infrastructure.repositories.postgres.product import (
    PRODUCTS_COLLECTION,
    DocumentProductRepository,
)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed the document store with the sample product catalog."
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only seed the first N products",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Seed even if the collection is not empty",
    )
    return parser.parse_args(argv)


def seed(
    repo: DocumentProductRepository,
    store: PostgresDocumentStore,
    *,
    limit: int | None = None,
    force: bool = False,
) -> int:
    """Returns how many products were inserted (0 when skipped)."""
    existing = store.count()
    if existing and not force:
        print(f"Collection '{store.collection}' already has {existing} documents.")
        return 0

    products = seed_data.PRODUCTS[:limit] if limit else seed_data.PRODUCTS
    return repo.seed(products)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = get_settings()
    if not settings.has_document_store():
        raise SystemExit("DATABASE_URL is required to seed the document store.")

    init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    try:
        store = PostgresDocumentStore(PRODUCTS_COLLECTION)
        repo = DocumentProductRepository(store)
        inserted = seed(repo, store, limit=args.limit, force=args.force)
        print(f"Inserted {inserted} products.")
        print(f"Total products: {store.count()}")
        print(f"Categories: {', '.join(repo.categories())}")
    finally:
        close_pool()


if __name__ == "__main__":
    main()
