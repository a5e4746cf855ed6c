"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/product.py
============================================================
Class: DocumentProductRepository

Responsibilities:
  - CRUD de productos sobre PostgresDocumentStore (colección "products").
  - Validar con las MISMAS reglas de entidad que el backend in-memory.
  - Búsqueda aproximada: unión de prefijos sobre título y categoría.
  - Carga inicial (seed) del catálogo.

Collaborators:
  - infrastructure.repositories.postgres.document_store
  - domain.entities: product_from_data, apply_product_changes, validate_product

Constraints / Notes:
  - Ids opacos (string) asignados por el store, no secuenciales.
  - Filtros por igualdad exacta (case-sensitive) y búsqueda por prefijo:
    divergencia conocida respecto del motor in-memory (substring, sin mayúsculas).
  - Delete físico.
============================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from ....crosscutting.exceptions import ValidationError
from ....crosscutting.logger import logger
from ....domain.entities import (
    PRODUCT_UPDATABLE_FIELDS,
    Product,
    Rating,
    apply_product_changes,
    product_from_data,
    validate_product,
)
from .document_store import PostgresDocumentStore, StoredDocument

PRODUCTS_COLLECTION = "products"

# R: Campos ordenables nativamente (un solo campo por consulta).
SORTABLE_FIELDS = {"price", "title", "stock", "created_at", "updated_at"}


@dataclass(frozen=True, slots=True)
class StoredProduct:
    """Producto persistido en el document store (id opaco)."""

    id: str
    title: str
    price: float
    description: str
    category: str
    image: str
    rating: Rating
    stock: int
    tags: tuple[str, ...]
    brand: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


def _to_document(product: Product) -> dict[str, Any]:
    return {
        "title": product.title,
        "price": product.price,
        "description": product.description,
        "category": product.category,
        "image": product.image,
        "rating": {"rate": product.rating.rate, "count": product.rating.count},
        "stock": product.stock,
        "tags": list(product.tags),
        "brand": product.brand,
        "is_active": product.is_active,
    }


def _to_stored_product(doc: StoredDocument) -> StoredProduct:
    data = doc.data
    return StoredProduct(
        id=doc.id,
        title=data.get("title", ""),
        price=float(data.get("price", 0.0)),
        description=data.get("description", ""),
        category=data.get("category", ""),
        image=data.get("image", ""),
        rating=Rating.from_data(data.get("rating")),
        stock=int(data.get("stock", 0)),
        tags=tuple(data.get("tags") or ()),
        brand=data.get("brand"),
        is_active=bool(data.get("is_active", True)),
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _build_valid_product(data: Mapping[str, Any]) -> Product:
    product = product_from_data(data, product_id=0, now=datetime.now(timezone.utc))
    errors = validate_product(product)
    if errors:
        raise ValidationError("Datos de producto inválidos", errors)
    return product


class DocumentProductRepository:
    def __init__(self, store: PostgresDocumentStore) -> None:
        self._store = store

    def list_products(
        self,
        *,
        category: str | None = None,
        brand: str | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[StoredProduct]:
        if order_by is not None and order_by not in SORTABLE_FIELDS:
            raise ValidationError(
                "Filtros inválidos", [f"order_by desconocido: {order_by}"]
            )
        filters: dict[str, Any] = {"is_active": True}
        if category:
            filters["category"] = category
        if brand:
            filters["brand"] = brand
        docs = self._store.query(
            filters=filters, order_by=order_by, descending=descending, limit=limit
        )
        return [_to_stored_product(d) for d in docs]

    def get_product(self, product_id: str) -> StoredProduct | None:
        doc = self._store.get(product_id)
        return _to_stored_product(doc) if doc else None

    def create_product(self, data: Mapping[str, Any]) -> StoredProduct:
        product = _build_valid_product(data)
        doc = self._store.add(_to_document(product))
        logger.info("Producto creado en document store", extra={"product_id": doc.id})
        return _to_stored_product(doc)

    def update_product(
        self, product_id: str, changes: Mapping[str, Any]
    ) -> StoredProduct | None:
        """Valida el documento resultante antes de escribir."""
        current = self._store.get(product_id)
        if current is None:
            return None

        candidate = _build_valid_product(current.data)
        apply_product_changes(candidate, changes)
        errors = validate_product(candidate)
        if errors:
            raise ValidationError("Datos de actualización inválidos", errors)

        document = _to_document(candidate)
        patch = {k: document[k] for k in PRODUCT_UPDATABLE_FIELDS if k in changes}
        doc = self._store.update(product_id, patch)
        if doc is None:
            return None
        logger.info(
            "Producto actualizado en document store",
            extra={"product_id": product_id, "fields": sorted(patch)},
        )
        return _to_stored_product(doc)

    def delete_product(self, product_id: str) -> bool:
        deleted = self._store.delete(product_id)
        if deleted:
            logger.info(
                "Producto eliminado del document store",
                extra={"product_id": product_id},
            )
        return deleted

    def search_products(self, term: str) -> list[StoredProduct]:
        """Unión (sin duplicados) de prefijo en título y en categoría, solo activos."""
        if not term:
            return []
        seen: set[str] = set()
        result: list[StoredProduct] = []
        for field in ("title", "category"):
            for doc in self._store.prefix_search(field, term):
                if doc.data.get("is_active", True) is not True:
                    continue
                if doc.id not in seen:
                    seen.add(doc.id)
                    result.append(_to_stored_product(doc))
        return result

    def categories(self) -> list[str]:
        return self._store.distinct_values("category")

    def ping(self) -> bool:
        return self._store.ping()

    def seed(self, products: Iterable[Mapping[str, Any]]) -> int:
        """Carga productos validados; devuelve cuántos se insertaron."""
        count = 0
        for record in products:
            self._store.add(_to_document(_build_valid_product(record)))
            count += 1
        logger.info("Document store poblado", extra={"count": count})
        return count
