"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/product.py
============================================================
Class: InMemoryProductRepository

Responsibilities:
  - Ser dueño exclusivo de la colección de productos (lista en memoria).
  - CRUD + soft delete + ajuste de stock + estadísticas.
  - Delegar filtro/orden/paginado al motor de domain.query.
  - Devolver SIEMPRE proyecciones públicas (PublicProduct), nunca el registro vivo.

Collaborators:
  - domain.entities: Product, PublicProduct, validate_product
  - domain.query: ProductQuery, filter_products, sort_products, paginate
  - crosscutting.exceptions: ValidationError, InsufficientStockError
  - crosscutting.metrics: ajustes de stock

Constraints / Notes:
  - Thread-safe: un Lock por repositorio protege snapshots y mutaciones.
  - Ids: max(seed)+1 calculado UNA vez y luego incrementado por alta;
    nunca se reutilizan (ni después de un soft delete).
  - Validación completa ANTES de commitear: una mutación inválida no deja rastro.
  - updated_at es estrictamente creciente por registro.
============================================================
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Iterable, Mapping

from ....crosscutting.exceptions import InsufficientStockError, ValidationError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_stock_adjustment
from ....domain.entities import (
    Product,
    ProductStatistics,
    PublicProduct,
    apply_product_changes,
    parse_entity_id,
    product_from_data,
    to_public_product,
    validate_product,
)
from ....domain.query import (
    ProductPage,
    ProductQuery,
    filter_products,
    paginate,
    sort_products,
)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryProductRepository:
    """
    Repositorio in-memory, thread-safe, para productos.

    Modelo mental:
    - _products es la "tabla" en memoria, en orden de inserción.
    - Los soft-deleted quedan en la lista con is_active=False para siempre.
    """

    def __init__(
        self,
        seed: Iterable[Mapping[str, Any]] = (),
        *,
        categories: Iterable[str] = (),
        brands: Iterable[str] = (),
        clock: Clock | None = None,
    ) -> None:
        self._lock = Lock()
        self._clock: Clock = clock or _utcnow
        self._categories = list(categories)
        self._brands = list(brands)

        now = self._clock()
        self._products: list[Product] = []
        for record in seed:
            product = product_from_data(record, product_id=int(record["id"]), now=now)
            errors = validate_product(product)
            if errors:
                raise ValidationError(f"Semilla inválida (id {product.id})", errors)
            self._products.append(product)

        self._next_id = max((p.id for p in self._products), default=0) + 1

    # =========================================================
    # Helpers internos
    # =========================================================
    def _touch(self, product: Product) -> None:
        """R: updated_at estrictamente creciente aunque el reloj no avance."""
        now = self._clock()
        if now <= product.updated_at:
            now = product.updated_at + timedelta(microseconds=1)
        product.updated_at = now

    def _find_active_index(self, product_id: Any) -> int | None:
        pid = parse_entity_id(product_id)
        if pid is None:
            return None
        for index, product in enumerate(self._products):
            if product.id == pid and product.is_active:
                return index
        return None

    def _active_snapshot(self) -> list[Product]:
        with self._lock:
            return [replace(p) for p in self._products if p.is_active]

    # =========================================================
    # Lecturas
    # =========================================================
    def list_products(
        self, query: ProductQuery | None = None
    ) -> list[PublicProduct] | ProductPage:
        """
        Lista productos activos aplicando filtro, orden y (opcional) paginado.

        Devuelve ProductPage solo si la query trae page y limit.
        """
        query = query or ProductQuery()
        errors = query.validate()
        if errors:
            raise ValidationError("Filtros inválidos", errors)

        matched = sort_products(
            filter_products(self._active_snapshot(), query), query.sort_by
        )

        if query.wants_pagination:
            page_items, pagination = paginate(matched, query.page, query.limit)
            return ProductPage(
                products=[to_public_product(p) for p in page_items],
                pagination=pagination,
            )

        return [to_public_product(p) for p in matched]

    def get_product(self, product_id: Any) -> PublicProduct | None:
        with self._lock:
            index = self._find_active_index(product_id)
            if index is None:
                return None
            return to_public_product(self._products[index])

    def search_products(self, term: str) -> list[PublicProduct]:
        """Busca en título, descripción, categoría y tags (substring, sin mayúsculas)."""
        needle = (term or "").lower()
        return [
            to_public_product(p)
            for p in self._active_snapshot()
            if needle in p.title.lower()
            or needle in p.description.lower()
            or needle in p.category.lower()
            or any(needle in tag.lower() for tag in p.tags)
        ]

    def list_by_category(self, category: str) -> list[PublicProduct]:
        needle = (category or "").lower()
        return [
            to_public_product(p)
            for p in self._active_snapshot()
            if p.category.lower() == needle
        ]

    def categories(self) -> list[str]:
        return list(self._categories)

    def brands(self) -> list[str]:
        return list(self._brands)

    def statistics(self) -> ProductStatistics:
        active = self._active_snapshot()
        count = len(active)
        return ProductStatistics(
            total_products=count,
            total_value=sum(p.inventory_value for p in active),
            total_stock=sum(p.stock for p in active),
            categories_count=dict(Counter(p.category for p in active)),
            brands_count=dict(Counter(p.brand for p in active if p.brand)),
            average_price=(sum(p.price for p in active) / count) if count else 0.0,
            out_of_stock=sum(1 for p in active if p.stock == 0),
        )

    # =========================================================
    # Mutaciones
    # =========================================================
    def create_product(self, data: Mapping[str, Any]) -> PublicProduct:
        with self._lock:
            product = product_from_data(
                data, product_id=self._next_id, now=self._clock()
            )

            errors = validate_product(product)
            if errors:
                raise ValidationError("Datos de producto inválidos", errors)

            self._products.append(product)
            self._next_id += 1

        logger.info("Producto creado", extra={"product_id": product.id})
        return to_public_product(product)

    def update_product(
        self, product_id: Any, changes: Mapping[str, Any]
    ) -> PublicProduct | None:
        """Aplica los campos permitidos; el registro vivo solo cambia si valida."""
        with self._lock:
            index = self._find_active_index(product_id)
            if index is None:
                return None

            candidate = replace(self._products[index])
            apply_product_changes(candidate, changes)
            self._touch(candidate)

            errors = validate_product(candidate)
            if errors:
                raise ValidationError("Datos de actualización inválidos", errors)

            self._products[index] = candidate

        logger.info(
            "Producto actualizado",
            extra={"product_id": candidate.id, "fields": sorted(changes)},
        )
        return to_public_product(candidate)

    def soft_delete_product(self, product_id: Any) -> bool:
        """False si el producto no existe o ya estaba inactivo."""
        with self._lock:
            index = self._find_active_index(product_id)
            if index is None:
                return False
            product = self._products[index]
            product.is_active = False
            self._touch(product)

        logger.info("Producto eliminado (soft delete)", extra={"product_id": product.id})
        return True

    def adjust_stock(self, product_id: Any, delta: int) -> PublicProduct | None:
        """
        delta > 0 incrementa; delta < 0 decrementa |delta|.

        Lanza InsufficientStockError si el stock quedaría negativo (sin cambios).
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Ajuste de stock inválido", ["delta debe ser entero"])

        with self._lock:
            index = self._find_active_index(product_id)
            if index is None:
                return None
            product = self._products[index]

            if delta < 0 and product.stock < -delta:
                record_stock_adjustment("insufficient")
                raise InsufficientStockError(product.id, product.stock, -delta)

            product.stock += delta
            self._touch(product)
            snapshot = to_public_product(product)

        record_stock_adjustment("increment" if delta > 0 else "decrement")
        logger.info(
            "Stock actualizado",
            extra={"product_id": snapshot.id, "delta": delta, "stock": snapshot.stock},
        )
        return snapshot

