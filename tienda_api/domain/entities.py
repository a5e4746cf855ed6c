"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del catálogo (Product, Rating, PublicProduct, ProductStatistics)

Responsabilidades:
    - Definir el registro interno de producto (mutable, propiedad del repositorio).
    - Definir la proyección pública (inmutable) que cruza la frontera.
    - Validar invariantes reportando TODAS las reglas violadas.

Colaboradores:
    - domain.query: filtra/ordena/pagina Product.
    - infrastructure.repositories: crean, mutan y proyectan Product.
    - api.product_routes: serializa PublicProduct.

Principios:
    - Sin dependencias a DB/FastAPI.
    - Las violaciones se reportan, nunca se corrigen en silencio.
===============================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

# R: Campos que update() puede mutar; el resto se ignora.
PRODUCT_UPDATABLE_FIELDS: tuple[str, ...] = (
    "title",
    "price",
    "description",
    "category",
    "image",
    "stock",
    "tags",
    "brand",
    "is_active",
)


@dataclass(frozen=True, slots=True)
class Rating:
    """Valoración agregada (rate 0–5, count >= 0)."""

    rate: float = 0.0
    count: int = 0

    @classmethod
    def from_data(cls, data: Rating | Mapping[str, Any] | None) -> Rating:
        """Lo ilegible queda como rate NaN / count -1 y lo rechaza validate_product."""
        if data is None:
            return cls()
        if isinstance(data, Rating):
            return data
        if not isinstance(data, Mapping):
            return cls(rate=math.nan, count=-1)
        count = data.get("count", 0)
        if isinstance(count, bool) or not isinstance(count, int):
            count = -1
        return cls(rate=parse_price(data.get("rate", 0.0)), count=count)


@dataclass
class Product:
    """
    Registro interno de producto.

    Importante:
      - Solo el repositorio lo muta; hacia afuera viaja PublicProduct.
      - `is_active=False` es el soft delete (el registro nunca se purga).
    """

    id: int
    title: str
    price: float
    description: str
    category: str
    image: str
    created_at: datetime
    updated_at: datetime
    rating: Rating = field(default_factory=Rating)
    stock: int = 0
    tags: list[str] = field(default_factory=list)
    brand: str | None = None
    is_active: bool = True

    @property
    def inventory_value(self) -> float:
        return self.price * self.stock


@dataclass(frozen=True, slots=True)
class PublicProduct:
    """Proyección de solo lectura de un producto."""

    id: int
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


@dataclass(frozen=True, slots=True)
class ProductStatistics:
    """Agregados sobre productos activos."""

    total_products: int
    total_value: float
    total_stock: int
    categories_count: dict[str, int]
    brands_count: dict[str, int]
    average_price: float
    out_of_stock: int


def parse_entity_id(value: Any) -> int | None:
    """Ids llegan como int o string numérico; lo demás no matchea nada."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def parse_price(value: Any) -> float:
    """Convierte a float; lo no numérico queda como NaN y falla la validación."""
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def product_from_data(
    data: Mapping[str, Any], *, product_id: int, now: datetime
) -> Product:
    """Construye un Product desde un registro plano (semilla o payload de alta)."""
    return Product(
        id=product_id,
        title=data.get("title") or "",
        price=parse_price(data.get("price")),
        description=data.get("description") or "",
        category=data.get("category") or "",
        image=data.get("image") or "",
        rating=Rating.from_data(data.get("rating")),
        stock=data.get("stock") or 0,
        tags=_tags_from(data.get("tags") or []),
        brand=data.get("brand"),
        is_active=bool(data.get("is_active", True)),
        created_at=now,
        updated_at=now,
    )


def apply_product_changes(product: Product, changes: Mapping[str, Any]) -> None:
    """Aplica solo los campos permitidos (PRODUCT_UPDATABLE_FIELDS)."""
    for name in PRODUCT_UPDATABLE_FIELDS:
        if name not in changes:
            continue
        value = changes[name]
        if name == "price":
            value = parse_price(value)
        elif name == "tags":
            value = _tags_from(value)
        setattr(product, name, value)


def _tags_from(value: Any) -> Any:
    # R: Copia listas/tuplas; cualquier otra cosa (None incluido) queda tal cual para validate_product.
    return list(value) if isinstance(value, (list, tuple)) else value


def validate_product(product: Product) -> list[str]:
    """Devuelve todas las reglas violadas (lista vacía = válido)."""
    errors: list[str] = []

    if not isinstance(product.title, str) or not product.title.strip():
        errors.append("El título es requerido")

    if math.isnan(product.price) or product.price <= 0:
        errors.append("El precio debe ser mayor a 0")

    if not isinstance(product.description, str):
        errors.append("La descripción debe ser texto")

    if not isinstance(product.category, str) or not product.category.strip():
        errors.append("La categoría es requerida")

    if not isinstance(product.image, str):
        errors.append("La imagen debe ser texto")

    if isinstance(product.stock, bool) or not isinstance(product.stock, int):
        errors.append("El stock debe ser un número entero")
    elif product.stock < 0:
        errors.append("El stock no puede ser negativo")

    if not isinstance(product.tags, list) or not all(
        isinstance(tag, str) for tag in product.tags
    ):
        errors.append("Las etiquetas deben ser una lista de textos")

    if product.brand is not None and not isinstance(product.brand, str):
        errors.append("La marca debe ser texto")

    if not isinstance(product.is_active, bool):
        errors.append("is_active debe ser booleano")

    if not 0 <= product.rating.rate <= 5 or product.rating.count < 0:
        errors.append("El rating debe estar entre 0 y 5 con count no negativo")

    return errors


def to_public_product(product: Product) -> PublicProduct:
    return PublicProduct(
        id=product.id,
        title=product.title,
        price=product.price,
        description=product.description,
        category=product.category,
        image=product.image,
        rating=product.rating,
        stock=product.stock,
        tags=tuple(product.tags),
        brand=product.brand,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )
