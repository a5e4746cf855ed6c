"""
===============================================================================
TARJETA CRC — schemas/products.py
===============================================================================

Módulo:
    Schemas HTTP para el catálogo de productos (in-memory y document store)

Responsabilidades:
    - DTOs de alta / actualización / ajuste de stock.
    - Responses de producto, página, estadísticas.

Notas:
    - Los requests son permisivos en presencia de campos: la validación de
      negocio (título, precio > 0, categoría, stock) la hace el repositorio
      y devuelve TODAS las reglas violadas.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class RatingReq(BaseModel):
    rate: float = 0.0
    count: int = 0


class ProductCreateReq(BaseModel):
    title: str | None = None
    price: float | None = None
    description: str = ""
    category: str | None = None
    image: str = ""
    stock: int = 0
    tags: list[str] = Field(default_factory=list)
    brand: str | None = None
    rating: RatingReq | None = None


class ProductUpdateReq(BaseModel):
    """Solo se aplican los campos enviados (exclude_unset)."""

    title: str | None = None
    price: float | None = None
    description: str | None = None
    category: str | None = None
    image: str | None = None
    stock: int | None = None
    tags: list[str] | None = None
    brand: str | None = None
    is_active: bool | None = None


class StockAdjustReq(BaseModel):
    delta: int = Field(..., description="Positivo repone, negativo descuenta")


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class RatingRes(BaseModel):
    rate: float
    count: int


class ProductRes(BaseModel):
    id: int
    title: str
    price: float
    description: str
    category: str
    image: str
    rating: RatingRes
    stock: int
    tags: list[str]
    brand: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class StoredProductRes(BaseModel):
    """Producto del document store: id opaco (string)."""

    id: str
    title: str
    price: float
    description: str
    category: str
    image: str
    rating: RatingRes
    stock: int
    tags: list[str]
    brand: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PaginationRes(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ProductListRes(BaseModel):
    products: list[ProductRes]
    count: int
    pagination: PaginationRes | None = None


class StoredProductListRes(BaseModel):
    products: list[StoredProductRes]
    count: int


class ProductStatisticsRes(BaseModel):
    total_products: int
    total_value: float
    total_stock: int
    categories_count: dict[str, int]
    brands_count: dict[str, int]
    average_price: float
    out_of_stock: int
