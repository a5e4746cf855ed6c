"""
===============================================================================
TARJETA CRC — domain/query.py
===============================================================================

Módulo:
    Motor de consultas in-memory (filtro + orden + paginación)

Responsabilidades:
    - Definir las especificaciones de filtro tipadas (ProductQuery, UserQuery).
    - Aplicar predicados en conjunción (AND); una clave ausente no restringe.
    - Ordenar de forma estable por las claves soportadas.
    - Paginar con metadata (page, limit, total, total_pages).

Colaboradores:
    - infrastructure/repositories/in_memory: producto y usuario.
    - api: construye ProductQuery / UserQuery desde query params.

Reglas:
    - Las funciones de filtro/orden/paginado NO lanzan excepciones;
      validate() devuelve las violaciones y el repositorio las reporta.
    - Sin clave de orden se preserva el orden natural (inserción).
===============================================================================
"""

from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Sequence, TypeVar

if TYPE_CHECKING:
    from ..identity.users import User
    from .entities import Product, PublicProduct

T = TypeVar("T")


class ProductSort(str, Enum):
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    RATING = "rating"
    NEWEST = "newest"


class UserSort(str, Enum):
    USERNAME = "username"
    EMAIL = "email"
    ROLE = "role"
    CREATED = "created"
    LAST_LOGIN = "last_login"


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def collation_key(value: str) -> tuple[str, str]:
    """
    Clave de comparación "locale-aware": sin acentos y case-folded.
    El string original desempata para que el orden sea total.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), value)


# ---------------------------------------------------------------------------
# Especificaciones de filtro
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProductQuery:
    """Filtro de productos. Todos los campos son opcionales."""

    category: str | None = None
    brand: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool | None = None
    search: str | None = None
    sort_by: str | None = None
    page: int | None = None
    limit: int | None = None

    @property
    def wants_pagination(self) -> bool:
        return self.page is not None and self.limit is not None

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.min_price is not None and not _is_number(self.min_price):
            errors.append("min_price debe ser numérico")
        if self.max_price is not None and not _is_number(self.max_price):
            errors.append("max_price debe ser numérico")
        if self.sort_by is not None and self.sort_by not in {
            s.value for s in ProductSort
        }:
            errors.append(f"sort_by desconocido: {self.sort_by}")
        if self.page is not None and (not _is_int(self.page) or self.page < 1):
            errors.append("page debe ser un entero >= 1")
        if self.limit is not None and (not _is_int(self.limit) or self.limit <= 0):
            errors.append("limit debe ser un entero > 0")
        return errors


@dataclass(frozen=True, slots=True)
class UserQuery:
    """Filtro de usuarios. Inactivos y bloqueados se incluyen salvo filtro explícito."""

    role: str | None = None
    is_active: bool | None = None
    is_locked: bool | None = None
    search: str | None = None
    sort_by: str | None = None

    def validate(self) -> list[str]:
        if self.sort_by is not None and self.sort_by not in {s.value for s in UserSort}:
            return [f"sort_by desconocido: {self.sort_by}"]
        return []


# ---------------------------------------------------------------------------
# Paginación
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class ProductPage:
    products: list[PublicProduct]
    pagination: Pagination


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], Pagination]:
    """
    Devuelve el slice [(page-1)*limit, page*limit) y su metadata.
    Una página fuera de rango produce un slice vacío, no un error.
    """
    start = (page - 1) * limit
    total = len(items)
    return list(items[start : start + limit]), Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )


# ---------------------------------------------------------------------------
# Productos
# ---------------------------------------------------------------------------


def _product_matches_text(product: Product, term: str) -> bool:
    return (
        term in product.title.lower()
        or term in product.description.lower()
        or any(term in tag.lower() for tag in product.tags)
    )


def filter_products(products: Iterable[Product], query: ProductQuery) -> list[Product]:
    """Conjunción de predicados presentes en `query` (no filtra por is_active)."""
    result = list(products)

    if query.category:
        category = query.category.lower()
        result = [p for p in result if p.category.lower() == category]

    if query.brand:
        brand = query.brand.lower()
        result = [p for p in result if p.brand and p.brand.lower() == brand]

    if query.min_price is not None:
        result = [p for p in result if p.price >= query.min_price]

    if query.max_price is not None:
        result = [p for p in result if p.price <= query.max_price]

    if query.in_stock:
        result = [p for p in result if p.stock > 0]

    if query.search:
        term = query.search.lower()
        result = [p for p in result if _product_matches_text(p, term)]

    return result


def sort_products(products: list[Product], sort_by: str | None) -> list[Product]:
    if sort_by is None:
        return list(products)

    if sort_by == ProductSort.PRICE_ASC:
        return sorted(products, key=lambda p: p.price)
    if sort_by == ProductSort.PRICE_DESC:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort_by == ProductSort.NAME_ASC:
        return sorted(products, key=lambda p: collation_key(p.title))
    if sort_by == ProductSort.NAME_DESC:
        return sorted(products, key=lambda p: collation_key(p.title), reverse=True)
    if sort_by == ProductSort.RATING:
        return sorted(products, key=lambda p: p.rating.rate, reverse=True)
    if sort_by == ProductSort.NEWEST:
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    return list(products)


# ---------------------------------------------------------------------------
# Usuarios
# ---------------------------------------------------------------------------


def user_matches_text(user: User, term: str) -> bool:
    term = term.lower()
    return (
        term in user.username.lower()
        or term in user.email.lower()
        or term in user.first_name.lower()
        or term in user.last_name.lower()
    )


def filter_users(users: Iterable[User], query: UserQuery) -> list[User]:
    result = list(users)

    if query.role:
        result = [u for u in result if u.role == query.role]

    if query.is_active is not None:
        result = [u for u in result if u.is_active == query.is_active]

    if query.is_locked is not None:
        result = [u for u in result if u.is_locked == query.is_locked]

    if query.search:
        result = [u for u in result if user_matches_text(u, query.search)]

    return result


def _last_login_key(user: User) -> tuple[bool, float]:
    # Sin login van al final; entre ellos se conserva el orden relativo.
    if user.last_login is None:
        return (True, 0.0)
    return (False, -user.last_login.timestamp())


def sort_users(users: list[User], sort_by: str | None) -> list[User]:
    if sort_by is None:
        return list(users)

    if sort_by == UserSort.USERNAME:
        return sorted(users, key=lambda u: collation_key(u.username))
    if sort_by == UserSort.EMAIL:
        return sorted(users, key=lambda u: collation_key(u.email))
    if sort_by == UserSort.ROLE:
        return sorted(users, key=lambda u: collation_key(u.role))
    if sort_by == UserSort.CREATED:
        return sorted(users, key=lambda u: u.created_at, reverse=True)
    if sort_by == UserSort.LAST_LOGIN:
        return sorted(users, key=_last_login_key)

    return list(users)
