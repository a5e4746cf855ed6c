"""
===============================================================================
TARJETA CRC — tienda_api/api/product_routes.py (Catálogo in-memory)
===============================================================================

Responsabilidades:
  - Exponer listado con filtros / orden / paginado sobre InMemoryProductRepository.
  - Exponer CRUD (delete = soft delete) y ajuste atómico de stock.
  - Exponer búsqueda, categoría, catálogos (categorías, marcas) y estadísticas.

Colaboradores:
  - container.get_product_repository
  - identity.auth_users.require_permission (escrituras)
  - schemas.products (DTOs)

Notas:
  - Lecturas públicas; escrituras exigen products.create / update / delete.
  - Los query params numéricos llegan como texto: lo no numérico se
    rechaza con ValidationError junto con el resto de los filtros.
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from ..container import get_product_repository
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.exceptions import NotFoundError, ValidationError
from ..domain.entities import ProductStatistics, PublicProduct, parse_price
from ..domain.query import ProductPage, ProductQuery
from ..identity.auth_users import require_permission
from ..identity.rbac import Permission
from ..infrastructure.repositories.in_memory.product import InMemoryProductRepository
from .schemas.products import (
    PaginationRes,
    ProductCreateReq,
    ProductListRes,
    ProductRes,
    ProductStatisticsRes,
    ProductUpdateReq,
    RatingRes,
    StockAdjustReq,
)

router = APIRouter(
    prefix="/api/products", tags=["products"], responses=OPENAPI_ERROR_RESPONSES
)

_RESOURCE = "Producto"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _to_product_response(product: PublicProduct) -> ProductRes:
    return ProductRes(
        id=product.id,
        title=product.title,
        price=product.price,
        description=product.description,
        category=product.category,
        image=product.image,
        rating=RatingRes(rate=product.rating.rate, count=product.rating.count),
        stock=product.stock,
        tags=list(product.tags),
        brand=product.brand,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _to_list_response(result: list[PublicProduct] | ProductPage) -> ProductListRes:
    if isinstance(result, ProductPage):
        p = result.pagination
        return ProductListRes(
            products=[_to_product_response(x) for x in result.products],
            count=len(result.products),
            pagination=PaginationRes(
                page=p.page, limit=p.limit, total=p.total, total_pages=p.total_pages
            ),
        )
    return ProductListRes(
        products=[_to_product_response(x) for x in result], count=len(result)
    )


def _to_statistics_response(stats: ProductStatistics) -> ProductStatisticsRes:
    return ProductStatisticsRes(
        total_products=stats.total_products,
        total_value=stats.total_value,
        total_stock=stats.total_stock,
        categories_count=stats.categories_count,
        brands_count=stats.brands_count,
        average_price=stats.average_price,
        out_of_stock=stats.out_of_stock,
    )


def _number_param(raw: str | None) -> float | None:
    return None if raw is None else parse_price(raw)


def _int_param(raw: str | None) -> Any:
    """int si el texto es entero; si no, el texto crudo (lo rechaza validate())."""
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


# -----------------------------------------------------------------------------
# Lecturas
# -----------------------------------------------------------------------------
# R: Rutas fijas antes de /{product_id}.


@router.get("/categories", response_model=list[str])
def list_categories(
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return products.categories()


@router.get("/brands", response_model=list[str])
def list_brands(
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return products.brands()


@router.get("/statistics", response_model=ProductStatisticsRes)
def product_statistics(
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return _to_statistics_response(products.statistics())


@router.get("/search", response_model=ProductListRes)
def search_products(
    q: str = Query(..., min_length=1),
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return _to_list_response(products.search_products(q))


@router.get("/category/{category}", response_model=ProductListRes)
def list_by_category(
    category: str,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return _to_list_response(products.list_by_category(category))


@router.get("", response_model=ProductListRes)
def list_products(
    category: str | None = None,
    brand: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    in_stock: bool | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    query = ProductQuery(
        category=category,
        brand=brand,
        min_price=_number_param(min_price),
        max_price=_number_param(max_price),
        in_stock=in_stock,
        search=search,
        sort_by=sort_by,
        page=_int_param(page),
        limit=_int_param(limit),
    )
    return _to_list_response(products.list_products(query))


@router.get("/{product_id}", response_model=ProductRes)
def get_product(
    product_id: int,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    product = products.get_product(product_id)
    if product is None:
        raise NotFoundError(_RESOURCE, product_id)
    return _to_product_response(product)


# -----------------------------------------------------------------------------
# Mutaciones
# -----------------------------------------------------------------------------


@router.post(
    "",
    response_model=ProductRes,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_CREATE))],
)
def create_product(
    req: ProductCreateReq,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    return _to_product_response(products.create_product(req.model_dump()))


@router.put(
    "/{product_id}",
    response_model=ProductRes,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_UPDATE))],
)
def update_product(
    product_id: int,
    req: ProductUpdateReq,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    changes = req.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("Datos de actualización inválidos", ["Sin cambios"])
    product = products.update_product(product_id, changes)
    if product is None:
        raise NotFoundError(_RESOURCE, product_id)
    return _to_product_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_DELETE))],
)
def delete_product(
    product_id: int,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    if not products.soft_delete_product(product_id):
        raise NotFoundError(_RESOURCE, product_id)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductRes,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_UPDATE))],
)
def adjust_stock(
    product_id: int,
    req: StockAdjustReq,
    products: InMemoryProductRepository = Depends(get_product_repository),
):
    product = products.adjust_stock(product_id, req.delta)
    if product is None:
        raise NotFoundError(_RESOURCE, product_id)
    return _to_product_response(product)
