"""
===============================================================================
TARJETA CRC — tienda_api/api/store_routes.py (Catálogo en document store)
===============================================================================

Responsabilidades:
  - Exponer CRUD de productos persistidos en PostgresDocumentStore.
  - Exponer búsqueda por prefijo (título / categoría) y categorías.
  - Responder 503 cuando no hay DATABASE_URL configurada.

Colaboradores:
  - container.get_document_product_repository (None = deshabilitado)
  - identity.auth_users.require_permission (escrituras)

Notas:
  - Ids opacos (string). Delete físico.
  - Filtros exactos y case-sensitive (a diferencia de /api/products).
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..container import get_document_product_repository
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, service_unavailable
from ..crosscutting.exceptions import NotFoundError, ValidationError
from ..identity.auth_users import require_permission
from ..identity.rbac import Permission
from ..infrastructure.repositories.postgres.product import (
    DocumentProductRepository,
    StoredProduct,
)
from .schemas.products import (
    ProductCreateReq,
    ProductUpdateReq,
    RatingRes,
    StoredProductListRes,
    StoredProductRes,
)

router = APIRouter(
    prefix="/api/store/products", tags=["store"], responses=OPENAPI_ERROR_RESPONSES
)

_RESOURCE = "Producto"


def document_repository() -> DocumentProductRepository:
    repo = get_document_product_repository()
    if repo is None:
        raise service_unavailable("document store")
    return repo


def _to_stored_response(product: StoredProduct) -> StoredProductRes:
    return StoredProductRes(
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


def _list_response(products: list[StoredProduct]) -> StoredProductListRes:
    return StoredProductListRes(
        products=[_to_stored_response(p) for p in products], count=len(products)
    )


@router.get("/categories", response_model=list[str])
def list_categories(repo: DocumentProductRepository = Depends(document_repository)):
    return repo.categories()


@router.get("/search", response_model=StoredProductListRes)
def search_products(
    q: str = Query(..., min_length=1),
    repo: DocumentProductRepository = Depends(document_repository),
):
    return _list_response(repo.search_products(q))


@router.get("", response_model=StoredProductListRes)
def list_products(
    category: str | None = None,
    brand: str | None = None,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = Query(None, ge=1, le=1000),
    repo: DocumentProductRepository = Depends(document_repository),
):
    return _list_response(
        repo.list_products(
            category=category,
            brand=brand,
            order_by=order_by,
            descending=descending,
            limit=limit,
        )
    )


@router.get("/{product_id}", response_model=StoredProductRes)
def get_product(
    product_id: str,
    repo: DocumentProductRepository = Depends(document_repository),
):
    product = repo.get_product(product_id)
    if product is None:
        raise NotFoundError(_RESOURCE, product_id)
    return _to_stored_response(product)


@router.post(
    "",
    response_model=StoredProductRes,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_CREATE))],
)
def create_product(
    req: ProductCreateReq,
    repo: DocumentProductRepository = Depends(document_repository),
):
    return _to_stored_response(repo.create_product(req.model_dump()))


@router.put(
    "/{product_id}",
    response_model=StoredProductRes,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_UPDATE))],
)
def update_product(
    product_id: str,
    req: ProductUpdateReq,
    repo: DocumentProductRepository = Depends(document_repository),
):
    changes = req.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("Datos de actualización inválidos", ["Sin cambios"])
    product = repo.update_product(product_id, changes)
    if product is None:
        raise NotFoundError(_RESOURCE, product_id)
    return _to_stored_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(Permission.PRODUCTS_DELETE))],
)
def delete_product(
    product_id: str,
    repo: DocumentProductRepository = Depends(document_repository),
):
    if not repo.delete_product(product_id):
        raise NotFoundError(_RESOURCE, product_id)
