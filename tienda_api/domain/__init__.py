"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (catálogo + motor de consultas)

Reglas:
    - Solo re-exporta entidades y funciones puras del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import (
    Product,
    ProductStatistics,
    PublicProduct,
    Rating,
    to_public_product,
    validate_product,
)
from .query import (
    Pagination,
    ProductPage,
    ProductQuery,
    ProductSort,
    UserQuery,
    UserSort,
    filter_products,
    filter_users,
    paginate,
    sort_products,
    sort_users,
)

__all__ = [
    "Product",
    "ProductStatistics",
    "PublicProduct",
    "Rating",
    "to_public_product",
    "validate_product",
    "Pagination",
    "ProductPage",
    "ProductQuery",
    "ProductSort",
    "UserQuery",
    "UserSort",
    "filter_products",
    "filter_users",
    "paginate",
    "sort_products",
    "sort_users",
]
