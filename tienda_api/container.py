"""
===============================================================================
TARJETA CRC — tienda_api/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Construir explícitamente los repositorios y servicios de la aplicación.
  - Exponer factories para FastAPI (Depends), sobrescribibles en tests.
  - Mantener singletons de proceso con lru_cache.
  - Centralizar decisiones runtime basadas en Settings.

Colaboradores:
  - crosscutting.config.get_settings
  - infrastructure.seed_data (semillas del catálogo y usuarios)
  - infrastructure.repositories.* (implementaciones)
  - identity.auth_users (TokenService, AuthService)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - reset_container() descarta los singletons (tests).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .crosscutting.config import get_settings
from .identity.auth_users import AuthService, TokenService
from .identity.password_policy import PasswordPolicy
from .infrastructure import seed_data
from .infrastructure.repositories.in_memory.product import InMemoryProductRepository
from .infrastructure.repositories.in_memory.user import InMemoryUserRepository
from .infrastructure.repositories.postgres.document_store import (
    PostgresDocumentStore,
)
from .infrastructure.repositories.postgres.product import (
    PRODUCTS_COLLECTION,
    DocumentProductRepository,
)


@lru_cache(maxsize=1)
def get_product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository(
        seed_data.PRODUCTS,
        categories=seed_data.CATEGORIES,
        brands=seed_data.BRANDS,
    )


@lru_cache(maxsize=1)
def get_password_policy() -> PasswordPolicy:
    return PasswordPolicy.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_user_repository() -> InMemoryUserRepository:
    settings = get_settings()
    return InMemoryUserRepository(
        seed_data.USERS,
        password_policy=get_password_policy(),
        max_login_attempts=settings.max_login_attempts,
    )


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    return AuthService(get_user_repository(), get_token_service())


def get_document_product_repository() -> DocumentProductRepository | None:
    """None cuando no hay DATABASE_URL (document store deshabilitado)."""
    if not get_settings().has_document_store():
        return None
    return _document_product_repository()


@lru_cache(maxsize=1)
def _document_product_repository() -> DocumentProductRepository:
    return DocumentProductRepository(PostgresDocumentStore(PRODUCTS_COLLECTION))


def reset_container() -> None:
    for factory in (
        get_product_repository,
        get_password_policy,
        get_user_repository,
        get_token_service,
        get_auth_service,
        _document_product_repository,
    ):
        factory.cache_clear()
