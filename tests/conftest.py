"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (no .env, APP_ENV=test)
  - Provide fresh repository instances per test (no shared global state)
  - Provide a controllable clock and a fast Argon2 hasher

Notes:
  - Fixtures are auto-discovered by pytest
  - Repositories are function-scoped for per-test isolation
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from argon2 import PasswordHasher

from tienda_api.crosscutting import config as app_config

app_config.Settings.model_config["env_file"] = None
os.environ.setdefault("APP_ENV", "test")

from tienda_api.identity.auth_users import AuthService, TokenService  # noqa: E402
from tienda_api.identity.password_policy import PasswordPolicy  # noqa: E402
from tienda_api.infrastructure import seed_data  # noqa: E402
from tienda_api.infrastructure.repositories.in_memory.product import (  # noqa: E402
    InMemoryProductRepository,
)
from tienda_api.infrastructure.repositories.in_memory.user import (  # noqa: E402
    InMemoryUserRepository,
)

TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"
TEST_ISSUER = "tienda-test"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


class FixedClock:
    """Reloj controlable: devuelve siempre `now` hasta que se avanza."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture(scope="session")
def fast_hasher() -> PasswordHasher:
    """R: Argon2 con parámetros mínimos (solo tests)."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def product_repo(clock) -> InMemoryProductRepository:
    return InMemoryProductRepository(
        seed_data.PRODUCTS,
        categories=seed_data.CATEGORIES,
        brands=seed_data.BRANDS,
        clock=clock,
    )


@pytest.fixture
def user_repo(clock, fast_hasher) -> InMemoryUserRepository:
    return InMemoryUserRepository(
        seed_data.USERS,
        password_hasher=fast_hasher,
        password_policy=PasswordPolicy(),
        max_login_attempts=5,
        clock=clock,
    )


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_JWT_SECRET, ttl_minutes=30, issuer=TEST_ISSUER)


@pytest.fixture
def auth_service(user_repo, token_service) -> AuthService:
    return AuthService(user_repo, token_service)
