"""
Name: API Test Fixtures

Responsibilities:
  - Build the real application (create_app) with per-test repositories
  - Provide bearer headers for the seeded users

Notes:
  - TestClient is used without a `with` block: lifespan (pool) never runs
"""

import pytest
from fastapi.testclient import TestClient

from tienda_api.api.main import create_app
from tienda_api.container import get_product_repository, get_user_repository
from tienda_api.identity.auth_users import auth_service_dependency

SEED_PASSWORDS = {
    "admin": "admin123",
    "vendedor1": "vend123",
    "cliente1": "cli123",
    "manager1": "manager789",
}


@pytest.fixture
def app(product_repo, user_repo, auth_service):
    app = create_app()
    app.dependency_overrides[get_product_repository] = lambda: product_repo
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[auth_service_dependency] = lambda: auth_service
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers(auth_service):
    """auth_headers("admin") -> {"Authorization": "Bearer ..."}"""

    def _headers(username: str) -> dict[str, str]:
        result = auth_service.authenticate(username, SEED_PASSWORDS[username])
        return {"Authorization": f"Bearer {result.access_token}"}

    return _headers
