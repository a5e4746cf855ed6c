"""
Name: Auth Routes Tests

Responsibilities:
  - Validate login success/failure over HTTP (401 problem+json with reason)
  - Ensure /auth/me and /auth/verify require a valid token
  - Validate password change status codes
"""

import pytest

pytestmark = pytest.mark.unit


def _reasons(body: dict) -> list[str]:
    return [e["reason"] for e in body.get("errors", []) if "reason" in e]


def test_login_ok(client):
    response = client.post(
        "/auth/login", json={"username": "admin", "password": "admin123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 30 * 60
    assert body["user"]["username"] == "admin"
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


def test_login_with_email(client):
    response = client.post(
        "/auth/login", json={"username": " Vendedor1@tienda.com ", "password": "vend123"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["id"] == 2


def test_login_wrong_password_is_problem_json(client):
    response = client.post(
        "/auth/login", json={"username": "admin", "password": "incorrecta"}
    )

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.headers["www-authenticate"] == "Bearer"
    body = response.json()
    assert body["code"] == "UNAUTHORIZED"
    assert body["detail"] == "Credenciales inválidas"
    assert _reasons(body) == ["INVALID_CREDENTIALS"]
    assert any("request_id" in e for e in body["errors"])


def test_unknown_user_gets_same_reason(client):
    response = client.post(
        "/auth/login", json={"username": "fantasma", "password": "x"}
    )
    assert response.status_code == 401
    assert _reasons(response.json()) == ["INVALID_CREDENTIALS"]


def test_locked_and_inactive_accounts(client):
    locked = client.post("/auth/login", json={"username": "spammer", "password": "blocked"})
    inactive = client.post(
        "/auth/login", json={"username": "cliente3", "password": "clave123"}
    )
    assert _reasons(locked.json()) == ["ACCOUNT_LOCKED"]
    assert _reasons(inactive.json()) == ["ACCOUNT_INACTIVE"]


def test_lockout_over_http(client, user_repo):
    for _ in range(5):
        client.post("/auth/login", json={"username": "cliente2", "password": "mal"})

    response = client.post(
        "/auth/login", json={"username": "cliente2", "password": "cliente456"}
    )
    assert response.status_code == 401
    assert _reasons(response.json()) == ["ACCOUNT_LOCKED"]
    assert user_repo.get_user(4).is_locked is True


def test_login_requires_both_fields(client):
    response = client.post("/auth/login", json={"username": "admin"})
    assert response.status_code == 422


def test_me_requires_token(client):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert _reasons(response.json()) == ["TOKEN_MISSING"]


def test_me_rejects_garbage_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert _reasons(response.json()) == ["TOKEN_INVALID"]


def test_me_and_verify_with_token(client, auth_headers):
    headers = auth_headers("cliente1")

    me = client.get("/auth/me", headers=headers)
    verify = client.get("/auth/verify", headers=headers)

    assert me.status_code == 200
    assert me.json()["full_name"] == "María González"
    assert verify.status_code == 200
    assert verify.json()["token_valid"] is True
    assert verify.json()["user"]["id"] == 3


def test_change_password_flow(client, auth_headers):
    response = client.post(
        "/auth/change-password",
        headers=auth_headers("cliente1"),
        json={"current_password": "cli123", "new_password": "nueva123"},
    )
    assert response.status_code == 204

    login = client.post(
        "/auth/login", json={"username": "cliente1", "password": "nueva123"}
    )
    assert login.status_code == 200


def test_change_password_wrong_current(client, auth_headers):
    response = client.post(
        "/auth/change-password",
        headers=auth_headers("cliente1"),
        json={"current_password": "otra", "new_password": "nueva123"},
    )
    assert response.status_code == 401


def test_change_password_policy_violation(client, auth_headers):
    response = client.post(
        "/auth/change-password",
        headers=auth_headers("cliente1"),
        json={"current_password": "cli123", "new_password": "123"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "PASSWORD_POLICY_VIOLATION"
    assert {"msg": "La contraseña debe tener al menos 6 caracteres"} in body["errors"]
