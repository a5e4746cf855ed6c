"""
Name: User Routes Tests

Responsibilities:
  - Validate RBAC on the user directory (users.* / reports.read)
  - Validate create conflicts, soft deactivation and explicit unlock
"""

import pytest

pytestmark = pytest.mark.unit


def test_list_users_requires_permission(client, auth_headers):
    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users", headers=auth_headers("cliente1")).status_code == 403
    assert client.get("/api/users", headers=auth_headers("vendedor1")).status_code == 403


def test_manager_lists_and_filters(client, auth_headers):
    headers = auth_headers("manager1")

    everyone = client.get("/api/users", headers=headers).json()
    locked = client.get("/api/users", params={"is_locked": "true"}, headers=headers).json()

    assert everyone["count"] == 7
    assert [u["username"] for u in locked["users"]] == ["spammer"]


def test_list_unknown_sort_is_422(client, auth_headers):
    response = client.get(
        "/api/users", params={"sort_by": "edad"}, headers=auth_headers("admin")
    )
    assert response.status_code == 422


def test_search_and_get(client, auth_headers):
    headers = auth_headers("admin")

    found = client.get("/api/users/search", params={"q": "lópez"}, headers=headers).json()
    assert [u["id"] for u in found["users"]] == [5]

    assert client.get("/api/users/3", headers=headers).json()["username"] == "cliente1"
    assert client.get("/api/users/99", headers=headers).status_code == 404


def test_statistics_and_roles(client, auth_headers):
    headers = auth_headers("manager1")

    stats = client.get("/api/users/statistics", headers=headers).json()
    roles = client.get("/api/users/roles", headers=headers).json()

    assert stats["total_users"] == 7
    assert stats["locked_users"] == 1
    assert {r["name"] for r in roles} == {"admin", "manager", "seller", "user", "guest"}


def test_create_user(client, auth_headers):
    response = client.post(
        "/api/users",
        headers=auth_headers("manager1"),
        json={
            "username": "nueva_cliente",
            "email": "nueva@example.com",
            "password": "secreto1",
            "first_name": "Nueva",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 8
    assert body["role"] == "user"
    assert body["preferences"] == {
        "theme": "light",
        "language": "es",
        "notifications": True,
    }


def test_create_duplicate_is_409(client, auth_headers):
    response = client.post(
        "/api/users",
        headers=auth_headers("admin"),
        json={"username": "CLIENTE1", "email": "otro@example.com", "password": "secreto1"},
    )

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "CONFLICT"
    assert {"field": "username"} in body["errors"]


def test_update_user_and_invalid_role(client, auth_headers):
    headers = auth_headers("admin")

    ok = client.put("/api/users/3", json={"last_name": "Gómez"}, headers=headers)
    bad = client.put("/api/users/3", json={"role": "superuser"}, headers=headers)

    assert ok.status_code == 200
    assert ok.json()["full_name"] == "María Gómez"
    assert bad.status_code == 422


@pytest.mark.parametrize(
    "body",
    [{"first_name": None}, {"last_name": None}, {"is_active": None}, {"preferences": None}],
)
def test_update_user_with_null_field_is_422(client, auth_headers, body):
    headers = auth_headers("admin")
    before = client.get("/api/users/2", headers=headers).json()

    response = client.put("/api/users/2", json=body, headers=headers)

    assert response.status_code == 422
    assert client.get("/api/users/2", headers=headers).json() == before
    listed = client.get("/api/users", params={"search": "zz"}, headers=headers)
    assert listed.status_code == 200


def test_delete_deactivates(client, auth_headers):
    headers = auth_headers("admin")

    assert client.delete("/api/users/4", headers=headers).status_code == 204
    user = client.get("/api/users/4", headers=headers).json()
    assert user["is_active"] is False
    assert client.delete("/api/users/99", headers=headers).status_code == 404


def test_manager_cannot_delete(client, auth_headers):
    response = client.delete("/api/users/4", headers=auth_headers("manager1"))
    assert response.status_code == 403


def test_unlock_restores_login(client, auth_headers):
    response = client.post("/api/users/7/unlock", headers=auth_headers("admin"))

    assert response.status_code == 200
    assert response.json()["is_locked"] is False
    assert response.json()["login_attempts"] == 0

    login = client.post("/auth/login", json={"username": "spammer", "password": "blocked"})
    assert login.status_code == 200
