"""Admin login, logout and profile."""

import pytest

from tests.conftest import bearer
from tutsin.core.permissions import Permission
from tutsin.storage.seed import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD


@pytest.mark.asyncio
async def test_admin_login_returns_profile_with_permissions(client, storage):
    response = await client.post(
        "/api/admin/auth/login",
        json={"email": DEFAULT_ADMIN_EMAIL, "password": DEFAULT_ADMIN_PASSWORD},
        headers={"User-Agent": "pytest-agent"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Admin login successful"
    assert body["admin"]["role"] == "super_admin"
    assert set(body["admin"]["permissions"]) == {p.value for p in Permission}
    assert body["admin"]["lastLoginAt"] is not None

    admin = storage.get_admin_by_email(DEFAULT_ADMIN_EMAIL)
    assert admin.last_login_at is not None


@pytest.mark.asyncio
async def test_admin_login_records_user_agent(client, storage):
    response = await client.post(
        "/api/admin/auth/login",
        json={"email": DEFAULT_ADMIN_EMAIL, "password": DEFAULT_ADMIN_PASSWORD},
        headers={"User-Agent": "pytest-agent"},
    )
    from tutsin.services.session_service import hash_token

    session = storage.get_admin_session(hash_token(response.json()["token"]))
    assert session.user_agent == "pytest-agent"


@pytest.mark.asyncio
async def test_admin_login_wrong_password(client):
    response = await client.post(
        "/api/admin/auth/login",
        json={"email": DEFAULT_ADMIN_EMAIL, "password": "not-it"},
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid admin credentials"}


@pytest.mark.asyncio
async def test_inactive_admin_cannot_login(client, storage):
    admin = storage.get_admin_by_email(DEFAULT_ADMIN_EMAIL)
    storage.update_admin(admin.id, {"is_active": False})

    response = await client.post(
        "/api/admin/auth/login",
        json={"email": DEFAULT_ADMIN_EMAIL, "password": DEFAULT_ADMIN_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid admin credentials"}


@pytest.mark.asyncio
async def test_deactivated_admin_token_stops_working(client, storage, super_admin_token):
    admin = storage.get_admin_by_email(DEFAULT_ADMIN_EMAIL)
    storage.update_admin(admin.id, {"is_active": False})

    response = await client.get("/api/admin/auth/me", headers=bearer(super_admin_token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_me_and_logout(client, super_admin_token):
    me = await client.get("/api/admin/auth/me", headers=bearer(super_admin_token))
    assert me.status_code == 200
    assert me.json()["admin"]["email"] == DEFAULT_ADMIN_EMAIL

    logout = await client.post("/api/admin/auth/logout", headers=bearer(super_admin_token))
    assert logout.status_code == 200

    after = await client.get("/api/admin/auth/me", headers=bearer(super_admin_token))
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_client_token_cannot_reach_admin_routes(client, test_client_auth):
    response = await client.get("/api/admin/auth/me", headers=test_client_auth.headers)
    assert response.status_code == 401
