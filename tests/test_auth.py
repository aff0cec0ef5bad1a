"""Client registration, login, profile and session lifecycle."""

from datetime import timedelta

import pytest

from tests.conftest import bearer
from tutsin.core.security import create_session_token, verify_password
from tutsin.db.enums import PrincipalType
from tutsin.db.types import utcnow
from tutsin.schemas.auth import ClientRegister
from tutsin.services import auth_service, session_service


@pytest.mark.asyncio
async def test_register_returns_token_and_profile(client, storage):
    response = await client.post(
        "/api/auth/register",
        json={"firstName": "A", "lastName": "B", "email": "a@b.com", "password": "secret1"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Registration successful"
    assert body["token"]
    assert body["client"]["email"] == "a@b.com"
    assert "password" not in body["client"]

    stored = storage.get_client_by_email("a@b.com")
    assert stored.password != "secret1"
    assert verify_password("secret1", stored.password)


@pytest.mark.asyncio
async def test_register_duplicate_email_rejected(client):
    payload = {"firstName": "A", "lastName": "B", "email": "a@b.com", "password": "secret1"}
    first = await client.post("/api/auth/register", json=payload)
    assert first.status_code == 201

    second = await client.post(
        "/api/auth/register", json={**payload, "email": "A@B.com"}
    )
    assert second.status_code == 400
    assert second.json() == {"message": "Email already registered"}


@pytest.mark.asyncio
async def test_register_validation_errors_use_field_names(client):
    response = await client.post(
        "/api/auth/register",
        json={"firstName": "A", "lastName": "B", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    fields = {e["field"] for e in body["errors"]}
    assert {"email", "password"} <= fields


@pytest.mark.asyncio
async def test_login_and_me(client, test_client_auth):
    response = await client.post(
        "/api/auth/login",
        json={"email": "OWNER@tutsin.io", "password": "client-pass-1"},
    )
    assert response.status_code == 200
    token = response.json()["token"]
    assert response.json()["message"] == "Login successful"

    me = await client.get("/api/auth/me", headers=bearer(token))
    assert me.status_code == 200
    assert me.json()["client"]["id"] == test_client_auth.id


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client, test_client_auth):
    wrong_password = await client.post(
        "/api/auth/login", json={"email": "owner@tutsin.io", "password": "wrong-pass"}
    )
    unknown_email = await client.post(
        "/api/auth/login", json={"email": "nobody@tutsin.io", "password": "wrong-pass"}
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


@pytest.mark.asyncio
async def test_logout_revokes_only_that_session(client, storage, test_client_auth):
    second_token = session_service.create_client_session(storage, test_client_auth.id)

    response = await client.post("/api/auth/logout", headers=test_client_auth.headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    revoked = await client.get("/api/auth/me", headers=test_client_auth.headers)
    assert revoked.status_code == 401

    still_valid = await client.get("/api/auth/me", headers=bearer(second_token))
    assert still_valid.status_code == 200


@pytest.mark.asyncio
async def test_expired_session_row_is_rejected(client, storage, test_client_auth):
    # Valid signature, but the session row has already expired.
    expires_at = utcnow() + timedelta(hours=1)
    token = create_session_token(test_client_auth.id, PrincipalType.CLIENT, expires_at)
    storage.create_client_session(
        {
            "token_hash": session_service.hash_token(token),
            "client_id": test_client_auth.id,
            "expires_at": utcnow() - timedelta(minutes=1),
        }
    )

    response = await client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_session_row_is_rejected(client, test_client_auth):
    token = create_session_token(
        test_client_auth.id, PrincipalType.CLIENT, utcnow() + timedelta(hours=1)
    )
    response = await client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_token_cannot_reach_client_routes(client, super_admin_token):
    response = await client.get("/api/auth/me", headers=bearer(super_admin_token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_profile_rehashes_password(client, storage, test_client_auth):
    response = await client.put(
        "/api/auth/me",
        headers=test_client_auth.headers,
        json={"company": "Acme", "password": "new-secret"},
    )
    assert response.status_code == 200
    assert response.json()["client"]["company"] == "Acme"

    stored = storage.get_client(test_client_auth.id)
    assert verify_password("new-secret", stored.password)


@pytest.mark.asyncio
async def test_update_profile_rejects_taken_email(client, test_client_auth, other_client_auth):
    response = await client.put(
        "/api/auth/me",
        headers=test_client_auth.headers,
        json={"email": other_client_auth.email},
    )
    assert response.status_code == 400


def test_register_race_reports_duplicate_email(storage, monkeypatch):
    first = ClientRegister(firstName="A", lastName="B", email="race@tutsin.io", password="secret1")
    auth_service.register_client(storage, first)
    # The second request checked for the email before the first one committed.
    monkeypatch.setattr(storage, "get_client_by_email", lambda email: None)

    with pytest.raises(ValueError, match="Email already registered"):
        auth_service.register_client(storage, first)
    assert len(storage.list_clients()) == 1
