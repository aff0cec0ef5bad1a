"""
Test configuration and fixtures.

Provides:
- Fresh in-memory storage per test
- Client and admin bearer tokens
- HTTPX AsyncClient wired to the app with the storage override
"""
import os
from dataclasses import dataclass
from typing import AsyncGenerator

# Settings are read at import time, so configure before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SENTRY_DSN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from tutsin.core.config import settings
from tutsin.main import app
from tutsin.schemas.auth import ClientRegister
from tutsin.services import auth_service
from tutsin.storage import get_storage
from tutsin.storage.memory import MemStorage
from tutsin.storage.seed import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD, seed_defaults

ADMIN_PASSWORD = "admin-pass-123"


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def storage() -> MemStorage:
    """Empty storage with the default roles and bootstrap super admin."""
    store = MemStorage()
    seed_defaults(store)
    return store


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep uploaded files inside the test's tmp dir."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class ClientAuth:
    """Registered client plus a live session token."""
    id: str
    email: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return bearer(self.token)


def register_client(storage: MemStorage, email: str, first_name: str = "Test") -> ClientAuth:
    client, token = auth_service.register_client(
        storage,
        ClientRegister(
            first_name=first_name,
            last_name="Client",
            email=email,
            password="client-pass-1",
        ),
    )
    return ClientAuth(id=client.id, email=client.email, token=token)


@pytest.fixture(scope="function")
def test_client_auth(storage: MemStorage) -> ClientAuth:
    return register_client(storage, "owner@tutsin.io", first_name="Owner")


@pytest.fixture(scope="function")
def other_client_auth(storage: MemStorage) -> ClientAuth:
    return register_client(storage, "other@tutsin.io", first_name="Other")


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(storage: MemStorage) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient bound to the test storage."""
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


async def admin_login(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post(
        "/api/admin/auth/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture(scope="function")
async def super_admin_token(client: AsyncClient) -> str:
    return await admin_login(client, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD)


async def create_admin_with_role(
    client: AsyncClient,
    super_token: str,
    role_name: str,
    email: str,
) -> str:
    """Create an admin with an existing role and return their token."""
    roles = (await client.get("/api/admin/roles", headers=bearer(super_token))).json()
    role_id = next(r["id"] for r in roles if r["name"] == role_name)
    response = await client.post(
        "/api/admin/admins",
        headers=bearer(super_token),
        json={
            "firstName": "Limited",
            "lastName": "Admin",
            "email": email,
            "password": ADMIN_PASSWORD,
            "roleId": role_id,
        },
    )
    assert response.status_code == 201, response.text
    return await admin_login(client, email, ADMIN_PASSWORD)


@pytest.fixture(scope="function")
async def moderator_token(client: AsyncClient, super_admin_token: str) -> str:
    """Admin with manage_content + view_analytics only."""
    return await create_admin_with_role(
        client, super_admin_token, "moderator", "moderator@tutsin.io"
    )
