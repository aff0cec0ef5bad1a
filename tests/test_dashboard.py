"""Admin dashboard stats, system health, client administration and /health."""

import pytest

from tests.conftest import bearer


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["storage"] == "memory"


@pytest.mark.asyncio
async def test_unknown_route_uses_message_body(client):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert "message" in response.json()


@pytest.mark.asyncio
async def test_dashboard_stats_counts(client, storage, super_admin_token, test_client_auth):
    storage.create_blog_post(
        {"title": "Draft", "content": "c", "excerpt": "e", "category": "SEO"}
    )
    storage.create_blog_post(
        {"title": "Live", "content": "c", "excerpt": "e", "category": "SEO", "published": True}
    )
    storage.create_project({"title": "Site", "client_id": test_client_auth.id})
    storage.create_project(
        {"title": "Old", "client_id": test_client_auth.id, "status": "completed"}
    )

    response = await client.get("/api/admin/dashboard/stats", headers=bearer(super_admin_token))

    assert response.status_code == 200
    assert response.json() == {
        "totalAdmins": 1,
        "totalRoles": 3,
        "totalClients": 1,
        "totalBlogPosts": 2,
        "publishedPosts": 1,
        "totalProjects": 2,
        "activeProjects": 1,
        "contactSubmissions": 0,
    }


@pytest.mark.asyncio
async def test_system_health(client, super_admin_token):
    response = await client.get("/api/admin/system/health", headers=bearer(super_admin_token))
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["storage"] == {"backend": "memory", "ok": True}


@pytest.mark.asyncio
async def test_admin_client_management(client, storage, super_admin_token, test_client_auth):
    listed = await client.get("/api/admin/clients", headers=bearer(super_admin_token))
    assert [c["email"] for c in listed.json()] == ["owner@tutsin.io"]
    assert "password" not in listed.json()[0]

    storage.create_project({"title": "Site", "client_id": test_client_auth.id})

    deleted = await client.delete(
        f"/api/admin/clients/{test_client_auth.id}", headers=bearer(super_admin_token)
    )
    assert deleted.status_code == 204
    assert storage.list_projects() == []

    # The client's sessions go with the account
    me = await client.get("/api/auth/me", headers=test_client_auth.headers)
    assert me.status_code == 401

    missing = await client.get(
        f"/api/admin/clients/{test_client_auth.id}", headers=bearer(super_admin_token)
    )
    assert missing.status_code == 404
