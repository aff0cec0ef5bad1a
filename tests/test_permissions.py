"""Role evaluation and permission enforcement across admin routes."""

from types import SimpleNamespace

import pytest

from tests.conftest import bearer
from tutsin.core.permissions import (
    DEFAULT_ROLES,
    PERMISSION_REGISTRY,
    Permission,
    RoleGrant,
    get_permissions_by_category,
    has_permission,
    validate_permissions,
)


def _role(name, permissions):
    return SimpleNamespace(name=name, permissions=permissions)


def test_super_admin_passes_every_check_regardless_of_stored_list():
    grant = RoleGrant.from_role(_role("super_admin", []))
    assert grant.is_super
    assert all(grant.allows(p) for p in Permission)


def test_standard_role_allows_only_listed_permissions():
    role = _role("editor", ["manage_content"])
    assert has_permission(role, Permission.MANAGE_CONTENT)
    assert has_permission(role, "manage_content")
    assert not has_permission(role, Permission.MANAGE_ROLES)


def test_missing_role_allows_nothing():
    assert not has_permission(None, Permission.VIEW_ANALYTICS)


def test_validate_permissions_dedupes_in_order():
    assert validate_permissions(["view_analytics", "manage_content", "view_analytics"]) == [
        "view_analytics",
        "manage_content",
    ]


def test_validate_permissions_rejects_unknown_key():
    with pytest.raises(ValueError, match="Unknown permission: delete_everything"):
        validate_permissions(["delete_everything"])


def test_default_roles_only_use_registered_permissions():
    for _, permissions in DEFAULT_ROLES.values():
        assert set(permissions) <= set(PERMISSION_REGISTRY)


def test_permissions_grouped_by_category():
    groups = get_permissions_by_category()
    assert sum(len(v) for v in groups.values()) == len(PERMISSION_REGISTRY)
    assert {p.key for p in groups["Access Control"]} == {"manage_admins", "manage_roles"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path,expected",
    [
        ("get", "/api/admin/blog/posts", 200),
        ("get", "/api/admin/contact", 200),
        ("get", "/api/admin/analytics/overview", 200),
        ("get", "/api/admin/dashboard/stats", 200),
        ("get", "/api/admin/clients", 403),
        ("get", "/api/admin/admins", 403),
        ("get", "/api/admin/system/health", 403),
        ("post", "/api/admin/roles", 403),
    ],
)
async def test_moderator_route_access(client, moderator_token, method, path, expected):
    kwargs = {"headers": bearer(moderator_token)}
    if method == "post":
        kwargs["json"] = {"name": "x", "permissions": []}
    response = await getattr(client, method)(path, **kwargs)
    assert response.status_code == expected


@pytest.mark.asyncio
async def test_admin_routes_require_token(client):
    response = await client.get("/api/admin/dashboard/stats")
    assert response.status_code == 401
