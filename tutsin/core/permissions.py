"""Admin permission catalog and role evaluation.

Every admin belongs to exactly one role. A role either carries an explicit
permission list, or is the ``super_admin`` role, which passes every check
regardless of its stored list.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class Permission(str, Enum):
    MANAGE_ADMINS = "manage_admins"
    MANAGE_ROLES = "manage_roles"
    MANAGE_CLIENTS = "manage_clients"
    MANAGE_CONTENT = "manage_content"
    MANAGE_PROJECTS = "manage_projects"
    VIEW_ANALYTICS = "view_analytics"
    SYSTEM_SETTINGS = "system_settings"


@dataclass(frozen=True)
class PermissionDef:
    """Permission definition with metadata."""
    key: str
    label: str
    description: str
    category: "PermissionCategory"


class PermissionCategory(str, Enum):
    """Permission categories for UI grouping."""
    ACCESS = "Access Control"
    CLIENTS = "Clients"
    CONTENT = "Content"
    PROJECTS = "Projects"
    ANALYTICS = "Analytics"
    SYSTEM = "System"


# =============================================================================
# Permission Registry
# =============================================================================

PERMISSION_REGISTRY: dict[str, PermissionDef] = {
    Permission.MANAGE_ADMINS.value: PermissionDef(
        "manage_admins", "Manage Admins",
        "Create, edit and remove admin accounts", PermissionCategory.ACCESS
    ),
    Permission.MANAGE_ROLES.value: PermissionDef(
        "manage_roles", "Manage Roles",
        "Create and edit admin roles and their permissions", PermissionCategory.ACCESS
    ),
    Permission.MANAGE_CLIENTS.value: PermissionDef(
        "manage_clients", "Manage Clients",
        "View and remove client accounts", PermissionCategory.CLIENTS
    ),
    Permission.MANAGE_CONTENT.value: PermissionDef(
        "manage_content", "Manage Content",
        "Edit blog posts and read contact submissions", PermissionCategory.CONTENT
    ),
    Permission.MANAGE_PROJECTS.value: PermissionDef(
        "manage_projects", "Manage Projects",
        "Create and edit projects, milestones, tasks and comments", PermissionCategory.PROJECTS
    ),
    Permission.VIEW_ANALYTICS.value: PermissionDef(
        "view_analytics", "View Analytics",
        "Access website traffic reports", PermissionCategory.ANALYTICS
    ),
    Permission.SYSTEM_SETTINGS.value: PermissionDef(
        "system_settings", "System Settings",
        "View system health and configuration", PermissionCategory.SYSTEM
    ),
}


SUPER_ADMIN_ROLE = "super_admin"

DEFAULT_ROLES: dict[str, tuple[str, list[str]]] = {
    SUPER_ADMIN_ROLE: (
        "Full system access",
        [p.value for p in Permission],
    ),
    "admin": (
        "Manages clients, content and projects",
        [
            Permission.MANAGE_CLIENTS.value,
            Permission.MANAGE_CONTENT.value,
            Permission.MANAGE_PROJECTS.value,
            Permission.VIEW_ANALYTICS.value,
        ],
    ),
    "moderator": (
        "Content moderation and analytics",
        [
            Permission.MANAGE_CONTENT.value,
            Permission.VIEW_ANALYTICS.value,
        ],
    ),
}


class RoleKind(str, Enum):
    SUPER = "super"
    STANDARD = "standard"


@dataclass(frozen=True)
class RoleGrant:
    """Resolved capabilities of a role."""
    kind: RoleKind
    permissions: frozenset[str] = frozenset()

    @classmethod
    def from_role(cls, role) -> "RoleGrant":
        if role is None:
            return cls(RoleKind.STANDARD)
        if role.name == SUPER_ADMIN_ROLE:
            return cls(RoleKind.SUPER, frozenset(role.permissions or []))
        return cls(RoleKind.STANDARD, frozenset(role.permissions or []))

    @property
    def is_super(self) -> bool:
        return self.kind == RoleKind.SUPER

    def allows(self, permission: "Permission | str") -> bool:
        if self.kind == RoleKind.SUPER:
            return True
        key = permission.value if isinstance(permission, Permission) else permission
        return key in self.permissions


# =============================================================================
# Helper Functions
# =============================================================================

def has_permission(role, permission: "Permission | str") -> bool:
    """Check a role (AdminRole or None) against a permission key."""
    return RoleGrant.from_role(role).allows(permission)


def is_valid_permission(key: str) -> bool:
    return key in PERMISSION_REGISTRY


def validate_permissions(keys: Iterable[str]) -> list[str]:
    """
    Return keys de-duplicated in input order.

    Raises:
        ValueError: If any key is not in the registry
    """
    result: list[str] = []
    for key in keys:
        if not is_valid_permission(key):
            raise ValueError(f"Unknown permission: {key}")
        if key not in result:
            result.append(key)
    return result


def get_permissions_by_category() -> dict[str, list[PermissionDef]]:
    """Group permissions by category for UI display."""
    result: dict[str, list[PermissionDef]] = {}
    for perm in PERMISSION_REGISTRY.values():
        result.setdefault(perm.category.value, []).append(perm)
    return result
