"""Admin service - admin login, account management and role management."""

import logging

from fastapi import Request

from tutsin.core.permissions import SUPER_ADMIN_ROLE, validate_permissions
from tutsin.core.security import hash_password, hash_password_once, verify_password
from tutsin.db.models import Admin, AdminRole
from tutsin.db.types import utcnow
from tutsin.schemas.admin import AdminCreate, AdminLogin, AdminUpdate, RoleCreate, RoleUpdate
from tutsin.services import session_service
from tutsin.services.auth_service import AuthenticationError, normalize_email
from tutsin.storage.base import Storage, StorageConflictError

logger = logging.getLogger(__name__)

INVALID_ADMIN_CREDENTIALS = "Invalid admin credentials"


# =============================================================================
# Login
# =============================================================================

def login_admin(
    storage: Storage,
    data: AdminLogin,
    request: Request | None = None,
) -> tuple[Admin, AdminRole | None, str]:
    """
    Verify admin credentials, stamp last login and open an 8h session.

    Unknown email, inactive account and wrong password are indistinguishable
    to the caller.

    Raises:
        AuthenticationError: If the login is rejected
    """
    admin = storage.get_admin_by_email(normalize_email(data.email))
    if admin is None or not admin.is_active or not verify_password(data.password, admin.password):
        logger.warning(
            "Rejected admin login (ip: %s)",
            session_service.mask_ip(session_service.get_client_ip(request)),
        )
        raise AuthenticationError(INVALID_ADMIN_CREDENTIALS)

    admin = storage.update_admin(admin.id, {"last_login_at": utcnow()}) or admin
    token = session_service.create_admin_session(storage, admin.id, request)
    role = storage.get_admin_role(admin.role_id)
    return admin, role, token


# =============================================================================
# Admin accounts
# =============================================================================

def _require_role(storage: Storage, role_id: str) -> AdminRole:
    role = storage.get_admin_role(role_id)
    if role is None:
        raise ValueError("Admin role not found")
    return role


def create_admin(storage: Storage, data: AdminCreate) -> Admin:
    """
    Raises:
        ValueError: Duplicate email or unknown role
    """
    email = normalize_email(data.email)
    if storage.get_admin_by_email(email) is not None:
        raise ValueError("Admin email already exists")
    _require_role(storage, data.role_id)

    fields = data.model_dump()
    fields["email"] = email
    fields["password"] = hash_password(data.password)
    try:
        admin = storage.create_admin(fields)
    except StorageConflictError as exc:
        raise ValueError("Admin email already exists") from exc
    logger.info("Created admin %s", admin.id)
    return admin


def update_admin(storage: Storage, admin_id: str, data: AdminUpdate) -> Admin | None:
    """
    Partial update. Returns None when the admin does not exist.

    Raises:
        ValueError: Duplicate email or unknown role
    """
    if storage.get_admin(admin_id) is None:
        return None

    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])
        existing = storage.get_admin_by_email(changes["email"])
        if existing is not None and existing.id != admin_id:
            raise ValueError("Admin email already exists")
    if "role_id" in changes:
        _require_role(storage, changes["role_id"])
    if "password" in changes:
        changes["password"] = hash_password_once(changes["password"])

    try:
        return storage.update_admin(admin_id, changes)
    except StorageConflictError as exc:
        raise ValueError("Admin email already exists") from exc


def delete_admin(storage: Storage, admin_id: str, acting_admin_id: str) -> bool:
    """
    Raises:
        ValueError: If an admin tries to delete their own account
    """
    if admin_id == acting_admin_id:
        raise ValueError("Cannot delete your own admin account")
    deleted = storage.delete_admin(admin_id)
    if deleted:
        logger.info("Admin %s deleted admin %s", acting_admin_id, admin_id)
    return deleted


# =============================================================================
# Roles
# =============================================================================

def create_role(storage: Storage, data: RoleCreate) -> AdminRole:
    """
    Raises:
        ValueError: Duplicate name or unknown permission
    """
    if storage.get_admin_role_by_name(data.name) is not None:
        raise ValueError("Role name already exists")
    permissions = validate_permissions(data.permissions)
    try:
        return storage.create_admin_role(
            {"name": data.name, "description": data.description, "permissions": permissions}
        )
    except StorageConflictError as exc:
        raise ValueError("Role name already exists") from exc


def update_role(storage: Storage, role_id: str, data: RoleUpdate) -> AdminRole | None:
    """
    Partial update. The super_admin role keeps its name and permissions.

    Raises:
        ValueError: Renaming/re-permissioning super_admin, duplicate name,
            unknown permission
    """
    role = storage.get_admin_role(role_id)
    if role is None:
        return None

    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if role.name == SUPER_ADMIN_ROLE:
        if changes.get("name", SUPER_ADMIN_ROLE) != SUPER_ADMIN_ROLE or "permissions" in changes:
            raise ValueError("The super_admin role cannot be renamed or re-permissioned")
    if "name" in changes and changes["name"] != role.name:
        if storage.get_admin_role_by_name(changes["name"]) is not None:
            raise ValueError("Role name already exists")
    if "permissions" in changes:
        changes["permissions"] = validate_permissions(changes["permissions"])

    try:
        return storage.update_admin_role(role_id, changes)
    except StorageConflictError as exc:
        raise ValueError("Role name already exists") from exc


def delete_role(storage: Storage, role_id: str) -> bool:
    """
    Raises:
        ValueError: Deleting super_admin, or a role still assigned to admins
    """
    role = storage.get_admin_role(role_id)
    if role is None:
        return False
    if role.name == SUPER_ADMIN_ROLE:
        raise ValueError("The super_admin role cannot be deleted")
    if storage.count_admins_with_role(role_id) > 0:
        raise ValueError("Cannot delete role that is assigned to admins")
    return storage.delete_admin_role(role_id)
