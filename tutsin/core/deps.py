"""FastAPI dependencies for authentication, authorization, and storage access."""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from tutsin.core.permissions import Permission, RoleGrant
from tutsin.core.structured_logging import request_log_context
from tutsin.db.enums import PrincipalType
from tutsin.db.models import Admin, AdminRole, Client
from tutsin.services import session_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
BEARER_PREFIX = "bearer "


def get_bearer_token(request: Request) -> str | None:
    header = request.headers.get(AUTH_HEADER)
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def _require_token(request: Request) -> str:
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return token


# =============================================================================
# Clients
# =============================================================================

def get_current_client(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> Client:
    """
    Resolve the client behind a bearer token.

    Raises:
        HTTPException 401: Missing, invalid, expired or revoked token
    """
    token = _require_token(request)
    session = session_service.resolve_client_session(storage, token)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    client = storage.get_client(session.client_id)
    if client is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return client


# =============================================================================
# Admins
# =============================================================================

@dataclass
class AdminContext:
    """Signed-in admin with resolved role."""
    admin: Admin
    role: AdminRole | None
    grant: RoleGrant
    token: str

    @property
    def admin_id(self) -> str:
        return self.admin.id


def get_current_admin(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> AdminContext:
    """
    Resolve the admin behind a bearer token.

    Raises:
        HTTPException 401: Missing/invalid/expired token or inactive account
    """
    token = _require_token(request)
    session = session_service.resolve_admin_session(storage, token)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    admin = storage.get_admin(session.admin_id)
    if admin is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    if not admin.is_active:
        raise HTTPException(status_code=401, detail="Admin account is inactive")

    role = storage.get_admin_role(admin.role_id)
    return AdminContext(admin=admin, role=role, grant=RoleGrant.from_role(role), token=token)


def require_permission(permission: Permission | str):
    """
    Dependency factory: require an admin whose role grants ``permission``.

    super_admin passes every check. Evaluated before the handler body runs.

    Usage:
        @router.post("/roles", dependencies=[Depends(require_permission(Permission.MANAGE_ROLES))])
    """
    key = permission.value if isinstance(permission, Permission) else permission

    def dependency(
        request: Request,
        ctx: AdminContext = Depends(get_current_admin),
    ) -> AdminContext:
        if ctx.role is None:
            raise HTTPException(status_code=403, detail="Admin role not found")
        if not ctx.grant.allows(key):
            logger.warning(
                "Permission %s denied",
                key,
                extra=request_log_context(request, admin_id=ctx.admin_id),
            )
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return ctx

    return dependency


# =============================================================================
# Either principal (project routes)
# =============================================================================

@dataclass
class Actor:
    """Caller of a route open to both clients and admins."""
    principal: PrincipalType
    client: Client | None = None
    admin: AdminContext | None = None

    @property
    def id(self) -> str:
        if self.client is not None:
            return self.client.id
        return self.admin.admin_id

    @property
    def is_client(self) -> bool:
        return self.principal == PrincipalType.CLIENT

    @property
    def can_manage_projects(self) -> bool:
        return self.admin is not None and self.admin.grant.allows(Permission.MANAGE_PROJECTS)


def get_current_actor(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> Actor:
    """Authenticate with whichever token type was presented."""
    token = _require_token(request)
    principal = session_service.token_principal(token)
    if principal == PrincipalType.CLIENT:
        return Actor(PrincipalType.CLIENT, client=get_current_client(request, storage))
    if principal == PrincipalType.ADMIN:
        return Actor(PrincipalType.ADMIN, admin=get_current_admin(request, storage))
    raise HTTPException(status_code=401, detail="Invalid or expired session")
