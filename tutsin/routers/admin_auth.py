"""Admin authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from tutsin.core.deps import AdminContext, get_current_admin
from tutsin.core.rate_limit import AUTH_LIMIT, limiter
from tutsin.schemas.admin import AdminLogin, AdminLoginResponse, AdminMeResponse, AdminProfile
from tutsin.schemas.common import MessageResponse
from tutsin.services import admin_service, session_service
from tutsin.services.auth_service import AuthenticationError
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter(prefix="/auth")


def _profile(admin, role) -> AdminProfile:
    return AdminProfile(
        id=admin.id,
        first_name=admin.first_name,
        last_name=admin.last_name,
        email=admin.email,
        role=role.name if role else None,
        permissions=list(role.permissions) if role else [],
        last_login_at=admin.last_login_at,
    )


@router.post("/login", response_model=AdminLoginResponse)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    data: AdminLogin,
    storage: Storage = Depends(get_storage),
):
    """Exchange admin credentials for an 8-hour bearer token."""
    try:
        admin, role, token = admin_service.login_admin(storage, data, request)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return AdminLoginResponse(
        message="Admin login successful",
        token=token,
        admin=_profile(admin, role),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    ctx: AdminContext = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    session_service.revoke_admin_session(storage, ctx.token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AdminMeResponse)
def get_me(ctx: AdminContext = Depends(get_current_admin)):
    return AdminMeResponse(admin=_profile(ctx.admin, ctx.role))
