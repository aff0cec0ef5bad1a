"""Client authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from tutsin.core.deps import get_bearer_token, get_current_client
from tutsin.core.rate_limit import AUTH_LIMIT, limiter
from tutsin.db.models import Client
from tutsin.schemas.auth import (
    ClientAuthResponse,
    ClientLogin,
    ClientMeResponse,
    ClientProfileUpdate,
    ClientRead,
    ClientRegister,
)
from tutsin.schemas.common import MessageResponse
from tutsin.services import auth_service, session_service
from tutsin.services.auth_service import AuthenticationError
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()


@router.post("/register", response_model=ClientAuthResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
def register(
    request: Request,
    data: ClientRegister,
    storage: Storage = Depends(get_storage),
):
    """Create a client account and return a session token."""
    try:
        client, token = auth_service.register_client(storage, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClientAuthResponse(
        message="Registration successful",
        token=token,
        client=ClientRead.model_validate(client),
    )


@router.post("/login", response_model=ClientAuthResponse)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    data: ClientLogin,
    storage: Storage = Depends(get_storage),
):
    try:
        client, token = auth_service.login_client(storage, data)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return ClientAuthResponse(
        message="Login successful",
        token=token,
        client=ClientRead.model_validate(client),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    client: Client = Depends(get_current_client),
    storage: Storage = Depends(get_storage),
):
    """Revoke the presented token's session."""
    session_service.revoke_client_session(storage, get_bearer_token(request))
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=ClientMeResponse)
def get_me(client: Client = Depends(get_current_client)):
    return ClientMeResponse(client=ClientRead.model_validate(client))


@router.put("/me", response_model=ClientMeResponse)
def update_me(
    data: ClientProfileUpdate,
    client: Client = Depends(get_current_client),
    storage: Storage = Depends(get_storage),
):
    try:
        updated = auth_service.update_client_profile(storage, client, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClientMeResponse(client=ClientRead.model_validate(updated))
