"""Client account administration (manage_clients)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from tutsin.core.deps import AdminContext, require_permission
from tutsin.core.permissions import Permission
from tutsin.schemas.auth import ClientRead
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

manage_clients = require_permission(Permission.MANAGE_CLIENTS)

router = APIRouter(prefix="/clients", dependencies=[Depends(manage_clients)])


@router.get("", response_model=list[ClientRead])
def list_clients(storage: Storage = Depends(get_storage)):
    return storage.list_clients()


@router.get("/{client_id}", response_model=ClientRead)
def get_client(client_id: str, storage: Storage = Depends(get_storage)):
    client = storage.get_client(client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.delete("/{client_id}", status_code=204)
def delete_client(
    client_id: str,
    ctx: AdminContext = Depends(manage_clients),
    storage: Storage = Depends(get_storage),
):
    """Remove a client together with their sessions and projects."""
    if not storage.delete_client(client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    logger.info("Admin %s deleted client %s", ctx.admin_id, client_id)
    return Response(status_code=204)
