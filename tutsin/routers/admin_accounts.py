"""Admin account management (manage_admins)."""

from fastapi import APIRouter, Depends, HTTPException, Response

from tutsin.core.deps import AdminContext, require_permission
from tutsin.core.permissions import Permission
from tutsin.schemas.admin import AdminCreate, AdminMutationResponse, AdminRead, AdminUpdate
from tutsin.services import admin_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter(prefix="/admins")

manage_admins = require_permission(Permission.MANAGE_ADMINS)


def _admin_read(storage: Storage, admin) -> AdminRead:
    role = storage.get_admin_role(admin.role_id)
    return AdminRead.model_validate(admin).model_copy(
        update={"role_name": role.name if role else None}
    )


@router.get("", response_model=list[AdminRead], dependencies=[Depends(manage_admins)])
def list_admins(storage: Storage = Depends(get_storage)):
    """All admins with their role name; password hashes are never returned."""
    roles = {r.id: r.name for r in storage.list_admin_roles()}
    return [
        AdminRead.model_validate(a).model_copy(update={"role_name": roles.get(a.role_id)})
        for a in storage.list_admins()
    ]


@router.get("/{admin_id}", response_model=AdminRead, dependencies=[Depends(manage_admins)])
def get_admin(admin_id: str, storage: Storage = Depends(get_storage)):
    admin = storage.get_admin(admin_id)
    if admin is None:
        raise HTTPException(status_code=404, detail="Admin not found")
    return _admin_read(storage, admin)


@router.post("", response_model=AdminMutationResponse, status_code=201,
             dependencies=[Depends(manage_admins)])
def create_admin(data: AdminCreate, storage: Storage = Depends(get_storage)):
    try:
        admin = admin_service.create_admin(storage, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return AdminMutationResponse(message="Admin created successfully", admin=_admin_read(storage, admin))


@router.put("/{admin_id}", response_model=AdminMutationResponse, dependencies=[Depends(manage_admins)])
def update_admin(admin_id: str, data: AdminUpdate, storage: Storage = Depends(get_storage)):
    try:
        admin = admin_service.update_admin(storage, admin_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if admin is None:
        raise HTTPException(status_code=404, detail="Admin not found")
    return AdminMutationResponse(message="Admin updated successfully", admin=_admin_read(storage, admin))


@router.delete("/{admin_id}", status_code=204)
def delete_admin(
    admin_id: str,
    ctx: AdminContext = Depends(manage_admins),
    storage: Storage = Depends(get_storage),
):
    try:
        deleted = admin_service.delete_admin(storage, admin_id, acting_admin_id=ctx.admin_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Admin not found")
    return Response(status_code=204)
