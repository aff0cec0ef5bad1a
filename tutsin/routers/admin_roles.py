"""Admin role management and the permission catalog."""

from fastapi import APIRouter, Depends, HTTPException, Response

from tutsin.core.deps import get_current_admin, require_permission
from tutsin.core.permissions import PERMISSION_REGISTRY, Permission
from tutsin.schemas.admin import PermissionRead, RoleCreate, RoleRead, RoleUpdate
from tutsin.services import admin_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()

manage_roles = require_permission(Permission.MANAGE_ROLES)


@router.get("/roles", response_model=list[RoleRead], dependencies=[Depends(get_current_admin)])
def list_roles(storage: Storage = Depends(get_storage)):
    return storage.list_admin_roles()


@router.post("/roles", response_model=RoleRead, status_code=201, dependencies=[Depends(manage_roles)])
def create_role(data: RoleCreate, storage: Storage = Depends(get_storage)):
    try:
        return admin_service.create_role(storage, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/roles/{role_id}", response_model=RoleRead, dependencies=[Depends(manage_roles)])
def update_role(role_id: str, data: RoleUpdate, storage: Storage = Depends(get_storage)):
    try:
        role = admin_service.update_role(storage, role_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if role is None:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


@router.delete("/roles/{role_id}", status_code=204, dependencies=[Depends(manage_roles)])
def delete_role(role_id: str, storage: Storage = Depends(get_storage)):
    try:
        deleted = admin_service.delete_role(storage, role_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Role not found")
    return Response(status_code=204)


@router.get("/permissions", response_model=list[PermissionRead],
            dependencies=[Depends(get_current_admin)])
def list_permissions():
    """Permission catalog for role editors."""
    return [
        PermissionRead(
            key=p.key, label=p.label, description=p.description, category=p.category.value
        )
        for p in PERMISSION_REGISTRY.values()
    ]
