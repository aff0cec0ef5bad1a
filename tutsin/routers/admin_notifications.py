"""Admin notification endpoints.

Admins read their own inbox and can send notifications to any client or
admin.
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from tutsin.core.deps import AdminContext, get_current_admin
from tutsin.db.enums import PrincipalType
from tutsin.schemas.notification import NotificationCreate, NotificationRead
from tutsin.services import notification_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter(prefix="/notifications")


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    ctx: AdminContext = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    return notification_service.list_for_recipient(storage, PrincipalType.ADMIN, ctx.admin_id)


@router.post("", response_model=NotificationRead, status_code=201)
def create_notification(
    data: NotificationCreate,
    ctx: AdminContext = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    try:
        return notification_service.create_notification(storage, data, created_by=ctx.admin_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    ctx: AdminContext = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    notification = notification_service.mark_read_for_recipient(
        storage, notification_id, PrincipalType.ADMIN, ctx.admin_id
    )
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.delete("/{notification_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_notification(notification_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_notification(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return Response(status_code=204)
