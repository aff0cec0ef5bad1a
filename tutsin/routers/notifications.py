"""Client notification endpoints (scoped to the signed-in client)."""

from fastapi import APIRouter, Depends, HTTPException

from tutsin.core.deps import get_current_client
from tutsin.db.enums import PrincipalType
from tutsin.db.models import Client
from tutsin.schemas.notification import NotificationRead
from tutsin.services import notification_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    client: Client = Depends(get_current_client),
    storage: Storage = Depends(get_storage),
):
    return notification_service.list_for_recipient(storage, PrincipalType.CLIENT, client.id)


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    client: Client = Depends(get_current_client),
    storage: Storage = Depends(get_storage),
):
    notification = notification_service.mark_read_for_recipient(
        storage, notification_id, PrincipalType.CLIENT, client.id
    )
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification
