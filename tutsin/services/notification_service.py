"""Notification service - messages addressed to a client or an admin."""

import logging

from tutsin.db.enums import PrincipalType
from tutsin.db.models import Notification
from tutsin.schemas.notification import NotificationCreate
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)


def create_notification(
    storage: Storage,
    data: NotificationCreate,
    created_by: str | None = None,
) -> Notification:
    """
    Raises:
        ValueError: If the recipient does not exist
    """
    recipient_type = PrincipalType(data.recipient_type)
    if recipient_type == PrincipalType.CLIENT:
        recipient = storage.get_client(data.recipient_id)
    else:
        recipient = storage.get_admin(data.recipient_id)
    if recipient is None:
        raise ValueError("Recipient not found")

    fields = data.model_dump()
    fields["created_by"] = created_by
    notification = storage.create_notification(fields)
    logger.info(
        "Notification %s sent to %s %s", notification.id, recipient_type.value, data.recipient_id
    )
    return notification


def list_for_recipient(
    storage: Storage, recipient_type: PrincipalType, recipient_id: str
) -> list[Notification]:
    return storage.list_notifications(recipient_type.value, recipient_id)


def mark_read_for_recipient(
    storage: Storage,
    notification_id: str,
    recipient_type: PrincipalType,
    recipient_id: str,
) -> Notification | None:
    """Mark read only if addressed to the caller; otherwise behave as absent."""
    notification = storage.get_notification(notification_id)
    if (
        notification is None
        or notification.recipient_type != recipient_type.value
        or notification.recipient_id != recipient_id
    ):
        return None
    return storage.mark_notification_read(notification_id)
