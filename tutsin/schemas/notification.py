"""Pydantic schemas for notifications and file uploads."""

from datetime import datetime

from pydantic import Field

from tutsin.db.enums import NotificationType, PrincipalType
from tutsin.schemas.common import CamelModel


class NotificationCreate(CamelModel):
    recipient_id: str
    recipient_type: PrincipalType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)
    type: NotificationType = NotificationType.INFO


class NotificationRead(CamelModel):
    id: str
    recipient_id: str
    recipient_type: PrincipalType
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_by: str | None = None
    created_at: datetime


class FileUploadRead(CamelModel):
    id: str
    filename: str
    original_name: str
    mimetype: str
    size: int
    category: str | None = None
    uploaded_by: str
    created_at: datetime


class FileUploadResponse(CamelModel):
    message: str
    file: FileUploadRead
