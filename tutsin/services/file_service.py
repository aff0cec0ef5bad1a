"""File service - validated uploads stored on local disk, tracked in storage."""

import logging
import os
import uuid
from typing import BinaryIO

from tutsin.core.config import settings
from tutsin.db.models import FileUpload
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "pdf", "doc", "docx", "txt"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _upload_dir() -> str:
    path = settings.UPLOAD_DIR
    os.makedirs(path, exist_ok=True)
    return path


# =============================================================================
# File Operations
# =============================================================================

def validate_file(filename: str, content_type: str | None) -> tuple[bool, str | None]:
    """
    Validate file against the extension and MIME allowlists.

    Size is checked separately by the upload route.

    Returns (is_valid, error_message)
    """
    ext = _extension(filename)
    if ext not in ALLOWED_EXTENSIONS:
        return False, f"File extension '.{ext}' not allowed"

    if (content_type or "").split(";")[0].strip().lower() not in ALLOWED_MIME_TYPES:
        return False, f"Content type '{content_type}' not allowed"

    return True, None


def store_file(stored_name: str, file: BinaryIO) -> str:
    """Write the upload under UPLOAD_DIR. Returns the path written."""
    path = os.path.join(_upload_dir(), stored_name)
    with open(path, "wb") as f:
        file.seek(0)
        while chunk := file.read(64 * 1024):
            f.write(chunk)
    return path


def delete_file(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


# =============================================================================
# Service Functions
# =============================================================================

def save_upload(
    storage: Storage,
    *,
    filename: str,
    content_type: str | None,
    file: BinaryIO,
    size: int,
    uploaded_by: str,
    category: str | None = None,
) -> FileUpload:
    """
    Validate, store and record an upload.

    Raises:
        ValueError: If the file type is not allowed
    """
    is_valid, error = validate_file(filename, content_type)
    if not is_valid:
        raise ValueError(error)

    stored_name = f"{uuid.uuid4().hex}.{_extension(filename)}"
    path = store_file(stored_name, file)
    try:
        record = storage.create_file_upload(
            {
                "filename": stored_name,
                "original_name": os.path.basename(filename),
                "mimetype": content_type,
                "size": size,
                "path": path,
                "category": category,
                "uploaded_by": uploaded_by,
            }
        )
    except Exception:
        delete_file(path)
        raise

    logger.info("Admin %s uploaded file %s (%d bytes)", uploaded_by, record.id, size)
    return record


def remove_upload(storage: Storage, record: FileUpload) -> bool:
    """Delete the record and its file on disk."""
    deleted = storage.delete_file_upload(record.id)
    if deleted:
        delete_file(record.path)
    return deleted
