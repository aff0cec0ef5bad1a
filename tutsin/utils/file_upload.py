"""Upload size enforcement for multipart endpoints."""

from __future__ import annotations

from os import SEEK_END

from fastapi import HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

# Allowance for multipart boundaries and part headers on top of the file body.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def declared_size_too_large(request: Request, max_bytes: int) -> bool:
    """True when the Content-Length header alone rules the upload out."""
    header = request.headers.get("content-length")
    if not header:
        return False
    try:
        declared = int(header)
    except ValueError:
        return False
    return declared > max_bytes + MULTIPART_OVERHEAD_BYTES


def _spooled_size(file: UploadFile) -> int:
    stream = file.file
    position = stream.tell()
    try:
        stream.seek(0, SEEK_END)
        return stream.tell()
    finally:
        stream.seek(position)


async def enforce_upload_limit(request: Request, file: UploadFile, max_bytes: int) -> int:
    """
    Return the upload's size in bytes.

    Raises:
        HTTPException 413: If the file exceeds ``max_bytes``
    """
    limit_mb = max_bytes // (1024 * 1024)
    if declared_size_too_large(request, max_bytes):
        raise HTTPException(status_code=413, detail=f"File size exceeds {limit_mb} MB limit")

    size = file.size if file.size is not None else await run_in_threadpool(_spooled_size, file)
    if size > max_bytes:
        raise HTTPException(status_code=413, detail=f"File size exceeds {limit_mb} MB limit")
    return size
