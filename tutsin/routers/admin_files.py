"""Admin file uploads."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from tutsin.core.config import settings
from tutsin.core.deps import AdminContext, get_current_admin
from tutsin.schemas.notification import FileUploadRead, FileUploadResponse
from tutsin.services import file_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage
from tutsin.utils.file_upload import enforce_upload_limit

router = APIRouter(prefix="/files")


@router.post("/upload", response_model=FileUploadResponse, status_code=201)
async def upload_file(
    request: Request,
    file: Annotated[UploadFile, File()],
    category: Annotated[str | None, Form()] = None,
    ctx: AdminContext = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """
    Upload one file (max MAX_UPLOAD_BYTES).

    Allowed types: jpeg, jpg, png, gif, pdf, doc, docx, txt.
    """
    size = await enforce_upload_limit(request, file, settings.MAX_UPLOAD_BYTES)
    try:
        record = await run_in_threadpool(
            file_service.save_upload,
            storage,
            filename=file.filename or "",
            content_type=file.content_type,
            file=file.file,
            size=size,
            uploaded_by=ctx.admin_id,
            category=category,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FileUploadResponse(
        message="File uploaded successfully", file=FileUploadRead.model_validate(record)
    )


@router.get("", response_model=list[FileUploadRead], dependencies=[Depends(get_current_admin)])
def list_files(storage: Storage = Depends(get_storage)):
    return storage.list_file_uploads()


@router.get("/{file_id}", response_model=FileUploadRead, dependencies=[Depends(get_current_admin)])
def get_file(file_id: str, storage: Storage = Depends(get_storage)):
    record = storage.get_file_upload(file_id)
    if record is None:
        raise HTTPException(status_code=404, detail="File not found")
    return record


@router.delete("/{file_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_file(file_id: str, storage: Storage = Depends(get_storage)):
    """Remove the record and the file on disk."""
    record = storage.get_file_upload(file_id)
    if record is None or not file_service.remove_upload(storage, record):
        raise HTTPException(status_code=404, detail="File not found")
    return Response(status_code=204)
