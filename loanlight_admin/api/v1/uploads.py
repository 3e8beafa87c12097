"""POST /v1/uploads/{bucket} - store a file and return its public URL"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from loanlight_admin.api.dependencies import get_request_id, get_storage_client
from loanlight_admin.api.v1.schemas import UploadResponse
from loanlight_admin.infrastructure.clients.storage import StorageClient

router = APIRouter()


@router.post("/uploads/{bucket}", response_model=UploadResponse, status_code=201)
async def upload(
    bucket: str,
    request: Request,
    file: UploadFile = File(...),
    folder: Optional[str] = Form(None),
    storage: StorageClient = Depends(get_storage_client),
):
    """Upload under a unique name (optionally inside `folder`)"""
    content = await file.read()
    url = await storage.upload_file(
        file.filename or "upload",
        content,
        bucket,
        folder=folder,
        content_type=file.content_type or "application/octet-stream",
    )
    if url is None:
        logging.warning(f"Upload to {bucket} failed", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail="Failed to upload file")
    return UploadResponse(url=url)
