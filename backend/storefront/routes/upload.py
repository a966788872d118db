"""
Storefront Backend: Upload Route Handlers
============================================

What:  POST /api/upload stores a product image, DELETE /api/upload/{public_id}
       removes one, GET /api/files/{path} serves stored images.

Request Flow (upload):
    1. Client sends multipart/form-data with a 'file' field
    2. UploadService validates, writes a temp file, hands it to object storage
    3. The temp file is removed whether storage succeeded or not
    4. 200 with {success, message, data: {url, public_id}}
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse, MessageResponse, UploadedFile, UploadResponse
from storefront.security import require_admin
from storefront.services.storage_service import object_storage
from storefront.services.upload_service import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a product image",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"description": "Missing file, invalid type or size", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
)
async def upload_file(
    file: UploadFile | None = File(
        default=None,
        description="Product image (PNG, JPG, JPEG or WebP)",
    ),
) -> UploadResponse:
    if file is None:
        raise ValidationError(message="No file uploaded", field="file")

    try:
        content = await file.read()
        logger.info(
            "Received upload: filename=%s, size=%d bytes",
            file.filename or "unknown",
            len(content),
        )
        stored = await upload_service.upload_file(
            filename=file.filename or "upload.jpg",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()

    return UploadResponse(
        message="File uploaded successfully",
        data=UploadedFile(url=stored.url, public_id=stored.public_id),
    )


@router.delete(
    "/upload/{public_id:path}",
    response_model=MessageResponse,
    summary="Delete an uploaded image",
    dependencies=[Depends(require_admin)],
)
async def delete_file(public_id: str) -> MessageResponse:
    await upload_service.delete_file(public_id)
    return MessageResponse(message="File deleted successfully")


@router.get(
    "/files/{file_path:path}",
    summary="Serve stored images",
    responses={404: {"description": "File not found"}},
)
async def serve_file(file_path: str) -> FileResponse:
    path = object_storage.resolve_file(file_path)
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
