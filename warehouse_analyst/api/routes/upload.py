"""Endpoint storing floor-plan images in the upload directory."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from ...core.settings import Settings, get_settings
from ...core.uploads import SavedUpload, UploadTooLargeError, save_upload
from ...models.common import ResponseEnvelope
from ...models.upload import UploadedFileInfo
from ..responses import error_response

router = APIRouter(tags=["uploads"])
logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


def uploaded_file_info(saved: SavedUpload) -> UploadedFileInfo:
    return UploadedFileInfo(
        filename=saved.filename,
        url_path=f"{UPLOADS_URL_PREFIX}/{quote(saved.filename)}",
        size_bytes=saved.size_bytes,
        mime_type=saved.mime_type,
    )


@router.post(
    "/upload",
    response_model=ResponseEnvelope[UploadedFileInfo],
    status_code=status.HTTP_201_CREATED,
    summary="Store an uploaded file",
)
async def upload_file(
    file: UploadFile | None = File(default=None, description="File to store"),
    settings: Settings = Depends(get_settings),
) -> ResponseEnvelope[UploadedFileInfo] | JSONResponse:
    if file is None:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "missing_file",
            "Missing file. Send multipart/form-data with a file field.",
        )

    try:
        saved = await save_upload(
            file, settings.paths.upload_dir, max_bytes=settings.max_upload_bytes
        )
    except UploadTooLargeError as exc:
        return error_response(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "upload_too_large", str(exc)
        )

    logger.info(
        "upload.saved",
        extra={"metadata": {"filename": saved.filename, "size_bytes": saved.size_bytes}},
    )
    return ResponseEnvelope.success_payload(uploaded_file_info(saved))
