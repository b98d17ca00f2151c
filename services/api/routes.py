from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from core.settings import get_settings
from core.storage import ObjectStorage, get_object_storage
from services.api.schemas import ErrorResponse, UploadFailureResponse, UploadResponse
from services.api.uploads import parse_upload_form, relay_upload

router = APIRouter(prefix="/api")


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": UploadFailureResponse}},
    tags=["upload"],
)
async def upload_invoice(
    request: Request,
    storage: Annotated[ObjectStorage, Depends(get_object_storage)],
) -> UploadResponse:
    """Relay one multipart ``file`` to the bucket under ``fileName``.

    The storage dependency runs first, so missing credentials fail the call
    before the body is read.
    """
    default_content_type = get_settings().storage.default_content_type
    async with request.form() as form:
        upload = await parse_upload_form(form, default_content_type)
    return await relay_upload(storage, upload)
