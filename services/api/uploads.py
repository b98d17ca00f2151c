"""Upload request parsing and the relay to object storage."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData, UploadFile

from core.exceptions import S3Error, UploadValidationError
from core.invoice.models import InvoiceMetadata
from core.storage import ObjectStorage
from services.api.schemas import UploadResponse

SUCCESS_STATUS = 200


@dataclass(frozen=True)
class UploadRequest:
    file_name: str
    data: bytes
    content_type: str
    metadata: InvoiceMetadata | None = None

    @property
    def size(self) -> int:
        return len(self.data)


def _parse_metadata(raw: object) -> InvoiceMetadata | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return InvoiceMetadata.model_validate(json.loads(raw))
    except (ValueError, PydanticValidationError) as exc:
        logger.warning("Ignoring unparseable upload metadata: {error}", error=exc)
        return None


async def parse_upload_form(form: FormData, default_content_type: str) -> UploadRequest:
    """Turn the multipart body into typed fields, checking file, fileName, then size.

    Raises:
        UploadValidationError: on the first failed check.
    """
    file = form.get("file")
    if file is None or file == "":
        raise UploadValidationError("No file provided")
    if not isinstance(file, UploadFile):
        raise UploadValidationError("No file provided", {"reason": "field 'file' is not a file part"})

    file_name = form.get("fileName")
    if not isinstance(file_name, str) or not file_name:
        raise UploadValidationError("No fileName provided")

    content_type = file.content_type or default_content_type
    logger.info(
        "Uploading file: name={name} size={size} type={type}",
        name=file_name,
        size=file.size,
        type=content_type,
    )

    data = await file.read()
    if len(data) == 0:
        raise UploadValidationError("File content is empty", {"file_name": file_name})

    return UploadRequest(
        file_name=file_name,
        data=data,
        content_type=content_type,
        metadata=_parse_metadata(form.get("metadata")),
    )


async def relay_upload(storage: ObjectStorage, request: UploadRequest) -> UploadResponse:
    """Put the file into the bucket once. Only a literal 200 acknowledgement counts as success.

    Raises:
        S3Error: when the backend rejects the write or acknowledges with another status.
    """
    if request.metadata is not None:
        logger.info(
            "Invoice metadata: number={number} customer={customer} total={total}",
            number=request.metadata.invoice_number,
            customer=request.metadata.customer_name,
            total=request.metadata.total,
        )

    logger.info("Sending {key} to bucket {bucket}", key=request.file_name, bucket=storage.bucket)
    result = await asyncio.to_thread(
        storage.put_bytes,
        request.file_name,
        request.data,
        request.content_type,
    )
    logger.info("Storage response: status={status} etag={etag}", status=result.status_code, etag=result.etag)

    if result.status_code != SUCCESS_STATUS:
        raise S3Error(
            f"Failed to upload to R2: {result.status_code}",
            {"key": request.file_name, "status_code": str(result.status_code)},
        )

    return UploadResponse(file_name=request.file_name, size=request.size)
