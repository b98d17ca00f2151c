"""HTTP client that renders an invoice and posts it to the upload endpoint."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import UploadClientError
from core.invoice.models import Invoice, build_metadata, build_upload_filename
from core.invoice.render import PDFRenderOptions, render_invoice_pdf

UPLOAD_PATH = "/api/upload"
PDF_CONTENT_TYPE = "application/pdf"


class UploadReceipt(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    file_name: str = Field(alias="fileName")
    size: int


def _error_message(response: httpx.Response) -> str:
    try:
        payload: Any = response.json()
    except ValueError:
        return response.text or "Upload failed"
    if isinstance(payload, dict):
        return str(payload.get("details") or payload.get("error") or "Upload failed")
    return "Upload failed"


class InvoiceUploader:
    """Composer side of the upload flow.

    Args:
        base_url: Root URL of the Invoice Relay API, e.g. ``http://localhost:8000``.
        transport: Optional httpx transport, mainly for tests.
        render_options: Layout options passed to the PDF renderer.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.BaseTransport | None = None,
        render_options: PDFRenderOptions | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.render_options = render_options

    def upload_bytes(
        self,
        data: bytes,
        file_name: str,
        *,
        content_type: str = PDF_CONTENT_TYPE,
        metadata: str | None = None,
    ) -> UploadReceipt:
        form: dict[str, str] = {"fileName": file_name}
        if metadata is not None:
            form["metadata"] = metadata
        files = {"file": (file_name, data, content_type)}

        try:
            with httpx.Client(base_url=self.base_url, transport=self.transport) as client:
                response = client.post(UPLOAD_PATH, data=form, files=files)
        except httpx.HTTPError as exc:
            raise UploadClientError(f"Upload request failed: {exc}", {"file_name": file_name}) from exc

        if not response.is_success:
            message = _error_message(response)
            raise UploadClientError(
                message,
                {"file_name": file_name},
                status_code=response.status_code,
            )
        return UploadReceipt.model_validate(response.json())

    def upload(self, invoice: Invoice, *, timestamp_ms: int | None = None) -> UploadReceipt:
        """Render ``invoice`` and upload it under a freshly generated filename."""
        pdf_bytes = render_invoice_pdf(invoice, self.render_options)
        file_name = build_upload_filename(invoice, timestamp_ms)
        metadata = build_metadata(invoice).model_dump_json(by_alias=True)

        logger.info("Uploading {file_name} ({size} bytes)", file_name=file_name, size=len(pdf_bytes))
        receipt = self.upload_bytes(pdf_bytes, file_name, metadata=metadata)
        logger.info("Invoice uploaded: {message}", message=receipt.message)
        return receipt


__all__ = ["InvoiceUploader", "UploadReceipt"]
