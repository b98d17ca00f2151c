"""Invoice composer: models, PDF rendering and the upload client."""

from core.invoice.client import InvoiceUploader, UploadReceipt
from core.invoice.models import (
    Invoice,
    InvoiceMetadata,
    LineItem,
    build_download_filename,
    build_metadata,
    build_upload_filename,
)
from core.invoice.render import PDFRenderOptions, render_invoice_pdf

__all__ = [
    "Invoice",
    "InvoiceMetadata",
    "LineItem",
    "InvoiceUploader",
    "UploadReceipt",
    "PDFRenderOptions",
    "build_download_filename",
    "build_metadata",
    "build_upload_filename",
    "render_invoice_pdf",
]
