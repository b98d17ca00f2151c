from __future__ import annotations

import time
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ValidationError as InvoiceRelayValidationError


class LineItem(BaseModel):
    description: str = ""
    quantity: float = Field(1, ge=0)
    price: float = Field(0, ge=0)

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


def _today() -> str:
    return date.today().isoformat()


class Invoice(BaseModel):
    """Editable invoice state. Lives only as long as the composer holding it."""

    model_config = ConfigDict(populate_by_name=True)

    invoice_number: str = Field("", alias="invoiceNumber")
    date: str = Field(default_factory=_today)
    customer_name: str = Field("", alias="customerName")
    customer_email: str = Field("", alias="customerEmail")
    items: list[LineItem] = Field(default_factory=lambda: [LineItem()])

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def number_or_draft(self) -> str:
        return self.invoice_number or "draft"

    def add_item(self) -> LineItem:
        item = LineItem()
        self.items.append(item)
        return item

    def update_item(self, index: int, field: str, value: Any) -> LineItem:
        """Replace one field of the item at ``index``, re-validating the result."""
        if index < 0 or index >= len(self.items):
            raise InvoiceRelayValidationError(
                f"Line item index out of range: {index}",
                {"index": str(index), "items": str(len(self.items))},
            )
        if field not in LineItem.model_fields:
            raise InvoiceRelayValidationError(f"Unknown line item field: {field}", {"field": field})
        payload = self.items[index].model_dump()
        payload[field] = value
        self.items[index] = LineItem.model_validate(payload)
        return self.items[index]


class InvoiceMetadata(BaseModel):
    """Summary sent with an upload; the server only logs it."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field("", alias="customerName")
    customer_email: str = Field("", alias="customerEmail")
    invoice_number: str = Field("", alias="invoiceNumber")
    date: str = ""
    total: float = 0.0


def build_metadata(invoice: Invoice) -> InvoiceMetadata:
    return InvoiceMetadata(
        customer_name=invoice.customer_name,
        customer_email=invoice.customer_email,
        invoice_number=invoice.invoice_number,
        date=invoice.date,
        total=invoice.total,
    )


def build_upload_filename(invoice: Invoice, timestamp_ms: int | None = None) -> str:
    """Object key for an upload: ``invoice-<number|draft>-<epoch ms>.pdf``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"invoice-{invoice.number_or_draft}-{timestamp_ms}.pdf"


def build_download_filename(invoice: Invoice) -> str:
    return f"invoice-{invoice.number_or_draft}.pdf"


__all__ = [
    "Invoice",
    "LineItem",
    "InvoiceMetadata",
    "build_metadata",
    "build_upload_filename",
    "build_download_filename",
]
