from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from core.exceptions import RenderError
from core.invoice.models import Invoice
from core.settings import InvoiceSettings

HEADING_FONT = ("Helvetica-Bold", 22)
BODY_FONT = ("Helvetica", 11)
BODY_BOLD_FONT = ("Helvetica-Bold", 11)
TOTAL_FONT = ("Helvetica-Bold", 14)

ROW_HEIGHT = 18.0
TEXT_GRAY = HexColor("#4b5563")
TEXT_DARK = HexColor("#1f2937")
RULE_STRONG = HexColor("#d1d5db")
RULE_LIGHT = HexColor("#e5e7eb")


@dataclass
class PDFRenderOptions:
    margin_pt: float = 20.0
    currency_symbol: str = "$"
    page_size: Tuple[float, float] = letter

    @classmethod
    def from_settings(cls, settings: InvoiceSettings | None) -> "PDFRenderOptions":
        if settings is None:
            return cls()
        return cls(margin_pt=settings.margin_pt, currency_symbol=settings.currency_symbol)


def format_money(value: float, symbol: str = "$") -> str:
    return f"{symbol}{value:.2f}"


def _format_quantity(value: float) -> str:
    return f"{value:g}"


def _fit_text(text: str, font: Tuple[str, int], max_width: float) -> str:
    name, size = font
    if stringWidth(text, name, size) <= max_width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, name, size) > max_width:
        text = text[:-1]
    return text + ellipsis


class _InvoiceLayout:
    """Draws one invoice onto a canvas, starting new pages as rows run out."""

    def __init__(self, pdf: canvas.Canvas, options: PDFRenderOptions) -> None:
        self.pdf = pdf
        self.options = options
        self.width, self.height = options.page_size
        self.left = options.margin_pt
        self.right = self.width - options.margin_pt
        self.bottom = options.margin_pt
        self.col_total = self.right
        self.col_price = self.right - 90
        self.col_qty = self.right - 180
        self.y = self.height - options.margin_pt

    def _money(self, value: float) -> str:
        return format_money(value, self.options.currency_symbol)

    def draw_header(self, invoice: Invoice) -> None:
        pdf = self.pdf
        self.y -= HEADING_FONT[1]
        pdf.setFont(*HEADING_FONT)
        pdf.setFillColor(TEXT_DARK)
        pdf.drawString(self.left, self.y, "INVOICE")
        self.y -= 16

        pdf.setFont(*BODY_FONT)
        pdf.setFillColor(TEXT_GRAY)
        for label, value in (
            ("Invoice #", invoice.invoice_number),
            ("Date", invoice.date),
            ("Customer", invoice.customer_name),
            ("Email", invoice.customer_email),
        ):
            self.y -= ROW_HEIGHT - 2
            pdf.drawString(self.left, self.y, f"{label}: {value}")
        self.y -= ROW_HEIGHT

    def draw_table_header(self) -> None:
        pdf = self.pdf
        self.y -= ROW_HEIGHT
        pdf.setFont(*BODY_BOLD_FONT)
        pdf.setFillColor(TEXT_DARK)
        pdf.drawString(self.left, self.y, "Description")
        pdf.drawRightString(self.col_qty, self.y, "Qty")
        pdf.drawRightString(self.col_price, self.y, "Price")
        pdf.drawRightString(self.col_total, self.y, "Total")
        self._rule(RULE_STRONG, 1.5)

    def _rule(self, color: HexColor, width: float) -> None:
        rule_y = self.y - 6
        self.pdf.setStrokeColor(color)
        self.pdf.setLineWidth(width)
        self.pdf.line(self.left, rule_y, self.right, rule_y)

    def _ensure_room(self, needed: float) -> None:
        if self.y - needed >= self.bottom:
            return
        self.pdf.showPage()
        self.y = self.height - self.options.margin_pt
        self.draw_table_header()

    def draw_items(self, invoice: Invoice) -> None:
        pdf = self.pdf
        description_width = self.col_qty - self.left - 50
        for item in invoice.items:
            self._ensure_room(ROW_HEIGHT + 6)
            self.y -= ROW_HEIGHT + 4
            pdf.setFont(*BODY_FONT)
            pdf.setFillColor(TEXT_DARK)
            pdf.drawString(self.left, self.y, _fit_text(item.description, BODY_FONT, description_width))
            pdf.drawRightString(self.col_qty, self.y, _format_quantity(item.quantity))
            pdf.drawRightString(self.col_price, self.y, self._money(item.price))
            pdf.drawRightString(self.col_total, self.y, self._money(item.line_total))
            self._rule(RULE_LIGHT, 0.75)

    def draw_total(self, invoice: Invoice) -> None:
        self._ensure_room(ROW_HEIGHT * 2)
        self.y -= ROW_HEIGHT * 2
        self.pdf.setFont(*TOTAL_FONT)
        self.pdf.setFillColor(TEXT_DARK)
        self.pdf.drawRightString(self.right, self.y, f"Total: {self._money(invoice.total)}")


def render_invoice_pdf(invoice: Invoice, options: PDFRenderOptions | None = None) -> bytes:
    """Render the invoice preview to PDF bytes.

    Raises:
        RenderError: if reportlab fails to produce a document.
    """
    options = options or PDFRenderOptions()
    buffer = BytesIO()
    try:
        pdf = canvas.Canvas(buffer, pagesize=options.page_size)
        pdf.setTitle(f"Invoice {invoice.number_or_draft}")
        layout = _InvoiceLayout(pdf, options)
        layout.draw_header(invoice)
        layout.draw_table_header()
        layout.draw_items(invoice)
        layout.draw_total(invoice)
        pdf.showPage()
        pdf.save()
    except Exception as exc:
        raise RenderError(f"Failed to generate PDF: {exc}", {"invoice": invoice.number_or_draft}) from exc

    data = buffer.getvalue()
    if not data:
        raise RenderError("Failed to generate PDF", {"invoice": invoice.number_or_draft})
    return data


__all__ = ["PDFRenderOptions", "render_invoice_pdf", "format_money"]
