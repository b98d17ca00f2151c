"""CLI for rendering an invoice to PDF and optionally uploading it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import InvoiceRelayError
from core.invoice.client import InvoiceUploader
from core.invoice.models import Invoice, build_download_filename
from core.invoice.render import PDFRenderOptions, render_invoice_pdf
from core.logging_config import setup_logging
from core.settings import get_settings


def load_invoice(path: Path) -> Invoice:
    """Read an invoice from a JSON or YAML file (JSON is valid YAML)."""
    payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a mapping of invoice fields")
    return Invoice.model_validate(payload)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Render an invoice to PDF and upload it to object storage")
    parser.add_argument("invoice", type=Path, help="Invoice JSON/YAML file")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for the rendered PDF")
    parser.add_argument("--upload", action="store_true", help="Upload the rendered invoice after saving it")
    parser.add_argument("--api-url", default=settings.invoice.api_url, help="Invoice Relay API base URL")
    parser.add_argument("--log-level", default="INFO", help="Log level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        invoice = load_invoice(args.invoice)
    except (OSError, ValueError, yaml.YAMLError, PydanticValidationError) as exc:
        logger.error("Could not read invoice {path}: {error}", path=args.invoice, error=exc)
        return 1

    options = PDFRenderOptions.from_settings(get_settings().invoice)
    try:
        pdf_bytes = render_invoice_pdf(invoice, options)
        args.output_dir.mkdir(parents=True, exist_ok=True)
        pdf_path = args.output_dir / build_download_filename(invoice)
        pdf_path.write_bytes(pdf_bytes)
        logger.info("Saved {path} (total {total:.2f})", path=pdf_path, total=invoice.total)

        if args.upload:
            receipt = InvoiceUploader(args.api_url, render_options=options).upload(invoice)
            logger.info("{message}: {file_name} ({size} bytes)", message=receipt.message, file_name=receipt.file_name, size=receipt.size)
    except (InvoiceRelayError, OSError) as exc:
        logger.error("Invoice failed: {error}", error=exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
