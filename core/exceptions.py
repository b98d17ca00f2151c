"""Custom exception hierarchy for Invoice Relay."""

from __future__ import annotations


class InvoiceRelayError(Exception):
    """Base exception for all Invoice Relay errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(InvoiceRelayError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(InvoiceRelayError):
    """Base class for validation errors."""
    pass


class UploadValidationError(ValidationError):
    """Raised when an upload request is missing a field or carries an empty file."""
    pass


class StorageError(InvoiceRelayError):
    """Raised when storage operations fail."""
    pass


class S3Error(StorageError):
    """Raised when the S3-compatible backend rejects a write or the transport fails."""
    pass


class RenderError(InvoiceRelayError):
    """Raised when an invoice cannot be rendered to PDF."""
    pass


class UploadClientError(InvoiceRelayError):
    """Raised by the invoice uploader when the upload endpoint reports a failure."""

    def __init__(
        self,
        message: str,
        details: dict[str, str] | None = None,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
