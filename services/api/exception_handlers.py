"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import (
    ConfigurationError,
    InvoiceRelayError,
    StorageError,
    ValidationError,
)

UPLOAD_FAILED = "Error uploading file"
UPLOAD_PATH = "/api/upload"


async def invoice_relay_exception_handler(request: Request, exc: InvoiceRelayError) -> JSONResponse:
    """Handle Invoice Relay exceptions.

    Validation problems are the caller's to fix and come back as ``{error}``;
    everything else is a server-side failure reported as ``{error, details}``.
    """
    if isinstance(exc, ValidationError):
        logger.warning(
            "Rejected request: {message}",
            message=exc.message,
            path=request.url.path,
            details=exc.details,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.message},
        )

    if isinstance(exc, (ConfigurationError, StorageError)):
        error = UPLOAD_FAILED
    else:
        error = type(exc).__name__

    logger.error(
        "Invoice Relay exception: {type} - {message}",
        type=type(exc).__name__,
        message=exc.message,
        path=request.url.path,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error, "details": exc.message},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework-level errors (bad multipart bodies, unknown routes) in the ``{error}`` shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled exception on {path}", path=request.url.path)
    error = UPLOAD_FAILED if request.url.path == UPLOAD_PATH else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error, "details": str(exc)},
    )
