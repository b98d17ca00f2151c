import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import InvoiceRelayError
from core.logging_config import setup_logging
from core.settings import get_settings
from core.storage import close_object_storage
from services.api.exception_handlers import (
    http_exception_handler,
    invoice_relay_exception_handler,
    unhandled_exception_handler,
)
from services.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from services.api.routes import router as api_router


def create_app() -> FastAPI:
    json_logging = os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"}
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=json_logging,
        log_file=Path(log_file) if log_file else None,
    )

    settings = get_settings()
    app = FastAPI(
        title=settings.api.title,
        version="0.1.0",
        description="Relays rendered invoices to S3-compatible object storage",
    )

    # CORS for the composer UI plus an optional extra origin
    cors_origins = set(settings.api.cors_origins)
    ui_origin = os.getenv("UI_ORIGIN")
    if ui_origin:
        cors_origins.add(ui_origin)
    logger.info(f"CORS allowed origins: {sorted(cors_origins)}")

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    # Added last so it runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("shutdown")
    async def _release_storage() -> None:
        """uvicorn maps SIGTERM/SIGINT onto this hook."""
        close_object_storage()

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(InvoiceRelayError, invoice_relay_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)

    return app


app = create_app()

# Local development:
#   uvicorn services.api.main:app --reload


__all__ = ["app", "create_app"]
