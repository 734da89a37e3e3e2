"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from privacy_api.api.v1 import consent_page, health
from privacy_api.api.v1.router import api_router
from privacy_api.core.config import settings
from privacy_api.core.errors import PrivacyAPIError
from privacy_api.core.logging import setup_logging
from privacy_api.middleware.request_logging import RequestLoggingMiddleware
from privacy_api.models.privacy import MessageId
from privacy_api.services.store import ConsentStore
from privacy_api.services.verify import build_verify_client

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info(f"Starting Privacy Consent API (env={settings.env})")

    http = httpx.AsyncClient(timeout=settings.verify_timeout_seconds)
    oauth_client, verify_client = build_verify_client(settings, http)

    app.state.consent_store = ConsentStore()
    app.state.oauth_client = oauth_client
    app.state.verify_client = verify_client

    for route in (
        "/basic/assessment",
        "/basic/page_metadata",
        "/basic/consents",
        "/verify/assessment",
        "/verify/page_metadata",
        "/verify/consents",
    ):
        logger.info(f"Serving POST {settings.api_prefix}{route}")

    yield

    # Shutdown
    await http.aclose()
    logger.info("Shutting down Privacy Consent API")


app = FastAPI(
    title="Privacy Consent API",
    description="Consent assessment, page metadata and consent storage",
    version="0.1.0",
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

# Log traffic on the delegated routes
app.add_middleware(
    RequestLoggingMiddleware,
    path_prefixes=(f"{settings.api_prefix}/verify",),
    enabled=settings.request_logging_enabled,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PrivacyAPIError)
async def privacy_api_exception_handler(
    request: Request, exc: PrivacyAPIError
) -> JSONResponse:
    """Render API errors as ``{messageId, messageDescription, extraInfo}``."""
    body = exc.to_body()
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            extra={"message_id": body["messageId"]},
        )
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies and parameters as invalid requests."""
    error = PrivacyAPIError(
        "Invalid request: body could not be parsed",
        status_code=status.HTTP_400_BAD_REQUEST,
        message_id=MessageId.INVALID_REQUEST,
    )
    return JSONResponse(status_code=error.status_code, content=error.to_body())


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    # Don't expose internal errors in production
    description = "An unexpected error occurred" if settings.is_prod else str(exc)
    error = PrivacyAPIError(description, message_id=MessageId.INTERNAL_ERROR)
    return JSONResponse(status_code=error.status_code, content=error.to_body())


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(consent_page.router)


# Root endpoint
@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Root endpoint with service info."""
    return {
        "service": "Privacy Consent API",
        "version": "0.1.0",
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
