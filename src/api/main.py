"""Smart Reconciliation Guard FastAPI application entry point.

Configures the FastAPI app with:
- CORS, request ID, security header and rate limit middleware
- Route registration (health, permissions, exception actions, error catalogue)
- Error handlers that only ever return safe, pre-approved messages
- OpenAPI documentation at /docs (debug mode only)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware.security import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from src.api.routes import errors, exceptions, health, permissions
from src.api.version import API_VERSION
from src.core.config import configure_logging, get_settings
from src.core.errors import SAFE_ERROR_MESSAGES, get_safe_error_message_by_status
from src.core.permissions import EXCEPTION_ROLE_MAP

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the loaded policy tables on startup.

    The tables are module constants, so they are complete before the
    first request is admitted.
    """
    logger.info(
        "Policies loaded: %d exception types, %d safe messages",
        len(EXCEPTION_ROLE_MAP),
        len(SAFE_ERROR_MESSAGES),
    )
    yield
    logger.info("Shutting down")


def _safe_error_response(
    request: Request,
    status_code: int,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    return JSONResponse(
        status_code=status_code,
        content={"detail": get_safe_error_message_by_status(status_code), "request_id": request_id},
        headers=dict(headers) if headers else None,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Exception authorization and safe error disclosure for reconciliation",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # -- Security Middleware ---
    # Note: middleware is applied in reverse order (last added = first executed).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=not settings.debug)
    app.add_middleware(
        RateLimitMiddleware,
        settings=settings,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        action_max_requests=settings.rate_limit_action_requests,
    )
    app.add_middleware(RequestIDMiddleware)

    # -- Routes ---
    app.include_router(health.router)
    app.include_router(permissions.router)
    app.include_router(exceptions.router)
    app.include_router(errors.router)

    # -- Error Handlers ---
    # Raw details are logged here and never returned to the client.
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info("HTTP %d [%s] %s: %s", exc.status_code, request_id, request.url.path, exc.detail)
        return _safe_error_response(request, exc.status_code, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("Request validation failed [%s]: %s", request_id, exc.errors())
        return _safe_error_response(request, 422)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("Validation error [%s]: %s", request_id, exc)
        return _safe_error_response(request, 422)

    @app.exception_handler(Exception)  # Intentionally broad: top-level global error handler
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled error [%s]: %s", request_id, exc)
        return _safe_error_response(request, 500)

    return app


# Application instance used by uvicorn
app = create_app()
