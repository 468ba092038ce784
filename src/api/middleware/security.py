"""HTTP middleware guarding the reconciliation guard API.

Provides:
- Request ID middleware (validated X-Request-ID, echoed in error bodies)
- Security headers for a JSON-only API
- Per-caller rate limiting, with a separate budget for action authorization
"""

from __future__ import annotations

import logging
import math
import re
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from src.api.version import API_VERSION
from src.core.auth import decode_token
from src.core.config import Settings
from src.core.errors import get_safe_error_message_by_status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request ID
# ---------------------------------------------------------------------------

# Client ids end up in log lines and error bodies, so only plain tokens are kept.
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,64}")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id for support correlation.

    A client-supplied X-Request-ID is kept only if it is a short plain
    token; anything else is replaced with a fresh UUID4 hex string.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        supplied = request.headers.get("x-request-id", "")
        request_id = supplied if _REQUEST_ID_PATTERN.fullmatch(supplied) else uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------

API_SECURITY_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    }
)

# Interactive docs (debug only) load their own scripts and styles.
_DOCS_PATHS = frozenset({"/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Apply the API header policy and the API version to every response.

    Permission views and error bodies must never be cached or framed.
    """

    def __init__(self, app: ASGIApp, enable_hsts: bool = True) -> None:
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in API_SECURITY_HEADERS.items():
            if name == "Content-Security-Policy" and request.url.path in _DOCS_PATHS:
                continue
            response.headers[name] = value
        response.headers["X-API-Version"] = API_VERSION
        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

ACTION_PATH_PREFIX = "/api/v1/exceptions/actions"

# Expired buckets are swept after this many requests, or sooner if the table grows past the cap.
_SWEEP_EVERY = 1000
_MAX_BUCKETS = 50_000


@dataclass
class _Bucket:
    started: float
    hits: int = 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window, in-memory rate limiter keyed by caller.

    Callers presenting a valid bearer token are counted by token subject,
    so one user shares a single budget across addresses. Everyone else is
    counted by connection address (X-Forwarded-For is not trusted). Calls
    under ACTION_PATH_PREFIX draw from their own, smaller budget, separate
    from the permission views.

    Over-limit requests get 429 with the safe "too many requests" message.
    State is per-process.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        max_requests: int = 100,
        window_seconds: int = 60,
        action_max_requests: int = 20,
    ) -> None:
        super().__init__(app)
        self.settings = settings
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.action_max_requests = action_max_requests
        self._buckets: dict[tuple[str, str], _Bucket] = {}
        self._since_sweep = 0

    def _caller_key(self, request: Request) -> str:
        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                subject = decode_token(token.strip(), self.settings).get("sub")
            except HTTPException:
                subject = None
            if subject:
                return f"sub:{subject}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _budget(self, path: str) -> tuple[str, int]:
        if path.startswith(ACTION_PATH_PREFIX):
            return "actions", self.action_max_requests
        return "api", self.max_requests

    def _sweep(self, now: float) -> None:
        """Drop buckets whose window has closed."""
        expired = [key for key, bucket in self._buckets.items() if now - bucket.started >= self.window_seconds]
        for key in expired:
            del self._buckets[key]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        now = time.monotonic()
        self._since_sweep += 1
        if self._since_sweep >= _SWEEP_EVERY or len(self._buckets) > _MAX_BUCKETS:
            self._sweep(now)
            self._since_sweep = 0

        budget_name, limit = self._budget(request.url.path)
        caller = self._caller_key(request)
        key = (budget_name, caller)
        bucket = self._buckets.get(key)
        if bucket is None or now - bucket.started >= self.window_seconds:
            bucket = self._buckets[key] = _Bucket(started=now)
        bucket.hits += 1

        if bucket.hits > limit:
            retry_after = max(1, math.ceil(self.window_seconds - (now - bucket.started)))
            logger.warning("Rate limit exceeded for %s on the %s budget", caller, budget_name)
            return JSONResponse(
                status_code=429,
                content={
                    "detail": get_safe_error_message_by_status(429),
                    "request_id": getattr(request.state, "request_id", "unknown"),
                },
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - bucket.hits))
        return response
