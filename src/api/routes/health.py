"""Health check endpoint.

The service owns no external connections, so health reflects only that
the process is up and the policy tables are loaded.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from src.api.version import API_VERSION
from src.core.errors import SAFE_ERROR_MESSAGES
from src.core.permissions import EXCEPTION_ROLE_MAP

router = APIRouter(tags=["health"])


@router.get("/api/v1/health")
async def health_check() -> dict[str, Any]:
    """Report process health.

    Returns:
        {
            "status": "healthy",
            "policies": {"exception_types": 7, "safe_messages": 11},
            "version": "0.1.0",
            "timestamp": "..."
        }
    """
    return {
        "status": "healthy",
        "policies": {
            "exception_types": len(EXCEPTION_ROLE_MAP),
            "safe_messages": len(SAFE_ERROR_MESSAGES),
        },
        "version": API_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }
