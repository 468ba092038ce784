"""Safe error message catalogue.

Publishes the fixed status-to-message table so clients render exactly
the strings the server would, without keeping their own copy.

Provides:
- GET /api/v1/errors/messages  (public)
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from src.core.errors import FALLBACK_ERROR_MESSAGE, SAFE_ERROR_MESSAGES

router = APIRouter(prefix="/api/v1/errors", tags=["errors"])


class SafeMessagesResponse(BaseModel):
    messages: dict[int, str]
    fallback: str


@router.get("/messages", response_model=SafeMessagesResponse)
async def list_safe_messages() -> SafeMessagesResponse:
    """Return the status-to-message table and the fallback string."""
    return SafeMessagesResponse(messages=dict(SAFE_ERROR_MESSAGES), fallback=FALLBACK_ERROR_MESSAGE)
