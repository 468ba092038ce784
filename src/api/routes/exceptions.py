"""Server-side enforcement point for reconciliation exception actions.

Backends that update, bulk-update or auto-resolve exceptions consult this
route (or call ``ensure_can_action`` directly) before mutating anything.
Bulk requests are all-or-nothing: one unauthorized type denies the batch.

Provides:
- POST /api/v1/exceptions/actions/authorize  (authenticated)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.core.auth import get_current_principal
from src.core.models import ExceptionStatus, ExceptionType, Principal
from src.core.permissions import ensure_can_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/exceptions", tags=["exceptions"])


class ExceptionActionRequest(BaseModel):
    """Types of the exceptions an action is about to touch."""

    exception_types: list[ExceptionType] = Field(..., min_length=1)
    status: ExceptionStatus | None = None


class ExceptionActionDecision(BaseModel):
    authorized: bool
    count: int


@router.post("/actions/authorize", response_model=ExceptionActionDecision)
async def authorize_exception_action(
    payload: ExceptionActionRequest,
    principal: Principal = Depends(get_current_principal),
) -> ExceptionActionDecision:
    """Authorize an action on a batch of exceptions or reject it with 403."""
    ensure_can_action(principal, payload.exception_types)
    logger.info(
        "Authorized %s action on %d exception(s) for %s",
        payload.status or "unspecified",
        len(payload.exception_types),
        principal.subject,
    )
    return ExceptionActionDecision(authorized=True, count=len(payload.exception_types))
