"""Exception permission read API.

Lets the UI decide which exception actions to show or disable for the
current caller. This is a convenience view; the authoritative check is
enforced again by ``/api/v1/exceptions/actions/authorize`` and
``require_exception_action`` on any mutating route.

Provides:
- GET /api/v1/permissions/exceptions                   (authenticated)
- GET /api/v1/permissions/exceptions/{exception_type}  (authenticated)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.core.auth import get_current_principal
from src.core.models import ExceptionType, Principal, UserRole
from src.core.permissions import actionable_exception_types, can_action_exception

router = APIRouter(prefix="/api/v1/permissions", tags=["permissions"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class ExceptionPermissionsResponse(BaseModel):
    """Everything the caller's role may act on."""

    role: UserRole
    actionable_exception_types: list[ExceptionType]
    can_action: dict[ExceptionType, bool]


class ExceptionPermissionCheck(BaseModel):
    """Decision for a single exception type."""

    exception_type: ExceptionType
    can_action: bool


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/exceptions", response_model=ExceptionPermissionsResponse)
async def get_exception_permissions(
    principal: Principal = Depends(get_current_principal),
) -> ExceptionPermissionsResponse:
    """Return the exception types the caller's role may act on."""
    allowed = actionable_exception_types(principal.role)
    return ExceptionPermissionsResponse(
        role=principal.role,
        actionable_exception_types=[t for t in ExceptionType if t in allowed],
        can_action={t: t in allowed for t in ExceptionType},
    )


@router.get("/exceptions/{exception_type}", response_model=ExceptionPermissionCheck)
async def check_exception_permission(
    exception_type: ExceptionType,
    principal: Principal = Depends(get_current_principal),
) -> ExceptionPermissionCheck:
    """Return whether the caller may act on one exception type."""
    return ExceptionPermissionCheck(
        exception_type=exception_type,
        can_action=can_action_exception(principal.role, exception_type),
    )
