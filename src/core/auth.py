"""Authentication module for bearer tokens issued by the identity provider.

Supports:
- Token validation with key rotation
- Local dev token creation
- FastAPI dependency for extracting the current principal and its role
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from src.core.config import Settings, get_settings
from src.core.models import Principal, parse_role

logger = logging.getLogger(__name__)

# Bearer token scheme (auto_error=False so we control the 401)
bearer_scheme = HTTPBearer(auto_error=False)

ROLE_CLAIM = "role"


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(
    data: dict[str, Any],
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        data: Claims to include in the token (must include "sub" and "role").
        settings: Application settings. Defaults to get_settings().
        expires_delta: Custom expiry. Defaults to config value.

    Returns:
        Encoded JWT string.
    """
    if settings is None:
        settings = get_settings()

    to_encode = data.copy()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.jwt_signing_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: The raw JWT string.
        settings: Application settings.

    Returns:
        The decoded claims dict.

    Raises:
        HTTPException: If the token is invalid or expired.
    """
    if settings is None:
        settings = get_settings()

    # Try each verification key (supports key rotation)
    last_exc: PyJWTError | None = None
    for key in settings.jwt_verification_keys:
        try:
            return jwt.decode(
                token,
                key,
                algorithms=[settings.jwt_algorithm],
            )
        except PyJWTError as exc:
            last_exc = exc
            continue

    logger.info("Rejected bearer token: %s", last_exc)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    ) from last_exc


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """FastAPI dependency that extracts the caller's identity and role.

    A missing or unrecognized role claim is treated as "not authorized";
    there is no default role to fall back on.

    Raises:
        HTTPException 401: If the token is missing, invalid or has no subject.
        HTTPException 403: If the role claim is absent or not a known role.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials, settings)

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    role = parse_role(payload.get(ROLE_CLAIM))
    if role is None:
        logger.warning("Token for subject %s carries no recognized role", subject)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unrecognized role",
        )

    return Principal(subject=str(subject), role=role)
