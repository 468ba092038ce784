"""Safe, user-facing error messages.

Maps HTTP status codes to a fixed set of pre-approved strings. Raw backend
error text must never reach the user: it may carry file paths, SQL
fragments, stack traces or upstream service names. Only the numeric status
of a failure is ever inspected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "An error occurred. Please try again or contact support."

SAFE_ERROR_MESSAGES: Mapping[int, str] = MappingProxyType(
    {
        400: "Invalid request. Please check your input and try again.",
        401: "Your session has expired. Please log in again.",
        403: "You do not have permission to perform this action.",
        404: "The requested item was not found.",
        409: "A conflict occurred. The item may already exist.",
        413: "The file is too large. Maximum size is 100MB.",
        422: "The submitted data is invalid. Please review your input.",
        429: "Too many requests. Please wait a moment and try again.",
        500: "An unexpected error occurred. Please try again later.",
        502: "Service temporarily unavailable. Please try again shortly.",
        503: "Service temporarily unavailable. Please try again shortly.",
    }
)


def _as_status(value: Any) -> int | None:
    """Normalise a candidate status to a plain int, or None.

    Integral floats count (a JSON client may send 404.0). bool is an int
    subclass but never a status code. Subclasses are converted so that the
    table lookup only ever hashes a built-in int.
    """
    try:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            code = int(value)
        elif isinstance(value, float) and value.is_integer():
            code = int(value)
        else:
            return None
    except Exception:  # Intentionally broad: a hostile status must not break translation
        logger.debug("Status value raised while being normalised")
        return None
    return code if type(code) is int else None


def extract_status(signal: Any) -> int | None:
    """Pull a numeric HTTP status out of a failure signal.

    Looks at, in order: a bare int, a ``status`` attribute, a
    ``status_code`` attribute (Starlette/FastAPI ``HTTPException``) and
    ``response.status_code`` (``httpx.HTTPStatusError``). Message fields
    are never read.

    Returns:
        The status code, or None if the signal carries none.
    """
    if signal is None:
        return None
    try:
        direct = _as_status(signal)
        if direct is not None:
            return direct
        for attr in ("status", "status_code"):
            found = _as_status(getattr(signal, attr, None))
            if found is not None:
                return found
        response = getattr(signal, "response", None)
        if response is not None:
            return _as_status(getattr(response, "status_code", None))
    except Exception:  # Intentionally broad: a hostile signal must not break translation
        logger.debug("Failure signal raised while probing for a status code")
    return None


def get_safe_error_message_by_status(status: int | None) -> str:
    """Return the safe message for a status code, or the fallback."""
    code = _as_status(status)
    if code is None:
        return FALLBACK_ERROR_MESSAGE
    return SAFE_ERROR_MESSAGES.get(code, FALLBACK_ERROR_MESSAGE)


def get_safe_error_message(signal: Any) -> str:
    """Translate any failure signal into a safe, user-facing message.

    Accepts exceptions, response-like objects, bare status codes and None.
    Never raises and never echoes any part of the signal.
    """
    status = extract_status(signal)
    if status is None:
        return FALLBACK_ERROR_MESSAGE
    return get_safe_error_message_by_status(status)
