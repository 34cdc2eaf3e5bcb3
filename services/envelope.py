"""
services/envelope.py
--------------------
The uniform result shape returned by every service operation:

    {"success": True,  "data": ..., **extra}
    {"success": False, "error": "<message safe to show>", "code": "<hint>", **extra}

``code`` is transport-agnostic; an HTTP adapter maps it to a status code.
"""

from functools import wraps
from typing import Any, Callable, Optional

from db.errors import BackendUnavailableError
from utils.logger import get_logger

logger = get_logger(__name__)

# ── Failure codes ─────────────────────────────────────────
VALIDATION = "validation"
NOT_FOUND = "not-found"
CONFLICT = "conflict"
UNAUTHORIZED = "unauthorized"
FORBIDDEN = "forbidden"
RATE_LIMITED = "rate-limited"
BACKEND_UNAVAILABLE = "backend-unavailable"
INTERNAL = "internal"

UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again later."


def ok(data: Any = None, **extra) -> dict:
    """Successful envelope. ``data`` is omitted when None."""
    result: dict = {"success": True}
    if data is not None:
        result["data"] = data
    result.update(extra)
    return result


def fail(error: str, code: Optional[str] = None, **extra) -> dict:
    """Failed envelope carrying a caller-safe message."""
    result: dict = {"success": False, "error": error}
    if code is not None:
        result["code"] = code
    result.update(extra)
    return result


def invalid(errors: list[dict], error: str = "Validation failed") -> dict:
    """Failed envelope for per-field validation errors."""
    return fail(error, VALIDATION, details=errors)


def guarded(failure_message: str) -> Callable:
    """
    Decorator that keeps exceptions from crossing the service boundary.

    Backend outages become ``backend-unavailable``; anything else becomes
    ``internal`` with ``failure_message``. The underlying cause is logged
    and never copied into the envelope.

    Usage:
        @guarded("Failed to fetch projects")
        def list_projects(self, params): ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except BackendUnavailableError as e:
                logger.error(f"{func.__qualname__}: backend unavailable: {e}")
                return fail(UNAVAILABLE_MESSAGE, BACKEND_UNAVAILABLE)
            except Exception:
                logger.exception(f"{func.__qualname__} failed")
                return fail(failure_message, INTERNAL)
        return wrapper
    return decorator
