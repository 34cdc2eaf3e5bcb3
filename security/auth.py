"""
security/auth.py
-----------------
Password hashing, access tokens, and the guard decorator for service
methods that require a signed-in user.
"""

from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Callable, Optional

import bcrypt
import jwt

from config import BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_EXPIRES_DAYS, JWT_SECRET
from models.user import User
from services.envelope import FORBIDDEN, UNAUTHORIZED, fail
from utils.logger import get_logger

logger = get_logger(__name__)


# ── Passwords ─────────────────────────────────────────────

def hash_password(password: str) -> str:
    """Hash a password with bcrypt (salted, ``BCRYPT_ROUNDS`` cost)."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash. Malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ── Tokens ────────────────────────────────────────────────

def issue_token(user: User, expires_in: Optional[timedelta] = None) -> str:
    """
    Sign an access token for ``user``.

    Claims:
        sub: User id as a string.
        user_id / username / email / role: Copied from the user.
        iat / exp: Issue and expiry times (default lifetime JWT_EXPIRES_DAYS).
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "user_id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + (expires_in or timedelta(days=JWT_EXPIRES_DAYS)),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: Optional[str]) -> Optional[dict[str, Any]]:
    """
    Verify a token and return its claims.

    A leading ``Bearer `` is accepted so raw Authorization header values can
    be passed straight through.

    Returns:
        The claims dict, or None if the token is missing, malformed,
        tampered with, or expired.
    """
    if not token or not isinstance(token, str):
        return None
    if token.startswith("Bearer "):
        token = token[len("Bearer "):]
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError:
        return None


def authorized_only(admin: bool = False) -> Callable:
    """
    Decorator that restricts a service method to holders of a valid token.

    The wrapped method is called as ``method(self, token, ...)`` and receives
    the decoded claims in place of the token.

    Usage:
        @authorized_only()
        def me(self, claims): ...

    Behavior:
        - Missing/invalid/expired token: ``unauthorized`` envelope.
        - ``admin=True`` and the role is not admin: ``forbidden`` envelope.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, token, *args, **kwargs):
            claims = decode_token(token)
            if not claims:
                return fail("Invalid or expired token", UNAUTHORIZED)
            if admin and claims.get("role") != "admin":
                logger.warning(
                    f"🚫 Non-admin user {claims.get('username')} (id={claims.get('user_id')}) "
                    f"denied access to {func.__qualname__}"
                )
                return fail("Admin access required", FORBIDDEN)
            return func(self, claims, *args, **kwargs)
        return wrapper
    return decorator
