"""
services/auth_service.py
-------------------------
Account registration, sign-in, and admin seeding.
"""

from typing import Any, Mapping, Optional

from psycopg2 import errors as pg_errors

from db.connection import DatabasePool
from repositories.user_repo import UserRepository
from security.auth import authorized_only, hash_password, issue_token, verify_password
from services.envelope import CONFLICT, NOT_FOUND, UNAUTHORIZED, VALIDATION, fail, guarded, invalid, ok
from utils.logger import get_logger
from validation import sanitize_text, validate
from validation.schemas import CHANGE_PASSWORD, LOGIN, REGISTER

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _without_passwords(data: Optional[Mapping[str, Any]], *secret_keys: str) -> Any:
    """
    Sanitize everything except the secret fields, which are hashed or
    compared verbatim.
    """
    if not isinstance(data, Mapping):
        return data
    cleaned = sanitize_text({k: v for k, v in data.items() if k not in secret_keys})
    cleaned.update({k: data[k] for k in secret_keys if k in data})
    return cleaned


class AuthService:
    """Handles all business logic related to user accounts."""

    def __init__(self, db: DatabasePool):
        self.repo = UserRepository(db)

    @guarded("Registration failed")
    def register(self, data: Optional[Mapping[str, Any]]) -> dict:
        """
        Create a regular user account.

        Returns:
            Envelope with ``data`` = {"user": ..., "token": ...}, or a
            ``conflict`` failure when the username or email is taken.
        """
        result = validate(REGISTER, _without_passwords(data, "password"))
        if not result.success:
            return invalid(result.errors)
        fields = result.data

        try:
            user = self.repo.add(fields["username"], fields["email"], hash_password(fields["password"]))
        except pg_errors.UniqueViolation:
            return fail("Username or email already exists", CONFLICT)
        return ok({"user": user.to_dict(), "token": issue_token(user)}, message="User registered successfully")

    @guarded("Login failed")
    def login(self, data: Optional[Mapping[str, Any]]) -> dict:
        """
        Sign in with a username or email.
        An unknown account and a wrong password produce the same failure.
        """
        result = validate(LOGIN, _without_passwords(data, "password"))
        if not result.success:
            return invalid(result.errors)

        user = self.repo.get_by_login(result.data["username"])
        if user is None or not verify_password(result.data["password"], user.password_hash):
            logger.info(f"Failed login attempt for '{result.data['username']}'")
            return fail(INVALID_CREDENTIALS, UNAUTHORIZED)

        logger.info(f"🔑 User #{user.id} '{user.username}' signed in")
        return ok({"user": user.to_dict(), "token": issue_token(user)}, message="Login successful")

    @guarded("Failed to fetch user")
    @authorized_only()
    def me(self, claims: dict) -> dict:
        """Profile of the token holder."""
        user = self.repo.get_by_id(claims["user_id"])
        if user is None:
            return fail("User not found", NOT_FOUND)
        return ok(user.to_dict())

    @guarded("Failed to change password")
    @authorized_only()
    def change_password(self, claims: dict, data: Optional[Mapping[str, Any]]) -> dict:
        result = validate(CHANGE_PASSWORD, data)
        if not result.success:
            return invalid(result.errors)

        user = self.repo.get_by_id(claims["user_id"])
        if user is None:
            return fail("User not found", NOT_FOUND)
        if not verify_password(result.data["current_password"], user.password_hash):
            return fail("Current password is incorrect", VALIDATION)

        self.repo.update_password(user.id, hash_password(result.data["new_password"]))
        return ok(message="Password changed successfully")

    @guarded("Failed to create admin user")
    def ensure_admin(self, username: str, email: str, password: str) -> dict:
        """
        Seed the first admin account. Does nothing once any user exists.

        Returns:
            Envelope whose ``data`` is the created admin, with ``created``
            False when seeding was skipped.
        """
        if self.repo.count() > 0:
            logger.info("Users already exist, skipping admin seed")
            return ok(created=False)

        result = validate(REGISTER, {"username": username, "email": email, "password": password})
        if not result.success:
            logger.error(f"Admin credentials from config are invalid: {result.errors}")
            return invalid(result.errors, "Invalid admin credentials")

        fields = result.data
        try:
            user = self.repo.add(fields["username"], fields["email"], hash_password(fields["password"]), role="admin")
        except pg_errors.UniqueViolation:
            # Another process seeded concurrently
            return ok(created=False)
        logger.info(f"👑 Seeded admin user '{user.username}'")
        return ok(user.to_dict(), created=True)
