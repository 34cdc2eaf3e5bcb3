"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from db.connection import DatabasePool
from models.user import User
from utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for CRUD operations on the users table."""

    def __init__(self, db: DatabasePool):
        self.db = db

    def add(self, username: str, email: str, password_hash: str, role: str = "user") -> User:
        """
        Insert a user. Duplicate usernames or emails are rejected by the
        unique constraints (``psycopg2.errors.UniqueViolation`` propagates).
        """
        sql = """
            INSERT INTO users (username, email, password_hash, role)
            VALUES (%s, %s, %s, %s)
            RETURNING *;
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (username, email, password_hash, role))
            user = User.from_row(cur.fetchone())
        logger.info(f"Registered user #{user.id} '{user.username}' (role={user.role})")
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM users WHERE id = %s;", (user_id,))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def get_by_login(self, identifier: str) -> Optional[User]:
        """
        Fetch a user by username or email.

        Args:
            identifier: A username, or an email (matched case-insensitively).
        """
        sql = "SELECT * FROM users WHERE username = %s OR email = %s LIMIT 1;"
        with self.db.cursor() as cur:
            cur.execute(sql, (identifier, identifier.lower()))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def update_password(self, user_id: int, password_hash: str) -> bool:
        sql = "UPDATE users SET password_hash = %s WHERE id = %s;"
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (password_hash, user_id))
            updated = cur.rowcount > 0
        if updated:
            logger.info(f"Password changed for user #{user_id}")
        return updated

    def count(self) -> int:
        with self.db.cursor() as cur:
            cur.execute("SELECT COUNT(*) AS total FROM users;")
            return int(cur.fetchone()["total"])
