"""
models/user.py
--------------
Domain model for site accounts.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass
class User:
    username: str
    email: str
    password_hash: str = ""
    role: str = "user"  # 'admin' | 'user'
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=row.get("id"),
            username=row["username"],
            email=row["email"],
            password_hash=row.get("password_hash", ""),
            role=row.get("role", "user"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict:
        """Public representation; the password hash is never included."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
