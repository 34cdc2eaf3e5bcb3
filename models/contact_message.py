"""
models/contact_message.py
-------------------------
Domain model for messages submitted through the public contact form.
"""

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass
class ContactMessage:
    """
    Represents one contact form submission.

    Attributes:
        status: 'unread' | 'read' | 'replied' | 'archived'. Any value may
            follow any other; there is no enforced ordering.
        priority: 'low' | 'medium' | 'high'.
        source / ip_address / user_agent: Provenance of the submission,
            kept for triage.
    """
    name: str
    email: str
    message: str
    phone: Optional[str] = None
    company: Optional[str] = None
    subject: Optional[str] = None
    status: str = "unread"
    priority: str = "medium"
    source: Optional[str] = "contact_form"
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ContactMessage":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in names})

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data

    def __str__(self) -> str:
        return f"#{self.id} [{self.status}/{self.priority}] {self.name} <{self.email}>: {self.subject or '(no subject)'}"
