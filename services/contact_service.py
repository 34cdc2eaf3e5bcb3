"""
services/contact_service.py
----------------------------
Business logic for the public contact form and the admin inbox.
"""

from typing import Any, Mapping, Optional

from db.connection import DatabasePool
from models.contact_message import ContactMessage
from repositories.contact_repo import ContactRepository
from security.rate_limiter import RateLimiter
from services.envelope import NOT_FOUND, RATE_LIMITED, fail, guarded, invalid, ok
from utils.logger import get_logger
from validation import sanitize_text, validate, validate_id
from validation.schemas import CONTACT_CREATE, CONTACT_STATUS_UPDATE, MESSAGE_FILTER

logger = get_logger(__name__)

MESSAGE_NOT_FOUND = "Message not found"
TOO_MANY_SUBMISSIONS = "Too many contact form submissions. Please try again later."

# Column widths
_IP_MAX = 45
_USER_AGENT_MAX = 512


class ContactService:
    """
    Handles contact form submissions and inbox management.

    Args:
        db: Open DatabasePool.
        rate_limiter: Limits submissions per caller address. A default
            limiter (configured from .env) is created when omitted.
    """

    def __init__(self, db: DatabasePool, rate_limiter: Optional[RateLimiter] = None):
        self.repo = ContactRepository(db)
        self.rate_limiter = rate_limiter or RateLimiter()

    @guarded("Failed to send message. Please try again later.")
    def submit(
        self,
        data: Optional[Mapping[str, Any]],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        source: str = "contact_form",
    ) -> dict:
        """
        Store a contact form submission.

        Invalid submissions are rejected before they count against the
        caller's rate limit.

        Returns:
            Envelope with the stored message (status 'unread', priority
            'medium') or a validation / rate-limited failure.
        """
        result = validate(CONTACT_CREATE, sanitize_text(data))
        if not result.success:
            return invalid(result.errors)

        if ip_address and not self.rate_limiter.allow(ip_address):
            return fail(TOO_MANY_SUBMISSIONS, RATE_LIMITED)

        message = ContactMessage(
            **result.data,
            source=source,
            ip_address=ip_address[:_IP_MAX] if ip_address else None,
            user_agent=user_agent[:_USER_AGENT_MAX] if user_agent else None,
        )
        saved = self.repo.add(message)
        logger.info(f"📩 New contact message {saved}")
        return ok(saved.to_dict(), message="Thank you for your message! I'll get back to you soon.")

    @guarded("Failed to fetch messages")
    def list_messages(self, params: Optional[Mapping[str, Any]] = None) -> dict:
        result = validate(MESSAGE_FILTER, params)
        if not result.success:
            return invalid(result.errors, "Invalid query parameters")
        query = result.data
        messages = self.repo.find(
            limit=query["limit"],
            offset=query["offset"],
            status=query.get("status"),
            priority=query.get("priority"),
        )
        return ok(
            [m.to_dict() for m in messages],
            count=len(messages),
            pagination={
                "limit": query["limit"],
                "offset": query["offset"],
                "has_more": len(messages) == query["limit"],
            },
        )

    @guarded("Failed to fetch unread messages")
    def get_unread(self) -> dict:
        """Unread messages, most urgent first."""
        messages = self.repo.unread()
        return ok([m.to_dict() for m in messages], count=len(messages))

    @guarded("Failed to fetch message")
    def get_message(self, message_id: Any) -> dict:
        checked = validate_id(message_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        message = self.repo.get_by_id(checked.data["id"])
        if message is None:
            return fail(MESSAGE_NOT_FOUND, NOT_FOUND)
        return ok(message.to_dict())

    @guarded("Failed to update message")
    def update_status(self, message_id: Any, data: Optional[Mapping[str, Any]]) -> dict:
        """
        Change a message's status, and its priority if given.
        Any status may follow any other.
        """
        checked = validate_id(message_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        result = validate(CONTACT_STATUS_UPDATE, data)
        if not result.success:
            return invalid(result.errors)

        message = self.repo.update_status(
            checked.data["id"], result.data["status"], result.data.get("priority")
        )
        if message is None:
            return fail(MESSAGE_NOT_FOUND, NOT_FOUND)
        return ok(message.to_dict(), message="Message updated successfully")

    @guarded("Failed to delete message")
    def delete(self, message_id: Any) -> dict:
        checked = validate_id(message_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        if not self.repo.delete(checked.data["id"]):
            return fail(MESSAGE_NOT_FOUND, NOT_FOUND)
        return ok(message="Message deleted successfully")
