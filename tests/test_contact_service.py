"""Tests for ContactService"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from unittest.mock import MagicMock

from models.contact_message import ContactMessage
from repositories.contact_repo import ContactRepository
from security.rate_limiter import RateLimiter
from services.contact_service import MESSAGE_NOT_FOUND, TOO_MANY_SUBMISSIONS, ContactService


def persist(message: ContactMessage) -> ContactMessage:
    """Mimic the database assigning id and timestamps."""
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return replace(message, id=1, created_at=now, updated_at=now)


@pytest.fixture
def limiter():
    return RateLimiter(max_events=2, window_seconds=3600)


@pytest.fixture
def service(mock_pool, limiter):
    svc = ContactService(mock_pool, rate_limiter=limiter)
    svc.repo = MagicMock(spec=ContactRepository)
    svc.repo.add.side_effect = persist
    return svc


class TestSubmit:

    def test_submission_gets_triage_defaults(self, service, valid_contact):
        """A new message starts unread with medium priority"""
        result = service.submit(valid_contact)
        assert result["success"] is True
        data = result["data"]
        assert data["name"] == "Jane Doe"
        assert data["status"] == "unread"
        assert data["priority"] == "medium"
        assert data["source"] == "contact_form"
        assert data["phone"] is None

    def test_provenance_recorded(self, service, valid_contact):
        service.submit(valid_contact, ip_address="203.0.113.7", user_agent="x" * 600, source="footer")
        message = service.repo.add.call_args[0][0]
        assert message.ip_address == "203.0.113.7"
        assert len(message.user_agent) == 512
        assert message.source == "footer"

    def test_markup_stripped_before_storage(self, service, valid_contact):
        valid_contact["message"] = "<script>alert('hi')</script> Hello"
        service.submit(valid_contact)
        assert "<" not in service.repo.add.call_args[0][0].message

    def test_invalid_submission(self, service, valid_contact):
        valid_contact["email"] = "nope"
        result = service.submit(valid_contact)
        assert result["code"] == "validation"
        assert result["details"] == [{"field": "email", "message": "Please provide a valid email address"}]
        service.repo.add.assert_not_called()

    def test_rate_limited_per_address(self, service, valid_contact):
        assert service.submit(valid_contact, ip_address="10.0.0.1")["success"]
        assert service.submit(valid_contact, ip_address="10.0.0.1")["success"]
        result = service.submit(valid_contact, ip_address="10.0.0.1")
        assert result == {"success": False, "error": TOO_MANY_SUBMISSIONS, "code": "rate-limited"}
        assert service.repo.add.call_count == 2
        assert service.submit(valid_contact, ip_address="10.0.0.2")["success"]

    def test_invalid_submissions_do_not_use_up_the_limit(self, service, valid_contact):
        for _ in range(3):
            service.submit({"name": "Jane Doe"}, ip_address="10.0.0.1")
        assert service.submit(valid_contact, ip_address="10.0.0.1")["success"]


class TestInbox:

    def test_update_status(self, service):
        service.repo.update_status.return_value = ContactMessage(
            id=3, name="Jane Doe", email="jane@example.com", message="Hi", status="read"
        )
        result = service.update_status("3", {"status": "read"})
        service.repo.update_status.assert_called_once_with(3, "read", None)
        assert result["data"]["status"] == "read"
        assert result["data"]["priority"] == "medium"

    def test_update_status_rejects_unknown_status(self, service):
        result = service.update_status(3, {"status": "spam"})
        assert result["code"] == "validation"
        service.repo.update_status.assert_not_called()

    def test_update_missing_message(self, service):
        service.repo.update_status.return_value = None
        result = service.update_status(3, {"status": "archived", "priority": "low"})
        assert result == {"success": False, "error": MESSAGE_NOT_FOUND, "code": "not-found"}

    def test_list_messages_filters(self, service):
        service.repo.find.return_value = []
        result = service.list_messages({"status": "unread", "limit": "10"})
        service.repo.find.assert_called_once_with(limit=10, offset=0, status="unread", priority=None)
        assert result["pagination"] == {"limit": 10, "offset": 0, "has_more": False}

    def test_unread(self, service):
        service.repo.unread.return_value = [
            ContactMessage(id=2, name="A", email="a@example.com", message="urgent", priority="high"),
            ContactMessage(id=1, name="B", email="b@example.com", message="later"),
        ]
        result = service.get_unread()
        assert [m["id"] for m in result["data"]] == [2, 1]
        assert result["count"] == 2

    def test_get_message_not_found(self, service):
        service.repo.get_by_id.return_value = None
        assert service.get_message(12)["code"] == "not-found"

    def test_delete(self, service):
        service.repo.delete.return_value = True
        assert service.delete(12)["success"] is True
