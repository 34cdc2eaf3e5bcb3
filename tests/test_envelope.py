"""Tests for result envelopes, the guarded decorator, and log redaction"""

import logging

from db.errors import BackendUnavailableError
from services.envelope import UNAVAILABLE_MESSAGE, fail, guarded, invalid, ok
from utils.logger import RedactingFilter, redact


class TestEnvelopes:

    def test_ok(self):
        assert ok() == {"success": True}
        assert ok([1], count=1) == {"success": True, "data": [1], "count": 1}

    def test_fail(self):
        assert fail("Nope") == {"success": False, "error": "Nope"}
        assert fail("Nope", "not-found") == {"success": False, "error": "Nope", "code": "not-found"}

    def test_invalid(self):
        errors = [{"field": "title", "message": "Title is required"}]
        assert invalid(errors) == {
            "success": False, "error": "Validation failed", "code": "validation", "details": errors,
        }


class Worker:
    def __init__(self, exc=None):
        self.exc = exc

    @guarded("Failed to do the thing")
    def run(self):
        if self.exc:
            raise self.exc
        return ok("done")


class TestGuarded:

    def test_passes_results_through(self):
        assert Worker().run() == {"success": True, "data": "done"}

    def test_backend_unavailable(self):
        result = Worker(BackendUnavailableError("timeout")).run()
        assert result == {"success": False, "error": UNAVAILABLE_MESSAGE, "code": "backend-unavailable"}

    def test_unexpected_error_logged_not_exposed(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = Worker(KeyError("password_hash")).run()
        assert result == {"success": False, "error": "Failed to do the thing", "code": "internal"}
        assert "Worker.run failed" in caplog.text

    def test_preserves_metadata(self):
        assert Worker.run.__name__ == "run"


class TestRedaction:

    def test_password_values_masked(self):
        text = "payload={'username': 'jane', 'password': 'hunter2', \"new_password\": \"s3cret\"}"
        redacted = redact(text)
        assert "hunter2" not in redacted
        assert "s3cret" not in redacted
        assert "'username': 'jane'" in redacted

    def test_bearer_tokens_masked(self):
        assert redact("Authorization: Bearer aaa.bbb.ccc") == "Authorization: Bearer ***"

    def test_filter_rewrites_record(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "login %s", ({"password": "hunter2"},), None)
        assert RedactingFilter().filter(record) is True
        assert "hunter2" not in record.getMessage()
