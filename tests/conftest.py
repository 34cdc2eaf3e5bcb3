"""Pytest configuration and shared fixtures"""

import os
from contextlib import contextmanager
from datetime import datetime, timezone

# Must be set before config is imported anywhere
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from unittest.mock import MagicMock

from models.user import User


class FakeCursor:
    """Records every statement and hands back canned rows."""

    def __init__(self, rows=None, rowcount=0):
        self.rows = list(rows or [])
        self.rowcount = rowcount
        self.executed = []
        self.procs = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def callproc(self, name, params=()):
        self.procs.append((name, tuple(params)))

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)


class FakePool:
    """Stands in for DatabasePool; every cursor() yields the same FakeCursor."""

    def __init__(self, rows=None, rowcount=0):
        self.cur = FakeCursor(rows, rowcount)
        self.commits = []

    @contextmanager
    def cursor(self, commit=False):
        self.commits.append(commit)
        yield self.cur


def project_row(**overrides) -> dict:
    """A projects row as RealDictCursor would return it."""
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    row = {
        "id": 1,
        "title": "Test Project",
        "slug": "test-project",
        "description": "A test project",
        "short_description": None,
        "category": "web",
        "technologies": ["Python"],
        "tags": [],
        "client": None,
        "client_url": None,
        "project_url": None,
        "github_url": None,
        "demo_url": None,
        "image_url": None,
        "thumbnail_url": None,
        "video_url": None,
        "model_url": None,
        "featured": False,
        "published": True,
        "featured_order": 0,
        "project_order": 0,
        "start_date": None,
        "end_date": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def mock_pool():
    """A pool whose methods must never be reached (services with mocked repos)."""
    return MagicMock()


@pytest.fixture
def valid_project():
    """Minimal valid create payload"""
    return {
        "title": "Test Project",
        "slug": "test-project",
        "description": "A test project",
        "category": "web",
        "technologies": ["Python"],
    }


@pytest.fixture
def valid_contact():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "message": "Hello, I'd like to discuss a project.",
    }


@pytest.fixture
def admin_user():
    return User(id=1, username="admin", email="admin@example.com", role="admin")


@pytest.fixture
def regular_user():
    return User(id=2, username="visitor", email="visitor@example.com", role="user")
