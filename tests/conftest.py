"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any guestbook import so the settings
object is built for tests: in-memory storage and no throttling hold.
"""

import os
from datetime import datetime, timezone

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("DB_BACKEND", "memory")
os.environ.setdefault("APP_RATE_LIMIT_DELAY_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from guestbook.adapters.storage.in_memory import InMemoryGuestRepository
from guestbook.api.dependencies import get_repository
from guestbook.main import app

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def repository() -> InMemoryGuestRepository:
    return InMemoryGuestRepository()


@pytest.fixture
def client(repository: InMemoryGuestRepository):
    """Test client wired to a fresh in-memory repository."""
    app.dependency_overrides[get_repository] = lambda: repository
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
