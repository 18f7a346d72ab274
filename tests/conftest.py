"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("USER_CACHE_TTL_SECONDS", "0")
    os.environ.setdefault("AUTH_TOKEN_CACHE_TTL_SECONDS", "0")


# Settings are read at import time, so the environment must be ready before
# any test module imports the package.
_set_default_env()

from fakes import FakeSupabaseClient  # noqa: E402


@pytest.fixture
def db() -> FakeSupabaseClient:
    """Fresh in-memory database per test."""
    return FakeSupabaseClient()


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from classbank.main import app

    return TestClient(app)


@pytest.fixture
def login(client: TestClient, db: FakeSupabaseClient) -> Iterator[Callable[[str], TestClient]]:
    """Route requests to the fake database as the given user id."""
    from classbank.dependencies import get_authenticated_user, get_db_client
    from classbank.main import app

    app.dependency_overrides[get_db_client] = lambda: db

    def _login(user_id: str) -> TestClient:
        app.dependency_overrides[get_authenticated_user] = lambda: SimpleNamespace(
            id=user_id, email=f"{user_id}@example.com"
        )
        return client

    yield _login
    app.dependency_overrides.clear()
