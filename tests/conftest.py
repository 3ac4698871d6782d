"""
tests/conftest.py -- Shared test fixtures for the user management service.

This module provides:
  - _make_test_store(): an isolated named shared-memory SQLite UserStore
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - api_client: TestClient + admin JWT + admin id, one isolated DB per test module
  - store: plain in-memory UserStore for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any app import: get_settings()
is cached on first use, and the limiter reads it at import time.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import so get_settings() auto-generates
# SECRET_KEY in dev mode and the login/register limits do not trip mid-suite.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.tokens import create_access_token, hash_password
from users.models import User
from users.service import UserService
from users.store import UserStore

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (the module name is used).
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store and a service over it into app.state so
    TestClient routes see an isolated test DB rather than the configured one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.user_service = UserService(user_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, admin_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers and the real auth gate but an isolated in-memory
    store. The admin row doubles as the token's principal, so it is present
    in every listing. Tests reach the store through client.app.state.user_store.
    """
    user_store = _make_test_store(request.module.__name__.rsplit(".", 1)[-1])

    admin = User(
        full_name="Test Admin",
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
        enabled=True,
        role_id=3,
    )
    uid = user_store.create_user(admin)
    token = create_access_token(user_id=uid, email=ADMIN_EMAIL, role_id=3, expire_seconds=3600)

    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    user_store.close()


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """Empty in-memory UserStore for unit tests."""
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()
