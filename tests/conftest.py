"""
tests/conftest.py -- Shared test fixtures for the Sigma test suite.

This module provides:
  - engine: fresh in-memory SQLite engine per test
  - admin_store / admin_service / token_service / authenticator
  - session_store / session_service
  - api_client: TestClient with an admin JWT for API integration tests

Design: API tests use named shared-memory SQLite URIs (not plain :memory:)
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. Unit tests stay on one thread and use plain :memory:.

DEBUG must be set before any api/ import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. LOGIN_RATE_LIMIT is raised so the
login tests in one session never trip the limiter.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any core/api import so get_settings() reads them.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.service import AdminService
from auth.store import AdminStore
from auth.strategies import Authenticator
from auth.tokens import TokenService
from core.database import create_db_engine
from sessions.service import TableSessionService
from sessions.store import TableSessionStore

TEST_SECRET = "test-secret-key-with-at-least-32-characters"
TEST_ISSUER = "sigma"

ADMIN_EMAIL = "testadmin@example.com"
ADMIN_NAME = "Test Admin"
ADMIN_PASSWORD = "Secr3t!Pass"


# ---------------------------------------------------------------------------
# Unit-level fixtures -- one isolated in-memory DB per test
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = create_db_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def admin_store(engine: Engine) -> AdminStore:
    return AdminStore(engine)


@pytest.fixture
def admin_service(admin_store: AdminStore) -> AdminService:
    return AdminService(admin_store)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_SECRET, issuer=TEST_ISSUER)


@pytest.fixture
def authenticator(admin_service: AdminService, token_service: TokenService) -> Authenticator:
    return Authenticator(admin_service, token_service)


@pytest.fixture
def session_store(engine: Engine) -> TableSessionStore:
    return TableSessionStore(engine)


@pytest.fixture
def session_service(session_store: TableSessionStore) -> TableSessionService:
    return TableSessionService(session_store)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine, admin_service: AdminService, token_service: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires test services into app.state so TestClient routes see an isolated
    test DB rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.admin_service = admin_service
        app.state.token_service = token_service
        app.state.authenticator = Authenticator(admin_service, token_service)
        app.state.table_session_service = TableSessionService(TableSessionStore(engine))
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, email) for API integration tests.

    Each test module gets its own named shared-memory DB. The admin is
    created before the client starts and a JWT is minted for the
    Authorization header.
    """
    db_name = request.module.__name__.rsplit(".", 1)[-1]
    eng = create_db_engine(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    admin_service = AdminService(AdminStore(eng))
    token_service = TokenService(secret=TEST_SECRET, issuer=TEST_ISSUER)

    admin_service.register_admin(ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD)
    token = token_service.create_token(ADMIN_EMAIL)

    app.router.lifespan_context = _patch_lifespan(eng, admin_service, token_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, ADMIN_EMAIL

    eng.dispose()
