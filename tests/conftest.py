"""Pytest configuration and fixtures for account-purge.

Uses account_purge.main:app for HTTP tests and the in-memory fakes in
fakes.py for the workflow stages. No Firestore, Firebase Auth or Redis is
needed to run the suite.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from account_purge.application.dtos.account_deletion import AuthSession
from account_purge.core.limiter import limiter
from account_purge.main import app
from fakes import (
    FakeIdentityProvider,
    FakeSessionCache,
    InMemoryDocumentStore,
    scenario_documents,
)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Rate limits start empty."""
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def session() -> AuthSession:
    """Signed-in session for U1 (matches the default FakeIdentityProvider)."""
    return AuthSession(uid="U1", email="u1@example.com", id_token="session-id-token")


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def session_cache() -> FakeSessionCache:
    return FakeSessionCache()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Store seeded with the U1 scenario (thread T1, group G1, N1/N2, F1)."""
    return InMemoryDocumentStore(scenario_documents())
