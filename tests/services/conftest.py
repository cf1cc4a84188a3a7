"""Service test fixtures — fake collaborators + FastAPI test client.

Invariants:
    - Every test gets a fresh FakeStore, RecordingNotifier and mutable clock
    - get_context dependency overridden so routes use the test AppContext
    - Tokens are minted by the same verifier the routes check against

Design Decisions:
    - Fake store over SQLite for service tests: failure injection and race
      interleaving are explicit (ADR: SqlDocumentStore has its own tests)
    - Lifespan never runs under ASGITransport: no real database is opened
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from tests.services.fake_store import FakeStore, RecordingNotifier
from tripintake.api.dependencies import get_context
from tripintake.config import Settings
from tripintake.infrastructure.identity import JwtIdentityVerifier
from tripintake.main import app
from tripintake.services.context import AppContext


class Clock:
    """Settable clock; starts at 2024-06-01 09:00 UTC."""

    def __init__(self):
        self.now = datetime(2024, 6, 1, 9, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret-key-long-enough-for-hs256",
        sendgrid_api_key=None,
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def verifier(settings):
    return JwtIdentityVerifier(settings.jwt_secret, settings.jwt_algorithm)


@pytest.fixture
def ctx(settings, store, notifier, clock, verifier):
    return AppContext(
        settings=settings,
        store=store,
        verifier=verifier,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def user_token(verifier):
    return verifier.issue("user-1")


@pytest.fixture
def admin_token(verifier):
    return verifier.issue("admin-1", admin=True)


@pytest.fixture
async def client(ctx):
    """FastAPI test client with the context dependency overridden."""
    app.dependency_overrides[get_context] = lambda: ctx
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
