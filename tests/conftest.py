"""
Pytest configuration and fixtures for Fan Inbox API tests.
"""
import pytest
from fastapi.testclient import TestClient

from fan_inbox.cache import TTLCache
from fan_inbox.config import get_settings
from fan_inbox.data_store import ConversationStore, load_seed
from fan_inbox.inbox import InboxService, get_inbox
from fan_inbox.limiter import limiter
from fan_inbox.main import app

# Disable rate limiting for tests
limiter.enabled = False


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(scope="session")
def seed():
    """The packaged seed document."""
    return load_seed()


@pytest.fixture(scope="function")
def store(seed):
    """A freshly seeded store for each test."""
    return ConversationStore(seed)


@pytest.fixture(scope="function")
def clock():
    return FakeClock()


@pytest.fixture(scope="function")
def cache(clock):
    return TTLCache(ttl_seconds=300, clock=clock)


@pytest.fixture(scope="function")
def inbox(store, cache):
    return InboxService(store, cache)


@pytest.fixture(scope="function")
def client(inbox):
    """Create a test client wired to the per-test inbox."""
    app.dependency_overrides[get_inbox] = lambda: inbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers():
    """Headers carrying the accepted mock token."""
    return {"Authorization": f"Bearer {get_settings().api_token}"}

