"""
Pytest configuration and fixtures for the paste lifecycle tests.

The in-memory store stands in for Redis and a controllable clock drives expiry.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from pastebin.config import settings
from pastebin.database import InMemoryStore, PasteStore
from pastebin.main import create_app
from pastebin.models import PasteCreate
from pastebin.service import PasteService


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def fast_kdf(monkeypatch):
    """Keep key derivation cheap in tests"""
    monkeypatch.setattr(settings, "KDF_ITERATIONS", 1000)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    """Provide a fresh in-memory PasteStore for each test"""
    return PasteStore(InMemoryStore(), using_fallback=True, clock=clock)


@pytest.fixture
def service(store):
    return PasteService(store)


@pytest.fixture
def make_paste(service):
    """Create a paste through the engine and return its id"""
    def _make(content="hello world", **kwargs):
        return service.create_paste(PasteCreate(content=content, **kwargs))
    return _make


@pytest.fixture
def client(store):
    """TestClient serving from the test store"""
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client
