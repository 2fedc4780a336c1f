"""Shared pytest fixtures for chatnotes tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from chatnotes.catalog.store import StateStore
from chatnotes.importer.router import get_reconcile_service
from chatnotes.importer.service import ReconcileService
from chatnotes.main import app
from tests.fixtures import InMemoryStorage


@pytest.fixture
def storage():
    """Empty in-memory vault."""
    return InMemoryStorage()


@pytest.fixture
def state_store(tmp_path):
    """State document in a temporary directory."""
    return StateStore(tmp_path / "state" / "chatnotes.json")


@pytest.fixture
async def service(storage, state_store):
    svc = ReconcileService(storage, state_store)
    await svc.load()
    return svc


@pytest.fixture
async def client(service):
    """Async test client with the reconcile service wired into the app."""
    app.dependency_overrides[get_reconcile_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
