"""
Pytest fixtures for TaskDesk tests.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test config is set before importing taskdesk modules.
os.environ["TASKDESK_ENV"] = "development"
os.environ["TASKDESK_ALLOW_INSECURE_DEV"] = "false"
os.environ["TASKDESK_STORE_BACKEND"] = "sql"
os.environ["TASKDESK_AUTH_USERNAME"] = "admin"
os.environ["TASKDESK_AUTH_PASSWORD"] = "password123"

from taskdesk.observability.metrics import metrics
from taskdesk.store import RedisTaskStore, SqlTaskStore

from tests.fakes import FakeRedis

CREDENTIALS = ("admin", "password123")


@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts with empty counters."""
    metrics.reset()
    yield


@pytest.fixture
async def sql_store(tmp_path):
    """SQL store on a throwaway SQLite file."""
    store = SqlTaskStore(f"sqlite+aiosqlite:///{tmp_path / 'taskdesk_test.db'}")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
async def redis_store():
    """Document store on an in-memory fake redis client."""
    store = RedisTaskStore(key_prefix="taskdesk-test", client=FakeRedis())
    await store.connect()
    yield store
    await store.close()


@pytest.fixture(params=["sql", "redis"])
async def store(request, tmp_path):
    """Run the test once per store backend."""
    if request.param == "sql":
        backend = SqlTaskStore(f"sqlite+aiosqlite:///{tmp_path / 'taskdesk_test.db'}")
    else:
        backend = RedisTaskStore(key_prefix="taskdesk-test", client=FakeRedis())
    await backend.connect()
    yield backend
    await backend.close()


def _app_with_store(store):
    from taskdesk.api.deps import get_store
    from taskdesk.main import app

    app.dependency_overrides[get_store] = lambda: store
    return app


@pytest.fixture
async def client(store):
    """Authenticated async test client bound to the parametrized store."""
    from taskdesk.main import app

    transport = ASGITransport(app=_app_with_store(store))
    async with AsyncClient(transport=transport, base_url="http://test", auth=CREDENTIALS) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(sql_store):
    """Async test client that sends no credentials."""
    from taskdesk.main import app

    transport = ASGITransport(app=_app_with_store(sql_store))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
