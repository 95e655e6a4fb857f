"""Pytest configuration and shared fixtures."""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from notifyhub.config import Settings
from notifyhub.main import create_app
from notifyhub.storage import JsonFileStorage, MemoryStorage
from notifyhub.storage.sql import SqlStorage


def make_settings(tmp_path, **overrides) -> Settings:
    values = {"storage_mode": "memory", "data_path": str(tmp_path / "data")}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def memory_storage():
    """Fresh in-memory storage. Needs no initialization."""
    return MemoryStorage()


@pytest_asyncio.fixture
async def json_storage(tmp_path):
    """Initialized JSON file storage in a temporary directory."""
    storage = JsonFileStorage(str(tmp_path / "data"))
    await storage.initialize()
    yield storage
    await storage.close()


@pytest_asyncio.fixture
async def sql_storage(tmp_path):
    """Initialized SQLite-backed storage in a temporary directory."""
    storage = SqlStorage(make_settings(tmp_path, storage_mode="database"))
    await storage.initialize()
    yield storage
    await storage.close()


@pytest_asyncio.fixture(params=["memory", "file", "database"])
async def storage(request, tmp_path):
    """Each storage backend in turn, initialized."""
    if request.param == "memory":
        backend = MemoryStorage()
    elif request.param == "file":
        backend = JsonFileStorage(str(tmp_path / "data"))
    else:
        backend = SqlStorage(make_settings(tmp_path, storage_mode="database"))
    await backend.initialize()
    yield backend
    await backend.close()


@pytest.fixture
def client(tmp_path):
    """API client over a fresh in-memory store."""
    app = create_app(make_settings(tmp_path), storage=MemoryStorage())
    with TestClient(app) as test_client:
        yield test_client
