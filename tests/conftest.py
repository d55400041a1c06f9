# tests/conftest.py

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from taskflow.main import create_app
from taskflow.models_tasks import TaskCreate
from taskflow.service_tasks import TaskService
from taskflow.store_apikeys import ApiKeyManager
from taskflow.store_tasks import TaskStore

START = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> datetime:
    """
    Make store timestamps strictly increasing (one second per call).

    Tests that rely on creation order would otherwise depend on the
    resolution of the system clock.
    """
    ticks = itertools.count()
    monkeypatch.setattr(
        "taskflow.store_tasks.utc_now",
        lambda: START + timedelta(seconds=next(ticks)),
    )
    return START


@pytest.fixture()
def store(clock: datetime) -> TaskStore:
    return TaskStore()


@pytest.fixture()
def service(store: TaskStore) -> TaskService:
    return TaskService(store, default_page_size=10, upcoming_days=7)


@pytest.fixture()
def add_task(service: TaskService):
    """Create a task through the service: add_task(owner, title, **fields)."""

    def _add(owner: str, title: str, **fields):
        return service.create_task(owner, TaskCreate(title=title, **fields))

    return _add


@pytest.fixture()
def keys() -> ApiKeyManager:
    return ApiKeyManager(storage_path=None)


@pytest.fixture()
def client(store: TaskStore, keys: ApiKeyManager) -> TestClient:
    return TestClient(create_app(task_store=store, apikey_manager=keys))


@pytest.fixture()
def alice(keys: ApiKeyManager) -> dict:
    return {"Authorization": f"Bearer {keys.create_key('alice', 'laptop')['key']}"}


@pytest.fixture()
def bob(keys: ApiKeyManager) -> dict:
    return {"Authorization": f"Bearer {keys.create_key('bob', 'phone')['key']}"}
