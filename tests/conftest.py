"""Shared pytest fixtures for subscription API tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from subscription_api.app.core.config import Settings
from subscription_api.app.core.db import init_db
from subscription_api.app.main import create_app
from subscription_api.app.repositories import (
    InMemorySubscriptionRepository,
    SQLiteSubscriptionRepository,
)
from subscription_api.app.services.subscription_service import SubscriptionService

USER_ID = "60601fee-2bf1-4721-ae6f-7636e79a0cba"
OTHER_USER_ID = "3f1c2a9e-7b4d-4e8a-9c61-0d2b5e7f8a10"


@pytest.fixture
def memory_repository() -> InMemorySubscriptionRepository:
    return InMemorySubscriptionRepository()


@pytest.fixture
def database_path(tmp_path: Path) -> str:
    """SQLite file with all migrations applied."""
    path = str(tmp_path / "subscriptions.db")
    init_db(path)
    return path


@pytest.fixture
def sqlite_repository(database_path: str) -> SQLiteSubscriptionRepository:
    return SQLiteSubscriptionRepository(database_path)


@pytest.fixture(params=["memory", "sqlite"])
def repository(request: pytest.FixtureRequest):
    """Each store implementation in turn, for contract tests."""
    if request.param == "memory":
        return request.getfixturevalue("memory_repository")
    return request.getfixturevalue("sqlite_repository")


@pytest.fixture
def service(memory_repository: InMemorySubscriptionRepository) -> SubscriptionService:
    return SubscriptionService(memory_repository)


@pytest.fixture
def client(memory_repository: InMemorySubscriptionRepository) -> TestClient:
    """Test client for an app backed by the in-memory store."""
    app = create_app(settings=Settings(db_migrate=False), repository=memory_repository)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sqlite_client(tmp_path: Path) -> TestClient:
    """Test client for an app using its own SQLite file, migrated on startup."""
    settings = Settings(database_url=str(tmp_path / "api.db"), db_migrate=True)
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client
