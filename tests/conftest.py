"""
Shared fixtures.

Every test gets its own in-memory SQLite database. Settings are pinned
through environment variables before the app package is imported:
rate limiting off, cheap password hashing, no database file on disk.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("AUTH_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from base64 import b64encode
from datetime import datetime
from typing import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from app.application.management.project_service import ProjectService
from app.application.management.task_service import TaskService
from app.application.management.user_service import UserService
from app.domain.management.ports import EntityNotifier
from app.infrastructure.management.project_repository import (
    ProjectRepositoryAdapter,
)
from app.infrastructure.management.tables import build_engine, create_schema
from app.infrastructure.management.task_repository import TaskRepositoryAdapter
from app.infrastructure.management.user_repository import UserRepositoryAdapter

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0)
TEST_ITERATIONS = 1000


def basic_auth_header(username: str, password: str) -> dict[str, str]:
    """Build an Authorization header for HTTP Basic."""
    token = b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def engine() -> Iterator[Engine]:
    """A fresh in-memory database with the schema created."""
    eng = build_engine("sqlite://")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def user_repo(engine: Engine) -> UserRepositoryAdapter:
    return UserRepositoryAdapter(engine)


@pytest.fixture
def project_repo(engine: Engine) -> ProjectRepositoryAdapter:
    return ProjectRepositoryAdapter(engine)


@pytest.fixture
def task_repo(engine: Engine) -> TaskRepositoryAdapter:
    return TaskRepositoryAdapter(engine)


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=EntityNotifier)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now: datetime):
    return lambda: now


@pytest.fixture
def user_service(user_repo, project_repo, task_repo, notifier, clock) -> UserService:
    return UserService(
        user_repo,
        project_repo,
        task_repo,
        notifier,
        password_iterations=TEST_ITERATIONS,
        clock=clock,
    )


@pytest.fixture
def project_service(
    user_repo, project_repo, task_repo, notifier, clock
) -> ProjectService:
    return ProjectService(project_repo, user_repo, task_repo, notifier, clock=clock)


@pytest.fixture
def task_service(user_repo, project_repo, task_repo, notifier, clock) -> TaskService:
    return TaskService(task_repo, project_repo, user_repo, notifier, clock=clock)


@pytest.fixture
def client(engine: Engine) -> Iterator[TestClient]:
    """TestClient bound to the per-test database, authenticated as admin."""
    from app.interfaces.management.dependencies import get_engine
    from app.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app, headers=basic_auth_header("admin", "admin")) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(engine: Engine) -> Iterator[TestClient]:
    """TestClient without credentials."""
    from app.interfaces.management.dependencies import get_engine
    from app.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
