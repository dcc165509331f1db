"""
Dependency injection for the management bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into services via constructor injection.
These are the composition root for the management context.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine

from app.application.management.project_service import ProjectService
from app.application.management.task_service import TaskService
from app.application.management.user_service import UserService
from app.core.config import settings
from app.domain.management.ports import EntityNotifier
from app.infrastructure.management.notifier import NullNotifier
from app.infrastructure.management.project_repository import (
    ProjectRepositoryAdapter,
)
from app.infrastructure.management.tables import build_engine
from app.infrastructure.management.task_repository import TaskRepositoryAdapter
from app.infrastructure.management.user_repository import UserRepositoryAdapter


@lru_cache
def get_engine() -> Engine:
    """Build the SQLAlchemy engine once from application settings."""
    return build_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def get_notifier() -> EntityNotifier:
    """Return the entity change notifier."""
    return NullNotifier()


def get_user_service(
    engine: Engine = Depends(get_engine),
    notifier: EntityNotifier = Depends(get_notifier),
) -> UserService:
    """Build UserService with its infrastructure dependencies."""
    return UserService(
        user_repo=UserRepositoryAdapter(engine),
        project_repo=ProjectRepositoryAdapter(engine),
        task_repo=TaskRepositoryAdapter(engine),
        notifier=notifier,
        password_min_length=settings.password_min_length,
        password_iterations=settings.password_hash_iterations,
    )


def get_project_service(
    engine: Engine = Depends(get_engine),
    notifier: EntityNotifier = Depends(get_notifier),
) -> ProjectService:
    """Build ProjectService with its infrastructure dependencies."""
    return ProjectService(
        project_repo=ProjectRepositoryAdapter(engine),
        user_repo=UserRepositoryAdapter(engine),
        task_repo=TaskRepositoryAdapter(engine),
        notifier=notifier,
    )


def get_task_service(
    engine: Engine = Depends(get_engine),
    notifier: EntityNotifier = Depends(get_notifier),
) -> TaskService:
    """Build TaskService with its infrastructure dependencies."""
    return TaskService(
        task_repo=TaskRepositoryAdapter(engine),
        project_repo=ProjectRepositoryAdapter(engine),
        user_repo=UserRepositoryAdapter(engine),
        notifier=notifier,
    )
