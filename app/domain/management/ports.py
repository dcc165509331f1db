"""
Port interfaces (ABCs) for the management bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from app.domain.management.entities import (
    EntityEvent,
    Project,
    Task,
    TaskStatus,
    User,
)


class UserRepository(ABC):
    """Port for persisting and retrieving users."""

    @abstractmethod
    def save(self, user: User) -> User:
        """Insert or update a user and return it with its id assigned."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return a user by id, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """Return the user with this exact username, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Return the user with this exact email, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_many(self, user_ids: Iterable[int]) -> list[User]:
        """Return the users that exist among ``user_ids``, ordered by id."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self, active: Optional[bool] = None) -> list[User]:
        """Return users ordered by id, optionally filtered by active flag."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: int) -> bool:
        """Delete a user. Returns False if it did not exist."""
        raise NotImplementedError


class ProjectRepository(ABC):
    """Port for persisting and retrieving projects."""

    @abstractmethod
    def save(self, project: Project) -> Project:
        """Insert or update a project and return it with its id assigned."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, project_id: int) -> Optional[Project]:
        """Return a project by id, archived or not, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self, include_archived: bool = False) -> list[Project]:
        """Return projects ordered by id."""
        raise NotImplementedError

    @abstractmethod
    def count_by_owner(self, owner_id: int) -> int:
        """Return how many projects the user owns."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, project_id: int) -> bool:
        """Delete a project. Returns False if it did not exist."""
        raise NotImplementedError


class TaskRepository(ABC):
    """Port for persisting and retrieving tasks together with their assignees."""

    @abstractmethod
    def save(self, task: Task) -> Task:
        """Insert or update a task and its assignee set atomically."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, task_id: int) -> Optional[Task]:
        """Return a task by id with its assignee ids, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_all(
        self,
        status: Optional[TaskStatus] = None,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
    ) -> list[Task]:
        """Return tasks ordered by id, filtered by any given criteria."""
        raise NotImplementedError

    @abstractmethod
    def count_by_project(self, project_id: int) -> int:
        """Return how many tasks belong to the project."""
        raise NotImplementedError

    @abstractmethod
    def count_by_assignee(self, user_id: int) -> int:
        """Return how many tasks the user is assigned to."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a task and its assignee rows. Returns False if absent."""
        raise NotImplementedError

    @abstractmethod
    def remove_assignee(self, user_id: int) -> int:
        """Unassign the user from every task. Returns how many tasks changed."""
        raise NotImplementedError


class CredentialVerifier(ABC):
    """Port for checking transport-level login credentials."""

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        """Return True when the credentials are valid."""
        raise NotImplementedError


class EntityNotifier(ABC):
    """Port for announcing entity changes to interested parties."""

    @abstractmethod
    def notify(self, event: EntityEvent) -> None:
        """Deliver an event. Must not raise for delivery problems."""
        raise NotImplementedError
