"""
Domain entities for the management bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
An entity's ``id`` is None until the persistence port assigns one.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values are returned unchanged."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TaskStatus(Enum):
    """Lifecycle state of a task."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"


class TaskPriority(Enum):
    """Relative urgency of a task."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class EntityKind(Enum):
    """Kinds of persisted records, used in error messages and events."""

    USER = "User"
    PROJECT = "Project"
    TASK = "Task"


@dataclass
class User:
    """A registered user. ``password_hash`` never leaves the service layer."""

    username: str
    email: str
    password_hash: str
    full_name: str
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Project:
    """A project owned by a single user.

    ``active`` is False once the project has been archived.
    """

    name: str
    owner_id: int
    start_date: date
    description: Optional[str] = None
    end_date: Optional[date] = None
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Task:
    """A unit of work inside exactly one project.

    Assignees are held as a set of user ids, not embedded user records.
    """

    title: str
    project_id: int
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    notes: Optional[str] = None
    assignee_ids: set[int] = field(default_factory=set)
    completed_at: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_overdue(self, now: datetime) -> bool:
        """Return True when the due date has passed and the task is not done."""
        if self.due_date is None or self.status is TaskStatus.COMPLETED:
            return False
        return now > self.due_date


@dataclass(frozen=True)
class EntityEvent:
    """Notification that an entity was created, updated or deleted."""

    entity_kind: EntityKind
    entity_id: int
    action: str
