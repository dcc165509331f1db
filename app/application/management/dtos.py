"""
Data Transfer Objects for the management application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.

On update commands a field left as None means "not supplied": the
service leaves the stored value untouched.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


# ── Users ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CreateUserCommand:
    """Input DTO for registering a user.

    Attributes:
        username: Unique login name (3-50 chars).
        email: Unique email address.
        password: Plain-text password; hashed before storage.
        full_name: Display name (max 100 chars).
    """

    username: Optional[str]
    email: Optional[str]
    password: Optional[str]
    full_name: Optional[str]


@dataclass(frozen=True)
class UpdateUserCommand:
    """Input DTO for a partial user profile update."""

    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None
    active: Optional[bool] = None


@dataclass(frozen=True)
class UserResult:
    """Output DTO for a user. Never carries the password hash."""

    id: int
    username: str
    email: str
    full_name: str
    active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


@dataclass(frozen=True)
class UserSummary:
    """Compact user reference embedded in project and task views."""

    id: int
    username: str
    full_name: str
    email: str


# ── Projects ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class CreateProjectCommand:
    """Input DTO for creating a project.

    Attributes:
        name: Project name (3-100 chars).
        owner_id: Id of the owning user. Required.
        description: Optional text (max 500 chars).
        start_date: Defaults to today when omitted.
        end_date: Optional; must not precede start_date.
    """

    name: Optional[str]
    owner_id: Optional[int]
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class UpdateProjectCommand:
    """Input DTO for a partial project update."""

    name: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class TaskStatistics:
    """Per-status task counts for a project."""

    total: int
    pending: int
    in_progress: int
    completed: int
    blocked: int


@dataclass(frozen=True)
class ProjectResult:
    """Output DTO for a project with owner summary and task counts."""

    id: int
    name: str
    description: Optional[str]
    active: bool
    owner: Optional[UserSummary]
    start_date: date
    end_date: Optional[date]
    task_statistics: TaskStatistics
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


@dataclass(frozen=True)
class ProjectSummary:
    """Compact project reference embedded in task views."""

    id: int
    name: str
    active: bool


# ── Tasks ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CreateTaskCommand:
    """Input DTO for creating a task.

    Status and priority arrive as raw strings and are checked against the
    enum variant names by the service.

    Attributes:
        title: Task title (3-255 chars).
        project_id: Id of the owning project. Required.
        status: Optional initial status; PENDING when omitted.
        priority: Optional priority; MEDIUM when omitted.
        assignee_ids: Ids of assigned users, possibly empty.
    """

    title: Optional[str]
    project_id: Optional[int]
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    notes: Optional[str] = None
    assignee_ids: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UpdateTaskCommand:
    """Input DTO for a partial task update.

    ``assignee_ids=None`` keeps the current assignees; an empty tuple
    unassigns everyone.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    notes: Optional[str] = None
    project_id: Optional[int] = None
    assignee_ids: Optional[tuple[int, ...]] = None


@dataclass(frozen=True)
class ListTasksQuery:
    """Filters for listing tasks. All optional."""

    status: Optional[str] = None
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None


@dataclass(frozen=True)
class TaskResult:
    """Output DTO for a task with its assignees and project."""

    id: int
    title: str
    description: Optional[str]
    status: str
    priority: str
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    estimated_hours: Optional[int]
    notes: Optional[str]
    assignees: list[UserSummary]
    project: Optional[ProjectSummary]
    overdue: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
