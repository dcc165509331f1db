"""
Pydantic schemas for management API request/response validation.

Request schemas only check JSON shape and value types; field rules
(lengths, email grammar, enum names, date order) are enforced by the
domain validators so every rule failure carries a domain error code.
Request bodies accept snake_case or camelCase keys.
No business logic belongs here.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Base for request bodies: camelCase aliases, snake_case accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Users
# ------------------------------------------------------------------


class CreateUserRequest(RequestModel):
    """Request schema for registering a user.

    Attributes:
        username: Unique login name (3-50 chars).
        email: Unique, well-formed email address.
        password: Plain-text password; stored hashed.
        full_name: Display name (max 100 chars).
    """

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class UpdateUserRequest(RequestModel):
    """Request schema for a partial user update. Omitted fields are kept."""

    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None
    active: Optional[bool] = None


class UserSummarySchema(BaseModel):
    """Compact user reference."""

    id: int
    username: str
    full_name: str
    email: str


class UserResponse(BaseModel):
    """Response schema for a user. The password hash is never exposed."""

    id: int
    username: str
    email: str
    full_name: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ------------------------------------------------------------------
# Projects
# ------------------------------------------------------------------


class CreateProjectRequest(RequestModel):
    """Request schema for creating a project.

    Attributes:
        name: Project name (3-100 chars).
        owner_id: Id of the owning user.
        description: Optional text (max 500 chars).
        start_date: Defaults to today when omitted.
        end_date: Optional; must not precede start_date.
    """

    name: Optional[str] = None
    owner_id: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class UpdateProjectRequest(RequestModel):
    """Request schema for a partial project update."""

    name: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TaskStatisticsSchema(BaseModel):
    """Per-status task counts of a project."""

    total: int
    pending: int
    in_progress: int
    completed: int
    blocked: int


class ProjectSummarySchema(BaseModel):
    """Compact project reference."""

    id: int
    name: str
    active: bool


class ProjectResponse(BaseModel):
    """Response schema for a project with owner and task statistics."""

    id: int
    name: str
    description: Optional[str] = None
    active: bool
    owner: Optional[UserSummarySchema] = None
    start_date: date
    end_date: Optional[date] = None
    task_statistics: TaskStatisticsSchema
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ------------------------------------------------------------------
# Tasks
# ------------------------------------------------------------------


class CreateTaskRequest(RequestModel):
    """Request schema for creating a task.

    Attributes:
        title: Task title (3-255 chars).
        project_id: Id of the owning project.
        status: PENDING, IN_PROGRESS, COMPLETED or BLOCKED. Defaults to PENDING.
        priority: LOW, MEDIUM or HIGH. Defaults to MEDIUM.
        estimated_hours: Optional effort estimate (0-999).
        assignee_ids: Ids of the users working on the task.
    """

    title: Optional[str] = None
    project_id: Optional[int] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    notes: Optional[str] = None
    assignee_ids: list[int] = Field(default_factory=list)


class UpdateTaskRequest(RequestModel):
    """Request schema for a partial task update.

    Omitting ``assignee_ids`` keeps the current assignees; an empty list
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
    assignee_ids: Optional[list[int]] = None


class TaskResponse(BaseModel):
    """Response schema for a task with assignees and project."""

    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    notes: Optional[str] = None
    assignees: list[UserSummarySchema]
    project: Optional[ProjectSummarySchema] = None
    overdue: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ------------------------------------------------------------------
# Common
# ------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class FieldErrorSchema(BaseModel):
    """A single failing field."""

    field: str
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    status: int
    error_code: str
    message: str
    field_errors: list[FieldErrorSchema] = Field(default_factory=list)
    path: Optional[str] = None
