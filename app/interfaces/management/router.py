"""
FastAPI router for the management bounded context.

All routes delegate to services. No business logic here.
Request schemas only parse JSON; field rules are checked by the services.
Error mapping is handled by centralized error handlers.
Every route requires HTTP Basic credentials.
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.application.management.dtos import (
    CreateProjectCommand,
    CreateTaskCommand,
    CreateUserCommand,
    ListTasksQuery,
    ProjectResult,
    TaskResult,
    UpdateProjectCommand,
    UpdateTaskCommand,
    UpdateUserCommand,
    UserResult,
)
from app.application.management.project_service import ProjectService
from app.application.management.task_service import TaskService
from app.application.management.user_service import UserService
from app.interfaces.management.dependencies import (
    get_project_service,
    get_task_service,
    get_user_service,
)
from app.interfaces.management.schemas import (
    CreateProjectRequest,
    CreateTaskRequest,
    CreateUserRequest,
    ErrorResponse,
    ProjectResponse,
    TaskResponse,
    UpdateProjectRequest,
    UpdateTaskRequest,
    UpdateUserRequest,
    UserResponse,
)
from app.shared.security.basic_auth import require_credentials

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}

router = APIRouter(
    dependencies=[Depends(require_credentials)],
    responses=ERROR_RESPONSES,
)


def _user_response(result: UserResult) -> UserResponse:
    return UserResponse.model_validate(asdict(result))


def _project_response(result: ProjectResult) -> ProjectResponse:
    return ProjectResponse.model_validate(asdict(result))


def _task_response(result: TaskResult) -> TaskResponse:
    return TaskResponse.model_validate(asdict(result))


# ------------------------------------------------------------------
# Users
# ------------------------------------------------------------------


@router.get(
    "/users",
    response_model=list[UserResponse],
    tags=["users"],
    summary="List users",
)
def list_users(
    active: Optional[bool] = None,
    service: UserService = Depends(get_user_service),
) -> list[UserResponse]:
    """List users, optionally only active or only inactive ones."""
    return [_user_response(r) for r in service.list_all(active=active)]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["users"],
    summary="Register a user",
)
def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Register a user with a unique username and email."""
    command = CreateUserCommand(
        username=request.username,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
    )
    return _user_response(service.create(command))


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    tags=["users"],
    summary="Get a user",
)
def get_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Get a user by id."""
    return _user_response(service.get_by_id(user_id))


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    tags=["users"],
    summary="Update a user",
)
def update_user(
    user_id: int,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Update the supplied user fields."""
    command = UpdateUserCommand(
        email=request.email,
        full_name=request.full_name,
        password=request.password,
        active=request.active,
    )
    return _user_response(service.update(user_id, command))


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["users"],
    summary="Delete a user",
)
def delete_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> None:
    """Delete a user that owns no project and has no task."""
    service.delete(user_id)


@router.post(
    "/users/{user_id}/deactivate",
    response_model=UserResponse,
    tags=["users"],
    summary="Deactivate a user",
)
def deactivate_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Deactivate an active user and unassign them from every task."""
    return _user_response(service.deactivate(user_id))


@router.post(
    "/users/{user_id}/restore",
    response_model=UserResponse,
    tags=["users"],
    summary="Restore a user",
)
def restore_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Reactivate a deactivated user."""
    return _user_response(service.restore(user_id))


# ------------------------------------------------------------------
# Projects
# ------------------------------------------------------------------


@router.get(
    "/projects",
    response_model=list[ProjectResponse],
    tags=["projects"],
    summary="List projects",
)
def list_projects(
    include_archived: bool = False,
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    """List active projects, or every project with include_archived."""
    return [
        _project_response(r)
        for r in service.list_all(include_archived=include_archived)
    ]


@router.post(
    "/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["projects"],
    summary="Create a project",
)
def create_project(
    request: CreateProjectRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Create a project owned by an active user."""
    command = CreateProjectCommand(
        name=request.name,
        owner_id=request.owner_id,
        description=request.description,
        start_date=request.start_date,
        end_date=request.end_date,
    )
    return _project_response(service.create(command))


@router.get(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    tags=["projects"],
    summary="Get a project",
)
def get_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Get a project with its owner and task statistics."""
    return _project_response(service.get_by_id(project_id))


@router.put(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    tags=["projects"],
    summary="Update a project",
)
def update_project(
    project_id: int,
    request: UpdateProjectRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Update the supplied project fields."""
    command = UpdateProjectCommand(
        name=request.name,
        description=request.description,
        owner_id=request.owner_id,
        start_date=request.start_date,
        end_date=request.end_date,
    )
    return _project_response(service.update(project_id, command))


@router.delete(
    "/projects/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["projects"],
    summary="Delete a project",
)
def delete_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Delete a project that has no tasks."""
    service.delete(project_id)


@router.post(
    "/projects/{project_id}/archive",
    response_model=ProjectResponse,
    tags=["projects"],
    summary="Archive a project",
)
def archive_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Archive an active project."""
    return _project_response(service.archive(project_id))


@router.post(
    "/projects/{project_id}/reactivate",
    response_model=ProjectResponse,
    tags=["projects"],
    summary="Reactivate a project",
)
def reactivate_project(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Reactivate an archived project."""
    return _project_response(service.reactivate(project_id))


@router.get(
    "/projects/{project_id}/tasks",
    response_model=list[TaskResponse],
    tags=["projects"],
    summary="List a project's tasks",
)
def list_project_tasks(
    project_id: int,
    service: ProjectService = Depends(get_project_service),
) -> list[TaskResponse]:
    """List every task of a project."""
    return [_task_response(r) for r in service.list_tasks(project_id)]


# ------------------------------------------------------------------
# Tasks
# ------------------------------------------------------------------


@router.get(
    "/tasks",
    response_model=list[TaskResponse],
    tags=["tasks"],
    summary="List tasks",
)
def list_tasks(
    task_status: Optional[str] = Query(default=None, alias="status"),
    project_id: Optional[int] = None,
    assignee_id: Optional[int] = None,
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    """List tasks filtered by status, project or assignee."""
    query = ListTasksQuery(
        status=task_status, project_id=project_id, assignee_id=assignee_id
    )
    return [_task_response(r) for r in service.list_all(query)]


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["tasks"],
    summary="Create a task",
)
def create_task(
    request: CreateTaskRequest,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Create a task in an active project."""
    command = CreateTaskCommand(
        title=request.title,
        project_id=request.project_id,
        description=request.description,
        status=request.status,
        priority=request.priority,
        due_date=request.due_date,
        estimated_hours=request.estimated_hours,
        notes=request.notes,
        assignee_ids=tuple(request.assignee_ids),
    )
    return _task_response(service.create(command))


@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    tags=["tasks"],
    summary="Get a task",
)
def get_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Get a task with its assignees and project."""
    return _task_response(service.get_by_id(task_id))


@router.put(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    tags=["tasks"],
    summary="Update a task",
)
def update_task(
    task_id: int,
    request: UpdateTaskRequest,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Update the supplied task fields, including status changes."""
    command = UpdateTaskCommand(
        title=request.title,
        description=request.description,
        status=request.status,
        priority=request.priority,
        due_date=request.due_date,
        estimated_hours=request.estimated_hours,
        notes=request.notes,
        project_id=request.project_id,
        assignee_ids=(
            tuple(request.assignee_ids) if request.assignee_ids is not None else None
        ),
    )
    return _task_response(service.update(task_id, command))


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["tasks"],
    summary="Delete a task",
)
def delete_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task and its assignments."""
    service.delete(task_id)
