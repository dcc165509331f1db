"""
Entity to read-view mapping.

Builds the output DTOs from domain entities. Related records (owners,
assignees, projects) are resolved through the repository ports so views
always reflect the current stored state.
"""

from datetime import datetime
from typing import Iterable, Optional

from app.application.management.dtos import (
    ProjectResult,
    ProjectSummary,
    TaskResult,
    TaskStatistics,
    UserResult,
    UserSummary,
)
from app.domain.management.entities import Project, Task, TaskStatus, User
from app.domain.management.ports import ProjectRepository, UserRepository


def to_user_result(user: User) -> UserResult:
    return UserResult(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        active=user.active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def to_user_summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        email=user.email,
    )


def task_statistics(tasks: Iterable[Task]) -> TaskStatistics:
    """Count tasks per status."""
    counts = {status: 0 for status in TaskStatus}
    total = 0
    for task in tasks:
        counts[task.status] += 1
        total += 1
    return TaskStatistics(
        total=total,
        pending=counts[TaskStatus.PENDING],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
        blocked=counts[TaskStatus.BLOCKED],
    )


def to_project_result(
    project: Project, owner: Optional[User], tasks: Iterable[Task]
) -> ProjectResult:
    return ProjectResult(
        id=project.id,
        name=project.name,
        description=project.description,
        active=project.active,
        owner=to_user_summary(owner) if owner else None,
        start_date=project.start_date,
        end_date=project.end_date,
        task_statistics=task_statistics(tasks),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def to_task_result(
    task: Task,
    assignees: Iterable[User],
    project: Optional[Project],
    now: datetime,
) -> TaskResult:
    return TaskResult(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status.value,
        priority=task.priority.value,
        due_date=task.due_date,
        completed_at=task.completed_at,
        estimated_hours=task.estimated_hours,
        notes=task.notes,
        assignees=[to_user_summary(u) for u in sorted(assignees, key=lambda u: u.id)],
        project=(
            ProjectSummary(id=project.id, name=project.name, active=project.active)
            if project
            else None
        ),
        overdue=task.is_overdue(now),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


class TaskViewBuilder:
    """Resolves assignees and projects for a batch of tasks.

    Each related record is fetched once per batch.
    """

    def __init__(
        self, user_repo: UserRepository, project_repo: ProjectRepository
    ) -> None:
        self._user_repo = user_repo
        self._project_repo = project_repo

    def build(self, tasks: list[Task], now: datetime) -> list[TaskResult]:
        user_ids = set().union(*(t.assignee_ids for t in tasks)) if tasks else set()
        users = {u.id: u for u in self._user_repo.get_many(user_ids)}
        projects: dict[int, Optional[Project]] = {}
        for task in tasks:
            if task.project_id not in projects:
                projects[task.project_id] = self._project_repo.get_by_id(task.project_id)
        return [
            to_task_result(
                task,
                [users[uid] for uid in task.assignee_ids if uid in users],
                projects[task.project_id],
                now,
            )
            for task in tasks
        ]

    def build_one(self, task: Task, now: datetime) -> TaskResult:
        return self.build([task], now)[0]
