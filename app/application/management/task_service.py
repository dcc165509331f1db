"""
Use cases: Create, read, update and delete tasks.

Input: CreateTaskCommand / UpdateTaskCommand / ListTasksQuery / task id
Output: TaskResult
Side effects: Writes through TaskRepository; emits EntityEvent via notifier.
Failure cases: ValidationFailedError, EntityNotFoundError, BusinessRuleError.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from app.application.management.dtos import (
    CreateTaskCommand,
    ListTasksQuery,
    TaskResult,
    UpdateTaskCommand,
)
from app.application.management.mappers import TaskViewBuilder
from app.domain.management.entities import (
    EntityEvent,
    EntityKind,
    Project,
    Task,
    TaskPriority,
    TaskStatus,
    to_naive_utc,
    utc_now,
)
from app.domain.management.errors import BusinessRuleError, EntityNotFoundError
from app.domain.management.ports import (
    EntityNotifier,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)
from app.domain.management.transitions import INITIAL_STATUS, StatusTransitionPolicy
from app.domain.management.validation import (
    FieldErrorCollector,
    enum_member,
    in_range,
    max_length,
    min_length,
    non_blank,
    required,
)

logger = logging.getLogger(__name__)

TITLE_MIN = 3
TITLE_MAX = 255
DESCRIPTION_MAX = 2000
NOTES_MAX = 1000
ESTIMATED_HOURS_MIN = 0
ESTIMATED_HOURS_MAX = 999


class TaskService:
    """Orchestrates validation, the status transition policy and persistence
    for tasks.

    Entering COMPLETED stamps ``completed_at``; leaving it clears the stamp.
    """

    def __init__(
        self,
        task_repo: TaskRepository,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        notifier: EntityNotifier,
        transition_policy: Optional[StatusTransitionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_repo = task_repo
        self._project_repo = project_repo
        self._user_repo = user_repo
        self._notifier = notifier
        self._policy = transition_policy or StatusTransitionPolicy()
        self._clock = clock
        self._views = TaskViewBuilder(user_repo, project_repo)

    def create(self, command: CreateTaskCommand) -> TaskResult:
        """Create a task in an active project.

        Raises:
            ValidationFailedError: If any field rule fails.
            EntityNotFoundError: If the project or any assignee does not exist.
            BusinessRuleError: If the project is archived or an assignee inactive.
        """
        errors = FieldErrorCollector()
        self._check_title(errors, command.title)
        errors.check(required("project_id", command.project_id))
        self._check_optional_fields(
            errors,
            description=command.description,
            status=command.status,
            priority=command.priority,
            estimated_hours=command.estimated_hours,
            notes=command.notes,
        )
        errors.raise_if_any()

        self._require_active_project(command.project_id)
        assignee_ids = self._require_assignable(command.assignee_ids)

        now = self._clock()
        status = TaskStatus[command.status] if command.status else INITIAL_STATUS
        saved = self._task_repo.save(
            Task(
                title=command.title,
                project_id=command.project_id,
                status=status,
                priority=(
                    TaskPriority[command.priority]
                    if command.priority
                    else TaskPriority.MEDIUM
                ),
                description=command.description,
                due_date=to_naive_utc(command.due_date) if command.due_date else None,
                estimated_hours=command.estimated_hours,
                notes=command.notes,
                assignee_ids=assignee_ids,
                completed_at=now if status is TaskStatus.COMPLETED else None,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "Task created: id=%d, project_id=%d, assignees=%s",
            saved.id,
            saved.project_id,
            sorted(saved.assignee_ids),
        )
        self._notifier.notify(EntityEvent(EntityKind.TASK, saved.id, "created"))
        return self.get_by_id(saved.id)

    def get_by_id(self, task_id: int) -> TaskResult:
        """Return a task view.

        Raises:
            EntityNotFoundError: If no task has this id.
        """
        return self._views.build_one(self._require(task_id), self._clock())

    def list_all(self, query: Optional[ListTasksQuery] = None) -> list[TaskResult]:
        """Return tasks matching the optional filters.

        Raises:
            ValidationFailedError: If the status filter is not a known status.
        """
        query = query or ListTasksQuery()
        if query.status is not None:
            errors = FieldErrorCollector()
            errors.check(enum_member("status", query.status, TaskStatus))
            errors.raise_if_any()

        tasks = self._task_repo.list_all(
            status=TaskStatus[query.status] if query.status else None,
            project_id=query.project_id,
            assignee_id=query.assignee_id,
        )
        logger.debug("Listed %d tasks", len(tasks))
        return self._views.build(tasks, self._clock())

    def update(self, task_id: int, command: UpdateTaskCommand) -> TaskResult:
        """Apply the supplied fields to a task.

        Raises:
            EntityNotFoundError: If the task, new project or an assignee is missing.
            ValidationFailedError: If a supplied field fails its rules.
            BusinessRuleError: If the transition is not allowed, the new project
                is archived or an assignee is inactive.
        """
        task = self._require(task_id)

        errors = FieldErrorCollector()
        if command.title is not None:
            self._check_title(errors, command.title)
        self._check_optional_fields(
            errors,
            description=command.description,
            status=command.status,
            priority=command.priority,
            estimated_hours=command.estimated_hours,
            notes=command.notes,
        )
        errors.raise_if_any()

        if command.project_id is not None and command.project_id != task.project_id:
            self._require_active_project(command.project_id)
            logger.debug(
                "Task %d moved from project %d to %d",
                task_id,
                task.project_id,
                command.project_id,
            )
            task.project_id = command.project_id
        if command.assignee_ids is not None:
            task.assignee_ids = self._require_assignable(command.assignee_ids)
            if not task.assignee_ids:
                logger.info("Task %d is now unassigned", task_id)

        now = self._clock()
        if command.status is not None:
            self._apply_status(task, TaskStatus[command.status], now)
        if command.title is not None:
            task.title = command.title
        if command.description is not None:
            task.description = command.description
        if command.priority is not None:
            task.priority = TaskPriority[command.priority]
        if command.due_date is not None:
            task.due_date = to_naive_utc(command.due_date)
        if command.estimated_hours is not None:
            task.estimated_hours = command.estimated_hours
        if command.notes is not None:
            task.notes = command.notes

        task.updated_at = now
        self._task_repo.save(task)
        logger.info("Task updated: id=%d, status=%s", task_id, task.status.value)
        self._notifier.notify(EntityEvent(EntityKind.TASK, task_id, "updated"))
        return self.get_by_id(task_id)

    def delete(self, task_id: int) -> None:
        """Delete a task and its assignee links.

        Raises:
            EntityNotFoundError: If no task has this id.
        """
        self._require(task_id)
        self._task_repo.delete(task_id)
        logger.info("Task deleted: id=%d", task_id)
        self._notifier.notify(EntityEvent(EntityKind.TASK, task_id, "deleted"))

    def _apply_status(self, task: Task, new_status: TaskStatus, now: datetime) -> None:
        old_status = task.status
        self._policy.ensure_allowed(old_status, new_status)
        logger.debug("Status transition: %s -> %s", old_status.value, new_status.value)
        if new_status is TaskStatus.COMPLETED and old_status is not TaskStatus.COMPLETED:
            task.completed_at = now
        elif old_status is TaskStatus.COMPLETED and new_status is not TaskStatus.COMPLETED:
            task.completed_at = None
        task.status = new_status

    def _require(self, task_id: int) -> Task:
        task = self._task_repo.get_by_id(task_id)
        if task is None:
            logger.warning("Task not found: id=%s", task_id)
            raise EntityNotFoundError(EntityKind.TASK, task_id)
        return task

    def _require_active_project(self, project_id: int) -> Project:
        project = self._project_repo.get_by_id(project_id)
        if project is None:
            logger.warning("Project not found: id=%s", project_id)
            raise EntityNotFoundError(EntityKind.PROJECT, project_id)
        if not project.active:
            raise BusinessRuleError(
                f"Project {project_id} is archived and cannot take tasks", project_id
            )
        return project

    def _require_assignable(self, assignee_ids: Iterable[int]) -> set[int]:
        """Return the assignee ids as a set after checking each user exists and is active."""
        wanted = set(assignee_ids)
        if not wanted:
            return wanted
        users = self._user_repo.get_many(wanted)
        missing = sorted(wanted - {u.id for u in users})
        if missing:
            logger.warning("Assignees not found: %s", missing)
            raise EntityNotFoundError(EntityKind.USER, missing)
        inactive = [u.username for u in users if not u.active]
        if inactive:
            raise BusinessRuleError(
                f"Cannot assign task to inactive users: {', '.join(inactive)}"
            )
        return wanted

    @staticmethod
    def _check_title(errors: FieldErrorCollector, title: Optional[str]) -> None:
        if errors.check(non_blank("title", title)):
            errors.check(min_length("title", title.strip(), TITLE_MIN))
            errors.check(max_length("title", title, TITLE_MAX))

    @staticmethod
    def _check_optional_fields(
        errors: FieldErrorCollector,
        description: Optional[str],
        status: Optional[str],
        priority: Optional[str],
        estimated_hours: Optional[int],
        notes: Optional[str],
    ) -> None:
        if description is not None:
            errors.check(max_length("description", description, DESCRIPTION_MAX))
        if status is not None:
            errors.check(enum_member("status", status, TaskStatus))
        if priority is not None:
            errors.check(enum_member("priority", priority, TaskPriority))
        if estimated_hours is not None:
            errors.check(
                in_range(
                    "estimated_hours",
                    estimated_hours,
                    ESTIMATED_HOURS_MIN,
                    ESTIMATED_HOURS_MAX,
                )
            )
        if notes is not None:
            errors.check(max_length("notes", notes, NOTES_MAX))
