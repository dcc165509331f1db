"""
Use cases: Create, read, update, archive and delete projects.

Input: CreateProjectCommand / UpdateProjectCommand / project id
Output: ProjectResult, or TaskResult list for a project's tasks
Side effects: Writes through ProjectRepository; emits EntityEvent via notifier.
Failure cases: ValidationFailedError, EntityNotFoundError,
    BusinessRuleError, ReferentialConflictError.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from app.application.management.dtos import (
    CreateProjectCommand,
    ProjectResult,
    TaskResult,
    UpdateProjectCommand,
)
from app.application.management.mappers import TaskViewBuilder, to_project_result
from app.domain.management.entities import (
    EntityEvent,
    EntityKind,
    Project,
    User,
    utc_now,
)
from app.domain.management.errors import (
    BusinessRuleError,
    EntityNotFoundError,
    ReferentialConflictError,
)
from app.domain.management.ports import (
    EntityNotifier,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)
from app.domain.management.validation import (
    FieldErrorCollector,
    date_order,
    max_length,
    min_length,
    non_blank,
    required,
)

logger = logging.getLogger(__name__)

NAME_MIN = 3
NAME_MAX = 100
DESCRIPTION_MAX = 500


class ProjectService:
    """Orchestrates validation, owner checks and persistence for projects.

    Deleting a project is blocked while it still has tasks; archiving is
    the non-destructive alternative.
    """

    def __init__(
        self,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        task_repo: TaskRepository,
        notifier: EntityNotifier,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._project_repo = project_repo
        self._user_repo = user_repo
        self._task_repo = task_repo
        self._notifier = notifier
        self._clock = clock
        self._task_views = TaskViewBuilder(user_repo, project_repo)

    def create(self, command: CreateProjectCommand) -> ProjectResult:
        """Create a project owned by an active user.

        Raises:
            ValidationFailedError: If any field rule fails.
            EntityNotFoundError: If the owner does not exist.
            BusinessRuleError: If the owner is inactive.
        """
        start_date = command.start_date or self._today()

        errors = FieldErrorCollector()
        self._check_name(errors, command.name)
        self._check_description(errors, command.description)
        errors.check(required("owner_id", command.owner_id))
        errors.check(date_order("end_date", start_date, command.end_date))
        errors.raise_if_any()

        self._require_active_owner(command.owner_id)

        now = self._clock()
        saved = self._project_repo.save(
            Project(
                name=command.name,
                owner_id=command.owner_id,
                start_date=start_date,
                description=command.description,
                end_date=command.end_date,
                active=True,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "Project created: id=%d, name=%s, owner_id=%d",
            saved.id,
            saved.name,
            saved.owner_id,
        )
        self._notifier.notify(EntityEvent(EntityKind.PROJECT, saved.id, "created"))
        return self.get_by_id(saved.id)

    def get_by_id(self, project_id: int) -> ProjectResult:
        """Return a project view, archived or not.

        Raises:
            EntityNotFoundError: If no project has this id.
        """
        return self._to_result(self._require(project_id))

    def list_all(self, include_archived: bool = False) -> list[ProjectResult]:
        projects = self._project_repo.list_all(include_archived=include_archived)
        logger.debug("Listed %d projects", len(projects))
        return [self._to_result(p) for p in projects]

    def list_tasks(self, project_id: int) -> list[TaskResult]:
        """Return every task of a project.

        Raises:
            EntityNotFoundError: If no project has this id.
        """
        self._require(project_id)
        tasks = self._task_repo.list_all(project_id=project_id)
        logger.debug("Listed %d tasks for project_id=%d", len(tasks), project_id)
        return self._task_views.build(tasks, self._clock())

    def update(self, project_id: int, command: UpdateProjectCommand) -> ProjectResult:
        """Apply the supplied fields to an active project.

        Raises:
            EntityNotFoundError: If the project or new owner does not exist.
            ValidationFailedError: If a supplied field fails its rules.
            BusinessRuleError: If the project is archived or the new owner inactive.
        """
        project = self._require(project_id)
        if not project.active:
            raise BusinessRuleError(
                f"Project {project_id} is archived and cannot be updated", project_id
            )

        errors = FieldErrorCollector()
        if command.name is not None:
            self._check_name(errors, command.name)
        if command.description is not None:
            self._check_description(errors, command.description)
        if command.start_date is not None or command.end_date is not None:
            errors.check(
                date_order(
                    "end_date",
                    command.start_date or project.start_date,
                    command.end_date or project.end_date,
                )
            )
        errors.raise_if_any()

        if command.owner_id is not None and command.owner_id != project.owner_id:
            self._require_active_owner(command.owner_id)
            logger.debug(
                "Project owner changed: %d -> %d", project.owner_id, command.owner_id
            )
            project.owner_id = command.owner_id
        if command.name is not None:
            project.name = command.name
        if command.description is not None:
            project.description = command.description
        if command.start_date is not None:
            project.start_date = command.start_date
        if command.end_date is not None:
            project.end_date = command.end_date

        project.updated_at = self._clock()
        self._project_repo.save(project)
        logger.info("Project updated: id=%d", project_id)
        self._notifier.notify(EntityEvent(EntityKind.PROJECT, project_id, "updated"))
        return self.get_by_id(project_id)

    def archive(self, project_id: int) -> ProjectResult:
        """Mark a project inactive. New tasks can no longer be added to it."""
        project = self._require(project_id)
        if not project.active:
            raise BusinessRuleError(f"Project {project_id} is already archived", project_id)
        return self._set_active(project, False, "archived")

    def reactivate(self, project_id: int) -> ProjectResult:
        """Make an archived project active again."""
        project = self._require(project_id)
        if project.active:
            raise BusinessRuleError(f"Project {project_id} is already active", project_id)
        return self._set_active(project, True, "reactivated")

    def delete(self, project_id: int) -> None:
        """Delete a project that has no tasks.

        Raises:
            EntityNotFoundError: If no project has this id.
            ReferentialConflictError: If tasks still belong to the project.
        """
        self._require(project_id)

        task_count = self._task_repo.count_by_project(project_id)
        if task_count:
            raise ReferentialConflictError(
                EntityKind.PROJECT, project_id, f"project still has {task_count} task(s)"
            )

        self._project_repo.delete(project_id)
        logger.info("Project deleted: id=%d", project_id)
        self._notifier.notify(EntityEvent(EntityKind.PROJECT, project_id, "deleted"))

    def _set_active(self, project: Project, active: bool, action: str) -> ProjectResult:
        project.active = active
        project.updated_at = self._clock()
        self._project_repo.save(project)
        logger.info("Project %s: id=%d", action, project.id)
        self._notifier.notify(EntityEvent(EntityKind.PROJECT, project.id, action))
        return self.get_by_id(project.id)

    def _require(self, project_id: int) -> Project:
        project = self._project_repo.get_by_id(project_id)
        if project is None:
            logger.warning("Project not found: id=%s", project_id)
            raise EntityNotFoundError(EntityKind.PROJECT, project_id)
        return project

    def _require_active_owner(self, owner_id: int) -> User:
        owner = self._user_repo.get_by_id(owner_id)
        if owner is None:
            logger.warning("Owner not found: user_id=%s", owner_id)
            raise EntityNotFoundError(EntityKind.USER, owner_id)
        if not owner.active:
            raise BusinessRuleError(
                f"Owner '{owner.username}' is not active", owner_id
            )
        return owner

    def _to_result(self, project: Project) -> ProjectResult:
        owner = self._user_repo.get_by_id(project.owner_id)
        tasks = self._task_repo.list_all(project_id=project.id)
        return to_project_result(project, owner, tasks)

    def _today(self) -> date:
        return self._clock().date()

    @staticmethod
    def _check_name(errors: FieldErrorCollector, name: Optional[str]) -> None:
        if errors.check(non_blank("name", name)):
            errors.check(min_length("name", name.strip(), NAME_MIN))
            errors.check(max_length("name", name, NAME_MAX))

    @staticmethod
    def _check_description(
        errors: FieldErrorCollector, description: Optional[str]
    ) -> None:
        if description is not None:
            errors.check(max_length("description", description, DESCRIPTION_MAX))
