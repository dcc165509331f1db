"""
Use cases: Register, read, update, deactivate, restore and delete users.

Input: CreateUserCommand / UpdateUserCommand / user id
Output: UserResult
Side effects: Writes through UserRepository; emits EntityEvent via notifier.
Failure cases: ValidationFailedError, DuplicateResourceError,
    EntityNotFoundError, ReferentialConflictError, BusinessRuleError.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from app.application.management.dtos import (
    CreateUserCommand,
    UpdateUserCommand,
    UserResult,
)
from app.application.management.mappers import to_user_result
from app.domain.management.entities import EntityEvent, EntityKind, User, utc_now
from app.domain.management.errors import (
    BusinessRuleError,
    DuplicateResourceError,
    EntityNotFoundError,
    ReferentialConflictError,
)
from app.domain.management.passwords import ITERATIONS, hash_password
from app.domain.management.ports import (
    EntityNotifier,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)
from app.domain.management.validation import (
    FieldErrorCollector,
    max_length,
    min_length,
    non_blank,
    valid_email,
)

logger = logging.getLogger(__name__)

USERNAME_MIN = 3
USERNAME_MAX = 50
EMAIL_MAX = 100
FULL_NAME_MAX = 100
DEFAULT_PASSWORD_MIN = 8


class UserService:
    """Orchestrates validation, uniqueness checks and persistence for users.

    Deleting a user is blocked while they own a project or are assigned
    to a task; deactivating is the non-destructive alternative.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        project_repo: ProjectRepository,
        task_repo: TaskRepository,
        notifier: EntityNotifier,
        password_min_length: int = DEFAULT_PASSWORD_MIN,
        password_iterations: int = ITERATIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._user_repo = user_repo
        self._project_repo = project_repo
        self._task_repo = task_repo
        self._notifier = notifier
        self._password_min_length = password_min_length
        self._password_iterations = password_iterations
        self._clock = clock

    def create(self, command: CreateUserCommand) -> UserResult:
        """Register a new user.

        Raises:
            ValidationFailedError: If any field rule fails.
            DuplicateResourceError: If the username or email is taken.
        """
        errors = FieldErrorCollector()
        if errors.check(non_blank("username", command.username)):
            errors.check(min_length("username", command.username, USERNAME_MIN))
            errors.check(max_length("username", command.username, USERNAME_MAX))
        self._check_email(errors, command.email)
        self._check_password(errors, command.password)
        self._check_full_name(errors, command.full_name)
        errors.raise_if_any()

        if self._user_repo.get_by_username(command.username) is not None:
            logger.warning("Username already exists: %s", command.username)
            raise DuplicateResourceError(EntityKind.USER, "username", command.username)
        if self._user_repo.get_by_email(command.email) is not None:
            logger.warning("Email already exists: %s", command.email)
            raise DuplicateResourceError(EntityKind.USER, "email", command.email)

        now = self._clock()
        saved = self._user_repo.save(
            User(
                username=command.username,
                email=command.email,
                password_hash=hash_password(command.password, self._password_iterations),
                full_name=command.full_name,
                active=True,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("User created: id=%d, username=%s", saved.id, saved.username)
        self._notifier.notify(EntityEvent(EntityKind.USER, saved.id, "created"))
        return self.get_by_id(saved.id)

    def get_by_id(self, user_id: int) -> UserResult:
        """Return a user view.

        Raises:
            EntityNotFoundError: If no user has this id.
        """
        return to_user_result(self._require(user_id))

    def list_all(self, active: Optional[bool] = None) -> list[UserResult]:
        users = self._user_repo.list_all(active=active)
        logger.debug("Listed %d users", len(users))
        return [to_user_result(u) for u in users]

    def update(self, user_id: int, command: UpdateUserCommand) -> UserResult:
        """Apply the supplied fields to a user.

        Raises:
            EntityNotFoundError: If no user has this id.
            ValidationFailedError: If a supplied field fails its rules.
            DuplicateResourceError: If the new email belongs to another user.
        """
        user = self._require(user_id)

        errors = FieldErrorCollector()
        if command.email is not None:
            self._check_email(errors, command.email)
        if command.password is not None:
            self._check_password(errors, command.password)
        if command.full_name is not None:
            self._check_full_name(errors, command.full_name)
        errors.raise_if_any()

        if command.email is not None and command.email != user.email:
            existing = self._user_repo.get_by_email(command.email)
            if existing is not None and existing.id != user.id:
                logger.warning("Email already exists: %s", command.email)
                raise DuplicateResourceError(EntityKind.USER, "email", command.email)
            user.email = command.email
        if command.full_name is not None:
            user.full_name = command.full_name
        if command.password is not None:
            user.password_hash = hash_password(command.password, self._password_iterations)
        if command.active is not None:
            user.active = command.active

        user.updated_at = self._clock()
        self._user_repo.save(user)
        logger.info("User updated: id=%d", user_id)
        self._notifier.notify(EntityEvent(EntityKind.USER, user_id, "updated"))
        return self.get_by_id(user_id)

    def delete(self, user_id: int) -> None:
        """Delete a user that nothing references.

        Raises:
            EntityNotFoundError: If no user has this id.
            ReferentialConflictError: If the user owns projects or has tasks.
        """
        self._require(user_id)

        owned = self._project_repo.count_by_owner(user_id)
        if owned:
            raise ReferentialConflictError(
                EntityKind.USER, user_id, f"user owns {owned} project(s)"
            )
        assigned = self._task_repo.count_by_assignee(user_id)
        if assigned:
            raise ReferentialConflictError(
                EntityKind.USER, user_id, f"user is assigned to {assigned} task(s)"
            )

        self._user_repo.delete(user_id)
        logger.info("User deleted: id=%d", user_id)
        self._notifier.notify(EntityEvent(EntityKind.USER, user_id, "deleted"))

    def deactivate(self, user_id: int) -> UserResult:
        """Deactivate a user and unassign them from every task.

        The record and the projects it owns are kept; restore() reverses
        the deactivation but not the unassignment.

        Raises:
            EntityNotFoundError: If no user has this id.
            BusinessRuleError: If the user is already inactive.
        """
        user = self._require(user_id)
        if not user.active:
            raise BusinessRuleError(
                f"User '{user.username}' is already inactive", user_id
            )

        unassigned = self._task_repo.remove_assignee(user_id)
        user.active = False
        user.updated_at = self._clock()
        self._user_repo.save(user)
        logger.info(
            "User deactivated: id=%d, unassigned_tasks=%d", user_id, unassigned
        )
        self._notifier.notify(EntityEvent(EntityKind.USER, user_id, "deactivated"))
        return self.get_by_id(user_id)

    def restore(self, user_id: int) -> UserResult:
        """Reactivate a deactivated user.

        Raises:
            EntityNotFoundError: If no user has this id.
            BusinessRuleError: If the user is already active.
        """
        user = self._require(user_id)
        if user.active:
            raise BusinessRuleError(
                f"User '{user.username}' is not deactivated", user_id
            )

        user.active = True
        user.updated_at = self._clock()
        self._user_repo.save(user)
        logger.info("User restored: id=%d", user_id)
        self._notifier.notify(EntityEvent(EntityKind.USER, user_id, "restored"))
        return self.get_by_id(user_id)

    def _require(self, user_id: int) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            logger.warning("User not found: id=%s", user_id)
            raise EntityNotFoundError(EntityKind.USER, user_id)
        return user

    def _check_email(self, errors: FieldErrorCollector, email: Optional[str]) -> None:
        if errors.check(non_blank("email", email)):
            if errors.check(valid_email("email", email)):
                errors.check(max_length("email", email, EMAIL_MAX))

    def _check_password(
        self, errors: FieldErrorCollector, password: Optional[str]
    ) -> None:
        if errors.check(non_blank("password", password)):
            errors.check(min_length("password", password, self._password_min_length))

    def _check_full_name(
        self, errors: FieldErrorCollector, full_name: Optional[str]
    ) -> None:
        if errors.check(non_blank("full_name", full_name)):
            errors.check(max_length("full_name", full_name, FULL_NAME_MAX))
