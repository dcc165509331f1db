"""
Task status transition policy.

Transitions are an explicit table of (from, to) pairs so that a stricter
workflow can be swapped in without touching the services. The default
table allows every state to reach every state, including itself: there is
no terminal status and a completed task can be reopened.
"""

from itertools import product
from typing import Iterable

from app.domain.management.entities import TaskStatus
from app.domain.management.errors import BusinessRuleError

INITIAL_STATUS = TaskStatus.PENDING

PERMISSIVE_TRANSITIONS: frozenset[tuple[TaskStatus, TaskStatus]] = frozenset(
    product(TaskStatus, TaskStatus)
)


class StatusTransitionPolicy:
    """Decides whether a task may move from one status to another.

    Usage::

        policy = StatusTransitionPolicy()
        policy.ensure_allowed(TaskStatus.COMPLETED, TaskStatus.PENDING)

        strict = StatusTransitionPolicy(
            {(TaskStatus.PENDING, TaskStatus.IN_PROGRESS)}
        )
    """

    def __init__(
        self,
        transitions: Iterable[tuple[TaskStatus, TaskStatus]] = PERMISSIVE_TRANSITIONS,
    ) -> None:
        self._transitions = frozenset(transitions)

    @property
    def transitions(self) -> frozenset[tuple[TaskStatus, TaskStatus]]:
        return self._transitions

    def can_transition(self, from_status: TaskStatus, to_status: TaskStatus) -> bool:
        """Check if the pair is in the transition table."""
        return (from_status, to_status) in self._transitions

    def allowed_targets(self, from_status: TaskStatus) -> list[TaskStatus]:
        """Return every status reachable from ``from_status``, in declaration order."""
        return [s for s in TaskStatus if (from_status, s) in self._transitions]

    def ensure_allowed(self, from_status: TaskStatus, to_status: TaskStatus) -> None:
        """Raise BusinessRuleError if the transition is not in the table."""
        if not self.can_transition(from_status, to_status):
            allowed = [s.value for s in self.allowed_targets(from_status)]
            raise BusinessRuleError(
                f"Cannot transition task from {from_status.value} to "
                f"{to_status.value}. Allowed: {allowed}"
            )
