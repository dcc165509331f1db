"""
Adapter: Task repository.

Implements TaskRepository port.
Reads/writes the tasks table and its task_assignees link rows. A task row
and its assignee rows are always written in one transaction.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Engine, Row

from app.domain.management.entities import Task, TaskPriority, TaskStatus
from app.domain.management.ports import TaskRepository
from app.infrastructure.management.tables import (
    storable_id,
    task_assignees,
    tasks,
)

logger = logging.getLogger(__name__)


def _row_to_task(row: Row, assignee_ids: Iterable[int]) -> Task:
    """Map a tasks row plus its assignee ids to the Task entity."""
    m = row._mapping
    return Task(
        id=m["id"],
        title=m["title"],
        description=m["description"],
        status=TaskStatus(m["status"]),
        priority=TaskPriority(m["priority"]),
        due_date=m["due_date"],
        estimated_hours=m["estimated_hours"],
        notes=m["notes"],
        project_id=m["project_id"],
        assignee_ids=set(assignee_ids),
        completed_at=m["completed_at"],
        created_at=m["created_at"],
        updated_at=m["updated_at"],
    )


class TaskRepositoryAdapter(TaskRepository):
    """SQLAlchemy adapter for the tasks and task_assignees tables."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, task: Task) -> Task:
        """Insert or update a task and replace its assignee rows."""
        values = {
            "title": task.title,
            "description": task.description,
            "status": task.status.value,
            "priority": task.priority.value,
            "due_date": task.due_date,
            "estimated_hours": task.estimated_hours,
            "notes": task.notes,
            "project_id": task.project_id,
            "completed_at": task.completed_at,
            "created_at": task.created_at,
            "updated_at": task.updated_at,
        }
        with self._engine.begin() as conn:
            if task.id is None:
                result = conn.execute(tasks.insert().values(**values))
                task = replace(task, id=result.inserted_primary_key[0])
            else:
                conn.execute(tasks.update().where(tasks.c.id == task.id).values(**values))
                conn.execute(
                    task_assignees.delete().where(task_assignees.c.task_id == task.id)
                )
            if task.assignee_ids:
                conn.execute(
                    task_assignees.insert(),
                    [
                        {"task_id": task.id, "user_id": user_id}
                        for user_id in sorted(task.assignee_ids)
                    ],
                )
        logger.debug(
            "Saved task: id=%d, assignees=%d", task.id, len(task.assignee_ids)
        )
        return task

    def get_by_id(self, task_id: int) -> Optional[Task]:
        if not storable_id(task_id):
            return None
        with self._engine.connect() as conn:
            row = conn.execute(select(tasks).where(tasks.c.id == task_id)).fetchone()
            if not row:
                return None
            assignees = self._assignees_for(conn, [task_id])
        return _row_to_task(row, assignees[task_id])

    def list_all(
        self,
        status: Optional[TaskStatus] = None,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
    ) -> list[Task]:
        if any(
            i is not None and not storable_id(i) for i in (project_id, assignee_id)
        ):
            return []
        query = select(tasks).order_by(tasks.c.id)
        if status is not None:
            query = query.where(tasks.c.status == status.value)
        if project_id is not None:
            query = query.where(tasks.c.project_id == project_id)
        if assignee_id is not None:
            query = query.where(
                tasks.c.id.in_(
                    select(task_assignees.c.task_id).where(
                        task_assignees.c.user_id == assignee_id
                    )
                )
            )
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
            assignees = self._assignees_for(conn, [r._mapping["id"] for r in rows])
        return [_row_to_task(r, assignees[r._mapping["id"]]) for r in rows]

    def count_by_project(self, project_id: int) -> int:
        if not storable_id(project_id):
            return 0
        query = select(func.count()).select_from(tasks).where(
            tasks.c.project_id == project_id
        )
        with self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def count_by_assignee(self, user_id: int) -> int:
        if not storable_id(user_id):
            return 0
        query = select(func.count()).select_from(task_assignees).where(
            task_assignees.c.user_id == user_id
        )
        with self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def delete(self, task_id: int) -> bool:
        if not storable_id(task_id):
            return False
        with self._engine.begin() as conn:
            conn.execute(
                task_assignees.delete().where(task_assignees.c.task_id == task_id)
            )
            result = conn.execute(tasks.delete().where(tasks.c.id == task_id))
        return result.rowcount > 0

    def remove_assignee(self, user_id: int) -> int:
        """Drop the user from every task. Returns the number of tasks affected."""
        if not storable_id(user_id):
            return 0
        with self._engine.begin() as conn:
            result = conn.execute(
                task_assignees.delete().where(task_assignees.c.user_id == user_id)
            )
        logger.debug("Removed user %d from %d task(s)", user_id, result.rowcount)
        return result.rowcount

    @staticmethod
    def _assignees_for(
        conn: Connection, task_ids: list[int]
    ) -> defaultdict[int, set[int]]:
        """Load assignee ids for a batch of tasks in a single query."""
        assignees: defaultdict[int, set[int]] = defaultdict(set)
        if not task_ids:
            return assignees
        rows = conn.execute(
            select(task_assignees.c.task_id, task_assignees.c.user_id).where(
                task_assignees.c.task_id.in_(task_ids)
            )
        ).fetchall()
        for task_id, user_id in rows:
            assignees[task_id].add(user_id)
        return assignees
