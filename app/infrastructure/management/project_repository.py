"""
Adapter: Project repository.

Implements ProjectRepository port.
Reads/writes the projects table.
"""

import logging
from dataclasses import replace
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Engine, Row

from app.domain.management.entities import Project
from app.domain.management.ports import ProjectRepository
from app.infrastructure.management.tables import projects, storable_id

logger = logging.getLogger(__name__)


def _row_to_project(row: Row) -> Project:
    """Map a projects row to the Project entity."""
    m = row._mapping
    return Project(
        id=m["id"],
        name=m["name"],
        description=m["description"],
        owner_id=m["owner_id"],
        start_date=m["start_date"],
        end_date=m["end_date"],
        active=bool(m["active"]),
        created_at=m["created_at"],
        updated_at=m["updated_at"],
    )


class ProjectRepositoryAdapter(ProjectRepository):
    """SQLAlchemy adapter for the projects table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, project: Project) -> Project:
        """Insert a new project or update an existing one."""
        values = {
            "name": project.name,
            "description": project.description,
            "owner_id": project.owner_id,
            "start_date": project.start_date,
            "end_date": project.end_date,
            "active": project.active,
            "created_at": project.created_at,
            "updated_at": project.updated_at,
        }
        with self._engine.begin() as conn:
            if project.id is None:
                result = conn.execute(projects.insert().values(**values))
                project = replace(project, id=result.inserted_primary_key[0])
            else:
                conn.execute(
                    projects.update().where(projects.c.id == project.id).values(**values)
                )
        logger.debug("Saved project: id=%d", project.id)
        return project

    def get_by_id(self, project_id: int) -> Optional[Project]:
        if not storable_id(project_id):
            return None
        query = select(projects).where(projects.c.id == project_id)
        with self._engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_project(row) if row else None

    def list_all(self, include_archived: bool = False) -> list[Project]:
        query = select(projects).order_by(projects.c.id)
        if not include_archived:
            query = query.where(projects.c.active.is_(True))
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_project(r) for r in rows]

    def count_by_owner(self, owner_id: int) -> int:
        if not storable_id(owner_id):
            return 0
        query = select(func.count()).select_from(projects).where(
            projects.c.owner_id == owner_id
        )
        with self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def delete(self, project_id: int) -> bool:
        if not storable_id(project_id):
            return False
        with self._engine.begin() as conn:
            result = conn.execute(projects.delete().where(projects.c.id == project_id))
        return result.rowcount > 0
