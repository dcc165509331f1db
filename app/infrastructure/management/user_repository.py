"""
Adapter: User repository.

Implements UserRepository port.
Reads/writes the users table.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import IntegrityError

from app.domain.management.entities import EntityKind, User
from app.domain.management.errors import DuplicateResourceError
from app.domain.management.ports import UserRepository
from app.infrastructure.management.tables import storable_id, users

logger = logging.getLogger(__name__)


def _row_to_user(row: Row) -> User:
    """Map a users row to the User entity."""
    m = row._mapping
    return User(
        id=m["id"],
        username=m["username"],
        email=m["email"],
        password_hash=m["password_hash"],
        full_name=m["full_name"],
        active=bool(m["active"]),
        created_at=m["created_at"],
        updated_at=m["updated_at"],
    )


class UserRepositoryAdapter(UserRepository):
    """SQLAlchemy adapter for the users table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, user: User) -> User:
        """Insert a new user or update an existing one.

        Raises:
            DuplicateResourceError: If the username or email was taken by
                a concurrent write after the service checked it.
        """
        values = {
            "username": user.username,
            "email": user.email,
            "password_hash": user.password_hash,
            "full_name": user.full_name,
            "active": user.active,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }
        try:
            with self._engine.begin() as conn:
                if user.id is None:
                    result = conn.execute(users.insert().values(**values))
                    user = replace(user, id=result.inserted_primary_key[0])
                else:
                    conn.execute(
                        users.update().where(users.c.id == user.id).values(**values)
                    )
        except IntegrityError as exc:
            raise self._duplicate_error(user) from exc
        logger.debug("Saved user: id=%d", user.id)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        if not storable_id(user_id):
            return None
        return self._one(select(users).where(users.c.id == user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._one(select(users).where(users.c.username == username))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._one(select(users).where(users.c.email == email))

    def get_many(self, user_ids: Iterable[int]) -> list[User]:
        ids = [i for i in user_ids if storable_id(i)]
        if not ids:
            return []
        query = select(users).where(users.c.id.in_(ids)).order_by(users.c.id)
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_user(r) for r in rows]

    def list_all(self, active: Optional[bool] = None) -> list[User]:
        query = select(users).order_by(users.c.id)
        if active is not None:
            query = query.where(users.c.active == active)
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_user(r) for r in rows]

    def delete(self, user_id: int) -> bool:
        if not storable_id(user_id):
            return False
        with self._engine.begin() as conn:
            result = conn.execute(users.delete().where(users.c.id == user_id))
        return result.rowcount > 0

    def _one(self, query) -> Optional[User]:
        with self._engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_user(row) if row else None

    def _duplicate_error(self, user: User) -> DuplicateResourceError:
        """Name the unique column another row already holds."""
        taken = self.get_by_username(user.username)
        if taken is not None and taken.id != user.id:
            logger.warning("Username already exists: %s", user.username)
            return DuplicateResourceError(EntityKind.USER, "username", user.username)
        logger.warning("Email already exists: %s", user.email)
        return DuplicateResourceError(EntityKind.USER, "email", user.email)
