"""
SQLAlchemy table definitions for the management context.

Assignees live in the task_assignees link table (one row per task/user
pair) rather than being copied into the task row.
"""

import logging

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")

# Signed 64-bit INTEGER range of the id columns
MIN_ROW_ID = -(2**63)
MAX_ROW_ID = 2**63 - 1

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(100), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("full_name", String(100), nullable=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=True),
    Column("updated_at", DateTime, nullable=True),
)

projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, index=True),
    Column("description", String(500), nullable=True),
    Column("owner_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=True),
    Column("active", Boolean, nullable=False, default=True, index=True),
    Column("created_at", DateTime, nullable=True),
    Column("updated_at", DateTime, nullable=True),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("status", String(20), nullable=False, index=True),
    Column("priority", String(20), nullable=False),
    Column("due_date", DateTime, nullable=True),
    Column("estimated_hours", Integer, nullable=True),
    Column("notes", String(1000), nullable=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False, index=True),
    Column("completed_at", DateTime, nullable=True),
    Column("created_at", DateTime, nullable=True),
    Column("updated_at", DateTime, nullable=True),
)

task_assignees = Table(
    "task_assignees",
    metadata,
    Column(
        "task_id",
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True, index=True),
)


def storable_id(value: int) -> bool:
    """Return True when the id fits an INTEGER column.

    Ids outside the range cannot name a stored row, so lookups treat them
    as absent instead of handing them to the driver.
    """
    return MIN_ROW_ID <= value <= MAX_ROW_ID


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine. SQLite connections are shared across worker threads.

    An in-memory SQLite URL gets a single shared connection, otherwise
    every pooled connection would see its own empty database.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in IN_MEMORY_SQLITE_URLS:
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, **kwargs)


def create_schema(engine: Engine) -> None:
    """Create any missing tables."""
    metadata.create_all(engine)
    logger.info("Database schema ready: tables=%s", sorted(metadata.tables))
