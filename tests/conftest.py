"""Shared fixtures: an in-memory database with the owned and foreign tables."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the project root (which contains the ``app`` package) is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)
os.environ.pop("NOTIFICATION_RECIPIENT", None)

from sqlalchemy import (  # noqa: E402
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
)
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.infrastructure import models  # noqa: E402,F401
from app.infrastructure.database import Base  # noqa: E402
from app.infrastructure.record_store import RecordStore  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def record_store(engine) -> RecordStore:
    return RecordStore(engine)


@pytest.fixture()
def foreign_tables(engine) -> MetaData:
    """Create the tables owned by the main application.

    ``plants`` is deliberately absent so lookups must skip a missing table.
    """

    metadata = MetaData()
    Table(
        "todos",
        metadata,
        Column("id", String(36), primary_key=True),
        Column("title", String(200)),
        Column("completed", Integer, default=0),
        Column("status", String(20)),
        Column("completed_at", DateTime),
        Column("due_date", String(10)),
        Column("priority", String(20)),
    )
    Table(
        "user_tasks",
        metadata,
        Column("id", String(36), primary_key=True),
        Column("user_id", String(36)),
        Column("name", String(200)),
        Column("description", String(500)),
        Column("status", String(20)),
        Column("completed_at", DateTime),
        Column("due_date", String(10)),
        Column("priority", String(20)),
        Column("category", String(50)),
        Column("plant_id", String(36)),
        Column("plant_name", String(100)),
        Column("created_at", DateTime),
    )
    Table(
        "task_completions",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("task_id", String(36)),
        Column("completed_at", DateTime),
    )
    Table(
        "user_plants",
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(100)),
        Column("tenda_id", String(36)),
    )
    Table(
        "plantas",
        metadata,
        Column("id", String(36), primary_key=True),
        Column("strain", String(100)),
        Column("tenda_id", String(36)),
    )
    Table(
        "tendas",
        metadata,
        Column("id", String(36), primary_key=True),
        Column("nome", String(100)),
        Column("name", String(100)),
    )
    Table(
        "user_profiles",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("user_id", String(36)),
        Column("email", String(200)),
        Column("nome_preferido", String(100)),
        Column("nome", String(100)),
    )
    metadata.create_all(engine)
    return metadata


@pytest.fixture()
def insert_row(engine, foreign_tables):
    """Return a helper inserting one row into a foreign table."""

    def _insert(table_name: str, **values) -> None:
        table = foreign_tables.tables[table_name]
        with engine.begin() as connection:
            connection.execute(insert(table).values(**values))

    return _insert
