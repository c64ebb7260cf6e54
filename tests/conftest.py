"""
tests/conftest.py

Shared fixtures: an in-memory SQLite store and a small timesheet export.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers TimesheetEntryRecord on Base.metadata
from db.base import Base
from db.session import build_session_factory

TIMESHEET_HEADER = (
    "Item ID,Item Name,Log Owner,Log Hours,Item Type,Reported By,Requested Date,"
    "Start Date,Actual Release Date,Expected Release Date,Estimation Points,Project Name,Status,Extra"
)

TIMESHEET_ROWS = (
    "T1,Login page,Alice,2,Story,Client,01/Jul/2025,02/Jul/2025,07/Jul/2025,04/Jul/2025,1,Portal,Done,",
    "T1,Login page,Alice,3,Story,Client,01/Jul/2025,02/Jul/2025,07/Jul/2025,04/Jul/2025,1,Portal,Done,",
    "B7,Crash fix,Bob,4,Bug,Planned sprint,03/Jul/2025 09:00 AM,03/Jul/2025,,,2,Portal,In Progress,",
    ",,,,,,,,,,,,,stray note",
)


def build_csv(header: str = TIMESHEET_HEADER, rows: tuple[str, ...] = TIMESHEET_ROWS) -> bytes:
    return ("\n".join((header, *rows)) + "\n").encode("utf-8")


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    sqlite_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(sqlite_engine)
    yield sqlite_engine
    sqlite_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def timesheet_csv() -> bytes:
    """Three log rows (two fragments of T1, one bug) plus one row with no known values."""
    return build_csv()
