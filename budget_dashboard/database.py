"""Database engine, session factory and declarative base."""

from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from budget_dashboard.config import get_settings

Base = declarative_base()


def _build_engine(database_url: str) -> Engine:
    """Create the engine, enabling cross-thread use for SQLite."""
    connect_args = {}
    if make_url(database_url).drivername.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, connect_args=connect_args)


engine = _build_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for DB sessions (yield pattern)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create tables if they are missing."""
    from budget_dashboard import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
