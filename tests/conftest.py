"""Shared fixtures: in-memory database, API client and workbook builder."""

from __future__ import annotations

import os
from io import BytesIO

# Keep the application engine off the on-disk default database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from budget_dashboard.database import Base, get_db, init_db

HEADER = [
    "Action",
    "Activités",
    "Tâches",
    "Département",
    "Unité",
    "Paragraphe Code",
    "Libellé",
    "AE",
    "CP",
    "Engagé",
]


def build_xlsx_bytes(sheets):
    """Build an .xlsx file in memory from ``{sheet_name: [row, ...]}``."""
    workbook = Workbook()
    workbook.remove(workbook.active)

    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(row)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with factory() as session:
        yield session


@pytest.fixture
def client(db):
    from budget_dashboard.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
