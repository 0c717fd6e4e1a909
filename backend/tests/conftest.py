import os

# Point the module-level engine at a throwaway in-memory database before the
# application package is imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "dev")

import pytest
from sqlmodel import Session

from student_management.container import build_services
from student_management.database import create_db_and_tables, make_engine


@pytest.fixture
def engine():
    """A fresh in-memory SQLite database with all tables created."""
    eng = make_engine("sqlite://")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine, expire_on_commit=False) as s:
        yield s


@pytest.fixture
def services(session):
    return build_services(session)


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient
    from student_management.main import app, get_session

    def _session_override():
        with Session(engine, expire_on_commit=False) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
