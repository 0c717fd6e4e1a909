"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` and provides the small helpers used by the
application, scripts and tests: table creation, a per-request session
provider and the `transaction` block that every service operation runs
inside.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from .config import settings
from .errors import StudentManagementError, TransactionFailureError

logger = logging.getLogger("student_management.database")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False, pool_size: int = 5):
    """Build an engine for `url`.

    SQLite connections get foreign-key enforcement switched on, and an
    in-memory URL is pinned to a single shared connection so every session
    sees the same database. Other backends get a sized, pre-pinged pool.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        eng = create_engine(url, echo=echo, **kwargs)
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
        return eng
    return create_engine(url, echo=echo, pool_size=pool_size, pool_pre_ping=True)


engine = make_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, pool_size=settings.DB_POOL_SIZE)


def create_db_and_tables(bind=None):
    """Create the `courses`, `students` and `payments` tables if missing.

    Intended for local development, scripts and tests; a deployment with a
    long-lived database should manage schema changes with a migration tool.
    """
    from . import models  # noqa: F401  registers the tables on SQLModel.metadata

    SQLModel.metadata.create_all(bind if bind is not None else engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes, whether or not the request succeeded.
    """
    with Session(engine, expire_on_commit=False) as session:
        yield session


@contextmanager
def transaction(session: Session):
    """Run the enclosed block as one unit of work.

    Commits when the block finishes. On any exception the session is rolled
    back; domain errors are re-raised unchanged and store errors are raised
    as `TransactionFailureError` chained to the original.
    """
    try:
        yield session
        session.commit()
    except StudentManagementError as exc:
        session.rollback()
        logger.warning("rolled back unit of work: %s", exc)
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("rolled back unit of work after store error: %s", exc)
        raise TransactionFailureError(f"transaction rolled back: {exc}") from exc
    except Exception:
        session.rollback()
        logger.exception("rolled back unit of work after unexpected error")
        raise
