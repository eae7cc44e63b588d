"""Database connection management for InvoiceHub.

Provides synchronous database access using SQLAlchemy on SQLite.

Usage:
    # FastAPI dependency
    from invoicehub.db.connection import get_db, init_db

    init_db()  # Create tables
    db = next(get_db())

    # With an explicit session factory (orchestrator, tests)
    with session_scope(factory) as db:
        ...
"""

import os
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from invoicehub.db.models import Base

SessionFactory = Callable[[], Session]


def get_database_url() -> str:
    """Get database URL from environment or use default SQLite.

    Precedence:
    1. INVOICEHUB_DATABASE_URL
    2. DATABASE_URL
    3. sqlite:///<data dir>/invoicehub.db
    """
    for var in ("INVOICEHUB_DATABASE_URL", "DATABASE_URL"):
        database_url = os.environ.get(var, "").strip()
        if database_url:
            return database_url

    from invoicehub.utils.paths import get_default_db_path
    return f"sqlite:///{get_default_db_path()}"


def build_engine(url: str) -> Engine:
    """Create an engine with SQLite-specific connection settings.

    In-memory SQLite URLs get a StaticPool so every session shares the one
    connection that holds the database.
    """
    kwargs: dict[str, Any] = {
        "echo": os.environ.get("SQL_ECHO", "").lower() == "true",
    }
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool

    new_engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _set_sqlite_pragma)
    return new_engine


def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    """Configure SQLite pragmas.

    - foreign_keys=ON: referential integrity (off by default in SQLite).
    - journal_mode=WAL: API readers do not block the orchestrator's writes.
    - synchronous=NORMAL: durable after WAL fsync.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.close()


DATABASE_URL = get_database_url()
engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for a single request.

    Intended for use with FastAPI's Depends().
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: SessionFactory) -> Generator[Session, None, None]:
    """Open a session from ``factory``; commit on success, roll back on error."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)


def make_session_factory(url: str | None = None) -> sessionmaker:
    """Return the default session factory, or one bound to ``url``."""
    if not url or url == DATABASE_URL:
        return SessionLocal
    return sessionmaker(autocommit=False, autoflush=False, bind=build_engine(url))
