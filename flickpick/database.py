"""
FlickPick — Database Engine & Session Factory
Supports SQLite (local dev) and PostgreSQL (production).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from flickpick.config import get_settings
from flickpick.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Shared declarative base — all ORM models inherit from this."""

    pass


def build_engine(database_url: str) -> Engine:
    """Construct SQLAlchemy engine with appropriate settings for URL type."""
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        # SQLite uses SingletonThreadPool — pool_size/max_overflow are not supported
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragmas(dbapi_conn, _connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    else:
        engine = create_engine(
            database_url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            echo=False,
        )

    return engine


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=bind, autocommit=False, autoflush=False)


# Default engine for scripts and for apps built from the environment settings
settings = get_settings()
engine: Engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal: sessionmaker[Session] = make_session_factory(engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a SQLAlchemy Session from the app's
    session factory. Automatically closes the session after the request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """
    Create all tables defined in all model modules.
    Call this on application startup.
    """
    # Import all models so their table definitions are registered on Base.metadata
    from flickpick.models import movies, users  # noqa: F401

    Base.metadata.create_all(bind=bind)


@contextmanager
def store_operation(db: Session, operation: str) -> Iterator[Session]:
    """
    Wrap a unit of store work. Any SQLAlchemyError rolls the session back,
    is logged with its traceback and re-raised as StoreUnavailableError.
    """
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store failure during %s", operation)
        raise StoreUnavailableError(operation) from exc
