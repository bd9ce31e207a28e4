"""
Database engine, session factory and unit-of-work helpers.

The booking transaction relies on one session per request: services flush
as they go and the caller (router dependency or ``session_scope``) decides
whether the whole unit commits or rolls back.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from flight_booking.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(
    database_url: str,
    echo: bool = False,
    connect_args: Optional[Dict[str, object]] = None,
):
    """Return an engine/session factory pair, tuned for SQLite when needed"""
    final_connect_args: Dict[str, object] = dict(connect_args or {})
    engine_kwargs = {"echo": echo, "future": True}

    if database_url.startswith("sqlite"):
        final_connect_args.setdefault("check_same_thread", False)
        final_connect_args.setdefault("timeout", settings.SQLITE_TIMEOUT_SECONDS)
        if database_url.endswith(":memory:"):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, connect_args=final_connect_args, **engine_kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    session_factory = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    return engine, session_factory


engine, SessionLocal = create_session_factory(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet"""
    # Import models so they register on Base.metadata
    from flight_booking import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()
