"""
Database session management for Puckstats.

Provides the SQLAlchemy engine and session factory with connection
pooling configured from config.py. The engine is created on first use,
so importing this module never opens a connection.

Stores never commit. They take a Session from the caller, wrap each
write in a savepoint and flush; the caller decides when to commit.

Usage:
    # As a context manager (recommended for scripts)
    from puckstats.db import get_session

    with get_session() as session:
        store = MatchStore(session)
        store.create(draft)
        # Commits automatically on exit, rolls back on exception

    # As a generator dependency
    from puckstats.db.session import get_db

    for session in get_db():
        ...
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from puckstats.config import settings

logger = logging.getLogger(__name__)


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make a SQLite engine behave like the PostgreSQL one.

    - Foreign keys are enforced (SQLite leaves them off per connection)
    - pysqlite's own transaction handling is disabled and BEGIN is
      emitted by SQLAlchemy instead, so SAVEPOINTs nest correctly
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        """Called when a new connection is created."""
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    The engine is configured with:
    - Connection pool sized from settings (PostgreSQL only)
    - Echo mode enabled only when LOG_LEVEL=DEBUG
    - Pre-ping to verify connections before use (handles stale connections)
    """
    url = make_url(database_url or settings.database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(url, echo=settings.log_level == "DEBUG")
        return configure_sqlite(engine)

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,  # Verify connection is alive before using
        echo=settings.log_level == "DEBUG",  # Log SQL only in debug mode
    )


# Singleton engine, created lazily
_engine: Optional[Engine] = None


def _get_engine() -> Engine:
    """Get or create the singleton engine instance."""
    global _engine
    if _engine is None:
        _engine = get_engine()
        logger.info("Created database engine for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


# Session factory - bound to the engine when a session is opened
SessionLocal = sessionmaker(
    autoflush=False,  # Stores flush explicitly after each write
    expire_on_commit=False,
)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Automatically commits on successful exit, rolls back on exception.
    This is the recommended way to use sessions in scripts.

    Example:
        with get_session() as session:
            MatchStore(session).update(match_id, draft)
            # Commits automatically when exiting the block

    Raises:
        Any exception from the database operation (after rollback)
    """
    session = SessionLocal(bind=_get_engine())
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    Yield a request-scoped session that the caller commits itself.
    """
    db = SessionLocal(bind=_get_engine())
    try:
        yield db
    finally:
        db.close()
