"""
Database connection and session management.

This module handles:
- Database engine creation (SQLite gets WAL journaling and thread sharing)
- Session factory setup
- Scoped sessions with commit/rollback handling
- Connection health checks
- Table creation on startup

Nothing here holds a module-level engine; the application factory builds one
from settings and hands it to the identity store.
"""

from contextlib import contextmanager
from typing import Generator, Dict, Any
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from faction_badges.core.exceptions import DatabaseException

logger = logging.getLogger('CORE_DATABASE')


def _enable_sqlite_wal(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are shared across FastAPI's worker threads, and file
    databases switch to WAL journaling. In-memory databases use a single
    static connection so every session sees the same tables.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log emitted SQL

    Returns:
        Engine: Configured engine
    """
    url = make_url(database_url)
    engine_config: Dict[str, Any] = {'echo': echo}

    if url.get_backend_name() == "sqlite":
        engine_config['connect_args'] = {'check_same_thread': False}
        if url.database in (None, "", ":memory:"):
            engine_config['poolclass'] = StaticPool
    else:
        engine_config['pool_pre_ping'] = True

    engine = create_engine(database_url, **engine_config)

    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        event.listen(engine, "connect", _enable_sqlite_wal)

    logger.info(f"Database engine created for {url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Commits on success and rolls back on exceptions. SQLAlchemy errors are
    re-raised as DatabaseException; anything else propagates unchanged.

    Yields:
        Session: SQLAlchemy database session

    Raises:
        DatabaseException: If a database operation fails

    Example:
        with session_scope(factory) as db:
            user = db.get(User, 1)
            user.faction = "A"
            # Automatically commits on exit
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DatabaseException(f"Database operation failed: {str(e)}") from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_database_health(engine: Engine) -> Dict[str, Any]:
    """
    Check database connection health and return status.

    Returns:
        dict: Health status with the (password-masked) database URL

    Example:
        {
            "status": "healthy",
            "database": "sqlite:///data.db"
        }
    """
    database = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            result.fetchone()
            return {"status": "healthy", "database": database}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e), "database": database}


def init_db(engine: Engine) -> None:
    """
    Create all tables that do not exist yet.

    Safe to call on every startup.
    """
    from faction_badges.models import Base

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        # Re-raise to prevent app startup if critical initialization fails
        raise
