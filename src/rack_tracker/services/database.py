"""
Database engine and session management for the SQL store backend.

This module provides:
- Database engine creation and configuration
- SQLite pragmas (foreign keys, WAL mode)
- Session factory creation
- Transactional session scope
- Table initialization
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..models.base import Base

# Configure logging
logger = logging.getLogger(__name__)


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Set SQLite pragmas on connection.

    Registered for every SQLite engine created by create_database_engine().
    """
    cursor = dbapi_connection.cursor()

    cursor.execute("PRAGMA foreign_keys=ON")

    # WAL lets readers proceed while a writer holds the database
    cursor.execute("PRAGMA journal_mode=WAL")

    cursor.execute("PRAGMA synchronous=NORMAL")

    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Database URL. If None, uses the configured SQLite file.
        echo: If True, log all SQL statements (useful for debugging)

    Returns:
        Configured SQLAlchemy Engine
    """
    if database_url is None:
        from ..utils.config import get_config

        database_url = get_config().database_url

    logger.info(f"Creating database engine: {database_url}")

    if ":memory:" in database_url or "mode=memory" in database_url:
        # For in-memory databases (testing), use StaticPool so every
        # session sees the same connection
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    else:
        engine = create_engine(database_url, echo=echo)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _set_sqlite_pragma)

    return engine


def init_database(engine: Engine) -> None:
    """
    Initialize the database by creating all tables.

    Safe to call multiple times - existing tables won't be recreated.

    Args:
        engine: Engine to create the tables on
    """
    logger.info("Initializing database tables")

    # Import models so they're registered with Base
    from ..models import ledger_record  # noqa: F401

    Base.metadata.create_all(engine)

    logger.info("Database tables initialized successfully")


def verify_database(engine: Engine) -> bool:
    """
    Verify that the database is accessible and has the records table.

    Returns:
        True if database is valid, False otherwise
    """
    try:
        inspector = inspect(engine)
        return "ledger_records" in inspector.get_table_names()
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        return False


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Create a session factory bound to `engine`.

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Provide a transactional scope for database operations.

    This context manager handles session lifecycle automatically:
    - Creates a new session
    - Commits on success
    - Rolls back on exception
    - Always closes the session

    Yields:
        Database session

    Example:
        with session_scope(factory) as session:
            session.add(LedgerRecord.from_dict("inventory", 0, record))
            # Commit happens automatically if no exception
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
