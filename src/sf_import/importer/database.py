"""
State database engines and sessions.

The import lock, the migration registry and the import history share one
state database. Engines are created once per URL and reused by every
component that points at the same database.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, pool, text
from sqlalchemy.orm import Session, sessionmaker

from sf_import.config import StateConfig
from sf_import.exceptions import ConfigurationError, StateError
from sf_import.importer.models import Base
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def create_database_engine(database_url: str, state: StateConfig | None = None) -> Engine:
    """
    Build an engine for the state database.

    SQLite files get no connection pool, so concurrent import processes on
    one host each open their own connection. Server databases use the pool
    settings from ``state``.

    Raises:
        ConfigurationError: If the URL is empty or the engine cannot be built
    """
    if not database_url:
        raise ConfigurationError("State database URL cannot be empty")

    state = state or StateConfig()
    try:
        if database_url.startswith("sqlite"):
            return create_engine(
                database_url,
                poolclass=pool.NullPool,
                connect_args={"check_same_thread": False},
            )

        return create_engine(
            database_url,
            pool_size=state.pool_size,
            pool_timeout=state.pool_timeout,
            pool_recycle=state.pool_recycle,
            pool_pre_ping=True,
        )
    except Exception as e:
        logger.error("Cannot build state database engine", error=str(e), database_url=database_url)
        raise ConfigurationError(f"Invalid state database URL: {e}") from e


def init_database(database_url: str, state: StateConfig | None = None) -> Engine:
    """
    Create the state tables if missing and cache the engine.

    Calling it again for a known URL returns the cached engine.

    Args:
        database_url: SQLAlchemy URL of the state database
        state: Pool settings; defaults apply when omitted

    Returns:
        Engine bound to the state database

    Raises:
        ConfigurationError: If the database cannot be opened or the tables created
    """
    engine = _engines.get(database_url)
    if engine is not None:
        return engine

    engine = create_database_engine(database_url, state)
    try:
        Base.metadata.create_all(engine)
    except Exception as e:
        engine.dispose()
        logger.error("Cannot create state tables", error=str(e), database_url=database_url)
        raise ConfigurationError(f"Failed to initialize state database: {e}") from e

    _engines[database_url] = engine
    _session_factories[database_url] = sessionmaker(bind=engine, expire_on_commit=False)
    logger.debug("State database ready", database_url=database_url)
    return engine


def get_engine(database_url: str) -> Engine:
    return init_database(database_url)


@contextmanager
def get_session(database_url: str) -> Generator[Session, None, None]:
    """
    Session scoped to one unit of work.

    Commits when the block exits normally. On error the session is rolled
    back and the error re-raised as ``StateError``.

    Usage:
        with get_session(url) as session:
            session.add(ImportLock(...))
    """
    get_engine(database_url)
    session = _session_factories[database_url]()
    try:
        yield session
        session.commit()
    except StateError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.debug("State session rolled back", error=str(e))
        raise StateError(f"State database operation failed: {e}") from e
    finally:
        session.close()


def dispose_engines() -> None:
    """Dispose of every cached engine and forget it."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _session_factories.clear()


def validate_database_connection(database_url: str) -> bool:
    """Whether a connection to the state database can be opened."""
    try:
        engine = create_database_engine(database_url)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            engine.dispose()
    except Exception as e:
        logger.error("State database unreachable", error=str(e), database_url=database_url)
        return False

    logger.info("State database reachable", database_url=database_url)
    return True
