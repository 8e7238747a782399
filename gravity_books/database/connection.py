"""
Database Connection Management

Synchronous SQLAlchemy 2.0 engine and session lifecycle for batch reporting.
Implements connection verification, scoped sessions and graceful shutdown.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from gravity_books.config import get_settings
from gravity_books.database.models import Base
from gravity_books.exceptions import DataAccessError

logger = structlog.get_logger(__name__)

# Global engine
_engine: Optional[Engine] = None


def create_db_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create an engine for the given URL, falling back to configured settings.
    
    In-memory SQLite databases share a single connection across threads so
    every session sees the same data.
    
    Raises:
        DataAccessError: If the URL is malformed or its driver is missing
    """
    settings = get_settings()
    url = url or settings.database.get_url()
    
    engine_config: Dict[str, Any] = {
        "echo": settings.database.echo if echo is None else echo,
        "pool_pre_ping": settings.database.pool_pre_ping,
    }
    if url.startswith("sqlite"):
        engine_config["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            engine_config["poolclass"] = StaticPool
    
    try:
        return create_engine(url, **engine_config)
    except (SQLAlchemyError, ImportError) as e:
        raise DataAccessError(f"Cannot create engine: {e}") from e


def init_database(url: Optional[str] = None) -> Engine:
    """
    Initialize the global engine.
    
    Returns:
        Engine: The initialized database engine
    
    Raises:
        DataAccessError: If the database cannot be reached
    """
    global _engine
    
    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine
    
    engine = create_db_engine(url)
    
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Failed to connect to database", error=str(e))
        engine.dispose()
        raise DataAccessError(f"Cannot connect to database: {e}") from e
    
    _engine = engine
    logger.info("Database connection established", dialect=engine.dialect.name)
    
    return _engine


def close_database() -> None:
    """Dispose of the global engine and its connection pool."""
    global _engine
    
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database connection pool closed")


def get_engine() -> Engine:
    """
    Get the database engine.
    
    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


def create_schema(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise DataAccessError(f"Failed to create schema: {e}") from e


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """
    Open a session bound to ``engine``.
    
    Commits on success and rolls back on error. SQLAlchemy errors are
    re-raised as DataAccessError.
    """
    session = Session(bind=engine, expire_on_commit=False, autoflush=False)
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        session.rollback()
        raise DataAccessError(str(e)) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_database_health(engine: Optional[Engine] = None) -> Dict[str, Any]:
    """
    Check database health status.
    
    Returns:
        dict: Health status with latency information
    """
    try:
        engine = engine or get_engine()
        start = time.perf_counter()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
        
        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "dialect": engine.dialect.name,
        }
    except (SQLAlchemyError, RuntimeError) as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
