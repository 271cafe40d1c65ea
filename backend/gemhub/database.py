# backend/gemhub/database.py
"""
Database connection and session management.

This module configures SQLAlchemy with:
- Local persistent storage (SQLite file) or a server database (PostgreSQL)
- Environment-aware settings (test vs production)
- Health check capabilities

Pool Configuration (PostgreSQL, configurable via environment variables):
- DB_POOL_SIZE: Persistent connections (default: 5)
- DB_POOL_MAX_OVERFLOW: Burst capacity (default: 10)
- DB_POOL_RECYCLE: Connection lifetime (default: 3600s)
- DB_POOL_PRE_PING: Health checks (default: True)
"""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool

from gemhub.config import settings
from gemhub.models import Base

logger = logging.getLogger(__name__)


def _create_engine():
    """
    Create SQLAlchemy engine with environment-appropriate configuration.

    Returns:
        Engine: Configured SQLAlchemy engine

    Configuration varies by database type:
    - SQLite in-memory: StaticPool so every session shares one connection
    - SQLite file: default pool, local persistent storage
    - PostgreSQL: QueuePool with configurable connection pooling
    """
    if settings.is_sqlite:
        # check_same_thread=False: sessions are used from the refresh thread too
        if settings.is_in_memory:
            logger.info("Configuring in-memory SQLite database")
            return create_engine(
                settings.database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=settings.debug,
            )

        logger.info(f"Configuring local SQLite storage: {settings.database_url}")
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info(
        f"Configuring PostgreSQL database pool: "
        f"size={settings.db_pool_size}, "
        f"max_overflow={settings.db_pool_max_overflow}, "
        f"recycle={settings.db_pool_recycle}s, "
        f"pre_ping={settings.db_pool_pre_ping}"
    )

    return create_engine(
        settings.database_url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_timeout=30,
        echo=settings.debug,
    )


# Create engine and session factory
engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_database() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Yields:
        Session: A SQLAlchemy database session that auto-closes after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns:
        dict: Health status with connection info
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": "sqlite" if settings.is_sqlite else "postgresql",
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }
