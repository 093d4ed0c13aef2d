"""
Database Configuration Module

SQLAlchemy 2.0 setup for the Book Reviews API.

Session Management Pattern
==========================
One session per request:
1. Request arrives → create a new session
2. Services use the session for the whole unit of work
3. Services commit on success, roll back on failure
4. The session is closed when the request ends

The session is handed to route handlers through FastAPI's dependency
injection (see get_db below).
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bookreviews.config import get_settings

settings = get_settings()


# =============================================================================
# Database Engine
# =============================================================================
def _engine_options() -> dict[str, Any]:
    """
    Engine keyword arguments for the configured database.

    Pool sizing only applies to server databases; SQLite (used for local
    development and tests) must allow use across threads instead.
    """
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,  # Verify connections are alive before using
    }


engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # Log SQL in debug mode
    **_engine_options(),
)


# =============================================================================
# Session Factory
# =============================================================================
# autoflush=False: services flush explicitly before reading back their own
# writes (the rating aggregator relies on this).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover models for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Code before yield creates the session, code after yield closes it,
    even when the route raised.

    Usage in Routes:
        @router.get("/books/")
        def list_books(db: DbSession):
            ...

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    Handy for development and the seed script. In production, use Alembic
    migrations instead.
    """
    Base.metadata.create_all(bind=engine)
