# backend/drivigo/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Generator

from sqlalchemy.orm import Session, sessionmaker

from ...database import SessionLocal, get_db as original_get_db


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that is committed on success and always closed
    """
    yield from original_get_db()


def get_session_factory() -> sessionmaker:
    """
    Session factory for long-lived handlers (WebSockets) that should not hold
    a pooled connection for their whole lifetime.
    """
    return SessionLocal
