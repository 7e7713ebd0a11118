# backend/drivigo/database.py
from datetime import datetime
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        connect_args={"connect_timeout": 10, "application_name": "drivigo_backend"},
    )


engine: Engine = _build_engine(settings.database_url)


@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """Return the SQLAlchemy dialect name of the engine bound to ``session``."""
    try:
        bind = session.get_bind()
    except Exception:
        return default
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", default) or default


def init_db(bind: Engine | None = None) -> None:
    """Create all tables registered on ``Base``."""
    from . import models  # noqa: F401  # register mappers

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
