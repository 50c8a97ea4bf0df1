"""Database engine, session factory and declarative base."""

from contextlib import contextmanager
from typing import Generator, Iterator

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.core.exceptions import InfrastructureError

logger = structlog.get_logger(__name__)
settings = get_settings()


def make_engine(url: str) -> Engine:
    """Create an engine; SQLite URLs get thread and in-memory pool settings."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session, operation: str) -> Iterator[None]:
    """Translate driver/ORM failures into InfrastructureError.

    The session is rolled back so it can be reused by the request.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store operation failed", operation=operation, error=str(exc))
        db.rollback()
        raise InfrastructureError(details={"operation": operation}) from exc
