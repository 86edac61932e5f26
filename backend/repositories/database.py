"""
Engine and session factory for the moderation and notification store.

Users with their device tokens, chats, rooms, reports, sanctions and the
audit log all live in one relational database. Every request, trigger and
maintenance task works through its own short-lived session.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool

from models.config import Settings, get_settings


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the engine for ``settings.DATABASE_URL``.

    SQLite (local runs, tests) opens a connection per session with NullPool.
    Server databases get a pre-pinged QueuePool sized from settings.
    """
    if is_sqlite_url(settings.DATABASE_URL):
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

    return create_engine(
        settings.DATABASE_URL,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = create_db_engine(get_settings())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
