"""Database configuration using SQLAlchemy."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from chess_review.config import settings

# Base class for models
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with pool settings suited to the backend.

    SQLite gets a per-thread connection check disabled so the worker can
    hand sessions to ``asyncio.to_thread``; server databases get a sized pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory whose objects stay readable after commit."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = build_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables for all registered models."""
    # Import all models to register them with Base
    from chess_review import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
