"""
Database engine and session factory construction.

The engine and sessionmaker are built once at startup (see ``fpl_sync.main``)
and injected into the repositories; nothing here is a module-level singleton.
"""
import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool


def create_db_engine(database_url: str, pool_size: int = 10, echo: Optional[bool] = None) -> Engine:
    """
    Create a SQLAlchemy engine.

    SQLite URLs (used by the test suite) get a StaticPool so every session sees
    the same in-memory database; everything else gets a pre-pinged QueuePool.
    """
    if echo is None:
        echo = os.getenv("SQL_ECHO", "false").lower() == "true"

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=pool_size * 2,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create missing tables."""
    from fpl_sync.models.models import Base
    Base.metadata.create_all(bind=engine, checkfirst=True)
