"""Database engine and session factory for the SQL gateway"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from loanlight_admin.config import settings


def build_engine(database_url: str | None = None) -> Engine:
    """
    Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections.
    SQLite URLs skip pool sizing (used by tests and local demos).
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)
