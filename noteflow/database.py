# noteflow/database.py
"""
Engine, session factory and declarative base.

Services only ever do single-row reads, indexed scans and short conditional
writes against this engine, each committed on its own.
"""

import os
from collections.abc import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from noteflow.config import get_settings

load_dotenv()


def _database_url() -> str:
    if not os.getenv("DATABASE_URL"):
        raise RuntimeError("DATABASE_URL is not set; add it to the environment or .env")
    # Settings normalises postgresql:// to the psycopg2 driver URL
    return get_settings().DATABASE_URL


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def build_engine(url: str) -> Engine:
    """
    Create an engine for `url`.

    In-memory SQLite is pinned to one shared connection; with a regular pool
    each session would open its own empty database. SQLite connections get a
    Unicode-aware lower() so case-insensitive search matches PostgreSQL.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, future=True)

    if ":memory:" in url:
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    else:
        engine = create_engine(url, connect_args={"check_same_thread": False}, future=True)
    event.listen(engine, "connect", _register_sqlite_functions)
    return engine


engine = build_engine(_database_url())
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Request-scoped session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
