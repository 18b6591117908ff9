"""Database engine and session management utilities.

- Builds per-backend engine kwargs (SQLite vs Postgres) with safe pooling defaults.
- Derives the URL from settings, using the test database automatically when APP_ENV=test.
- Exposes a SessionLocal factory and a scoped `get_db` dependency with guaranteed cleanup.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from app.core.config import settings


def _engine_kwargs(database_url: str) -> dict:
    """Return engine keyword arguments tuned per backend (SQLite vs pooled Postgres)."""
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_recycle": 300,
    }


def build_engine(database_url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using application settings by default.

    Respects APP_ENV=test by choosing the test DSN to protect production data.
    """
    if database_url is None:
        use_test_url = settings.environment.lower() == "test"
        database_url = settings.get_database_url(use_test=use_test_url)
    engine = create_engine(database_url, **_engine_kwargs(database_url))
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine: Engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session with guaranteed cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
