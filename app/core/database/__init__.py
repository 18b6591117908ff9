"""Core database access helpers.

Re-exports the engine, SessionLocal and the `get_db` dependency from
`app.core.database.session` together with the shared declarative `Base`.
"""

from app.models.base import Base

from .session import SessionLocal, build_engine, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db", "build_engine"]
