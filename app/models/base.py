"""Declarative base shared by every EduConnect table."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Root of the ORM class hierarchy; ``Base.metadata`` drives create_all and Alembic."""


__all__ = ["Base"]
