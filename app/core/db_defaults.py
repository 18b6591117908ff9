"""Column type and default helpers shared by every domain model."""

from sqlalchemy import Enum as SAEnum
from sqlalchemy.sql import text


def timestamp_default():
    """Server-side ``CURRENT_TIMESTAMP``, valid on both SQLite and PostgreSQL."""
    return text("CURRENT_TIMESTAMP")


def enum_column(enum_cls, name: str) -> SAEnum:
    """Enum type that stores member values, so rows read like the API payloads."""
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [item.value for item in members],
    )


__all__ = ["timestamp_default", "enum_column"]
