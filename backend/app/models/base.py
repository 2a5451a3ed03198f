"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID) in a base class
ensures consistency across all models and reduces code duplication.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import DateTime, Enum as SQLEnum, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    Timestamp columns are stored without an offset and always mean UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass


class PrimaryKeyMixin:
    """Mixin to add an auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.

    WHY: Every CRM record is listed newest-first somewhere in the UI, and
    updated_at tells sales reps when a record last moved.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )


def enum_column(enum_cls: Type[Enum], name: str) -> SQLEnum:
    """
    Build a portable enum column type that stores the lowercase value.

    WHY: values_callable ensures the enum value (lowercase) is stored, not
    the name (UPPERCASE). native_enum=False keeps the same schema on SQLite
    (tests) and PostgreSQL.
    """
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda enum: [e.value for e in enum],
    )
