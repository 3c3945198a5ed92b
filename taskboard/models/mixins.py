"""Mixins for SQLAlchemy models."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func


def new_identifier() -> str:
    """Generate a primary key in canonical UUID string form."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class IdentifierMixin:
    """Mixin to add a string UUID primary key."""

    id = Column(String(36), primary_key=True, default=new_identifier)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns.

    Timestamps are generated in Python so every writer stores microseconds;
    SQLite's CURRENT_TIMESTAMP only keeps whole seconds.
    """

    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
