"""Canonical records returned by the data layer.

Records validate from either an ORM instance (``from_attributes``) or a raw
driver row (a plain dict), so both persistence paths hand callers the same
shape.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from taskboard.models.enums import TaskStatus


class Record(BaseModel):
    """Base for records built from ORM objects or driver rows."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("id", "user_id", mode="before", check_fields=False)
    @classmethod
    def stringify_identifier(cls, value: Any) -> Any:
        """Driver-native keys (UUID objects and the like) become strings."""
        if value is None:
            return value
        return str(value)

    @field_validator("created_at", "updated_at", mode="before", check_fields=False)
    @classmethod
    def normalize_timestamp(cls, value: Any) -> Any:
        """Parse textual timestamps and treat naive ones as UTC."""
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class UserCredentials(Record):
    """User projection for credential checks."""

    id: str
    username: str
    password_hash: str


class UserProfile(Record):
    """User projection safe to show to the user; never carries the password hash."""

    id: str
    username: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    avatar: str | None = None
    created_at: datetime
    updated_at: datetime


class TaskRecord(Record):
    """A task as seen by its owner."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime
    updated_at: datetime
