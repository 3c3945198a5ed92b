"""Enums for model fields."""

from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle states of a task."""

    PENDING = "pending"
    COMPLETED = "completed"
