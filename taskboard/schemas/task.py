"""Task schemas."""

from pydantic import BaseModel, Field

from taskboard.models.enums import TaskStatus


class TaskCreate(BaseModel):
    """Create a new task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: TaskStatus | None = None


class TaskUpdate(BaseModel):
    """Update a task."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: TaskStatus | None = None
