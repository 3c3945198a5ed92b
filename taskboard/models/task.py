"""Task model."""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.models.enums import TaskStatus
from taskboard.models.mixins import IdentifierMixin, TimestampMixin


class Task(Base, IdentifierMixin, TimestampMixin):
    """Task owned by a single user."""

    __tablename__ = "tasks"

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.PENDING.value)

    # Relationships
    user = relationship("User", back_populates="tasks")
