"""User model."""

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.models.mixins import IdentifierMixin, TimestampMixin


class User(Base, IdentifierMixin, TimestampMixin):
    """User model for authentication and task ownership."""

    __tablename__ = "users"

    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    avatar = Column(String(500), nullable=True)  # URL

    # Relationships
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
