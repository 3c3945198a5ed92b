"""Pydantic schemas for API requests and responses."""

from taskboard.schemas.auth import (
    AuthResponse,
    RegisterResponse,
    UserLogin,
    UserRegister,
    UserSummary,
)
from taskboard.schemas.profile import PasswordChange, ProfileUpdate
from taskboard.schemas.task import TaskCreate, TaskUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserSummary",
    "RegisterResponse",
    "AuthResponse",
    "ProfileUpdate",
    "PasswordChange",
    "TaskCreate",
    "TaskUpdate",
]
